"""Process-wide owner of the normalized assignment feed.

Edits are patched into the local feed immediately and reconciled by the first
accepted fetch that started after them. Only the most recently *requested*
fetch may replace the feed; results of superseded fetches are dropped even if
they arrive last.
"""
import asyncio
import dataclasses
import datetime as dt
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Any, Awaitable, Callable

from capacity.core.logging import logger
from capacity.services.planning.feed import (
    AssignmentRecord,
    FeedResult,
    OrphanRecord,
    classify_project_code,
)
from capacity.services.timeline.weeks import parse_week_label, week_label

FeedKey = tuple[int, str]  # (engineer id, week label)

_PATCHABLE = {"project_code", "weekly_hours", "is_tentative", "engineer_name"}


@dataclass
class FetchEvent:
    id: int
    source: str
    started_at: dt.datetime
    ended_at: dt.datetime | None = None
    applied: bool = False
    error: str | None = None


@dataclass(frozen=True)
class FeedSnapshot:
    version: int
    records: tuple[AssignmentRecord, ...]
    orphans: tuple[OrphanRecord, ...]


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class FeedStore:
    def __init__(self, timeline_size: int = 20):
        self._lock = Lock()
        self._records: dict[FeedKey, AssignmentRecord] = {}
        self._orphans: list[OrphanRecord] = []
        self._version = 0
        self._latest_token = 0
        self._applied_token = 0
        self._timeline: deque[FetchEvent] = deque(maxlen=timeline_size)
        # optimistic edits by key, with the edit sequence number they were made at
        self._edits: dict[FeedKey, tuple[int, AssignmentRecord]] = {}
        self._edit_seq = 0
        self._marks: dict[int, int] = {}  # fetch token -> edit seq when it started

    # -- fetch lifecycle -------------------------------------------------

    def begin_fetch(self, source: str = "manual") -> int:
        with self._lock:
            self._latest_token += 1
            token = self._latest_token
            self._marks[token] = self._edit_seq
            self._timeline.append(FetchEvent(id=token, source=source, started_at=_now()))
        logger.debug("feed_fetch_started", token=token, source=source)
        return token

    def _event(self, token: int) -> FetchEvent | None:
        for ev in self._timeline:
            if ev.id == token:
                return ev
        return None

    def reconcile(self, result: FeedResult, token: int) -> bool:
        """Replace the feed with ``result`` if ``token`` is the latest fetch.

        Optimistic edits made after the fetch started are laid over its result;
        older ones are assumed to be in it and are forgotten.
        """
        with self._lock:
            ev = self._event(token)
            mark = self._marks.pop(token, 0)
            if ev is not None:
                ev.ended_at = _now()
            if token != self._latest_token:
                logger.info("feed_fetch_discarded", token=token, latest=self._latest_token)
                return False
            records = {r.key: r for r in result.records}
            self._edits = {k: v for k, v in self._edits.items() if v[0] > mark}
            for _, rec in self._edits.values():
                records[rec.key] = rec
            self._records = records
            kept = len(self._edits)
            self._orphans = list(result.orphans)
            self._applied_token = token
            self._version += 1
            if ev is not None:
                ev.applied = True
            rows = len(self._records)
        logger.info("feed_reconciled", token=token, rows=rows, orphans=len(result.orphans), pending_edits=kept)
        return True

    def fail_fetch(self, token: int, error: Exception | str) -> None:
        """The last accepted feed stays in place."""
        with self._lock:
            self._marks.pop(token, None)
            ev = self._event(token)
            if ev is not None:
                ev.ended_at = _now()
                ev.error = str(error)
        logger.warning("feed_fetch_failed", token=token, error=str(error))

    # -- local edits -----------------------------------------------------

    def apply_optimistic_edit(self, key: FeedKey, patch: dict[str, Any]) -> AssignmentRecord:
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise ValueError(f"unsupported fields in patch: {sorted(unknown)}")
        engineer_id, label = key
        parsed = parse_week_label(label)
        if parsed is None:
            raise ValueError(f"invalid week label: {label}")
        label = week_label(*parsed)

        with self._lock:
            current = self._records.get((engineer_id, label))
            if current is None:
                current = AssignmentRecord(
                    engineer_id=engineer_id,
                    engineer_name=patch.get("engineer_name") or "",
                    week_label=label,
                    week=parsed[0],
                    year=parsed[1],
                    project_code="",
                    kind=classify_project_code(""),
                )
            changes = dict(patch)
            if "project_code" in changes:
                changes["project_code"] = (changes["project_code"] or "").strip()
                changes["kind"] = classify_project_code(changes["project_code"])
            if "weekly_hours" in changes:
                changes["weekly_hours"] = float(changes["weekly_hours"] or 0.0)
            updated = dataclasses.replace(current, updated_at=_now(), **changes)
            self._records[updated.key] = updated
            self._edit_seq += 1
            self._edits[updated.key] = (self._edit_seq, updated)
            self._version += 1
        logger.debug("feed_optimistic_edit", engineer_id=engineer_id, week=label, fields=sorted(patch))
        return updated

    # -- reads -----------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def applied_token(self) -> int:
        return self._applied_token

    def records(self) -> list[AssignmentRecord]:
        return list(self.snapshot().records)

    def snapshot(self) -> FeedSnapshot:
        with self._lock:
            recs = sorted(self._records.values(), key=lambda r: (r.year, r.week, r.engineer_id))
            return FeedSnapshot(version=self._version, records=tuple(recs), orphans=tuple(self._orphans))

    def timeline(self) -> list[FetchEvent]:
        with self._lock:
            return [dataclasses.replace(ev) for ev in self._timeline]


Fetcher = Callable[[], Awaitable[FeedResult]]


class DebouncedRefresher:
    """Coalesces bursts of refresh requests into one fetch per quiet window."""

    def __init__(self, store: FeedStore, fetch: Fetcher, delay_ms: int = 200):
        self._store = store
        self._fetch = fetch
        self._delay = delay_ms / 1000.0
        self._pending: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._coalesced = 0

    @property
    def coalesced(self) -> int:
        """Requests absorbed by a later one since the last fetch started."""
        return self._coalesced

    def request(self, source: str = "notify") -> None:
        """Schedule a refresh; must be called from the running event loop."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            self._coalesced += 1
        self._pending = asyncio.get_running_loop().create_task(self._delayed(source))

    async def _delayed(self, source: str) -> None:
        await asyncio.sleep(self._delay)
        # past the quiet window: later requests must not cancel this fetch
        task = asyncio.current_task()
        if self._pending is task:
            self._pending = None
        if task is not None:
            self._inflight.add(task)
        try:
            self._coalesced = 0
            await self.refresh_now(source)
        finally:
            if task is not None:
                self._inflight.discard(task)

    async def refresh_now(self, source: str = "manual") -> bool:
        token = self._store.begin_fetch(source)
        try:
            result = await self._fetch()
        except asyncio.CancelledError:
            self._store.fail_fetch(token, "cancelled")
            raise
        except Exception as e:
            logger.exception("feed_refresh_failed", token=token, source=source)
            self._store.fail_fetch(token, e)
            return False
        return self._store.reconcile(result, token)

    async def wait_idle(self) -> None:
        while True:
            tasks = [t for t in (self._pending, *self._inflight) if t is not None and not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        """Cancel the pending refresh and any fetch still running."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        for task in self._inflight:
            task.cancel()
