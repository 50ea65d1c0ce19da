"""Assignment feed normalisation.

Raw planning rows come from the database (or an import) keyed by engineer name
and/or id. This module resolves the engineer, classifies the project code and
collapses duplicate (engineer, week) rows into a single record.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from capacity.core.logging import dq_logger
from capacity.services.planning.catalog import EngineerRef
from capacity.services.planning.names import name_index, normalize_name
from capacity.services.timeline.weeks import parse_week_label, week_label


class AssignmentKind(str, Enum):
    project = "project"
    free = "free"
    vacation = "vacation"
    sick = "sick"
    overhead = "overhead"


_PSEUDO_CODES: dict[str, AssignmentKind] = {
    "": AssignmentKind.free,
    "free": AssignmentKind.free,
    "dovolena": AssignmentKind.vacation,
    "vacation": AssignmentKind.vacation,
    "nemoc": AssignmentKind.sick,
    "sick": AssignmentKind.sick,
    "over": AssignmentKind.overhead,
    "overhead": AssignmentKind.overhead,
    "rezie": AssignmentKind.overhead,
    "internal": AssignmentKind.overhead,
    "interni": AssignmentKind.overhead,
    "skoleni": AssignmentKind.overhead,
    "training": AssignmentKind.overhead,
}

# canonical code written back for pseudo kinds
PSEUDO_CODE_FOR_KIND = {
    AssignmentKind.free: "FREE",
    AssignmentKind.vacation: "DOVOLENÁ",
    AssignmentKind.sick: "NEMOC",
    AssignmentKind.overhead: "OVER",
}


def classify_project_code(code: Any) -> AssignmentKind:
    return _PSEUDO_CODES.get(normalize_name(code), AssignmentKind.project)


def _ts(v: dt.datetime | None) -> float:
    if v is None:
        return float("-inf")
    if v.tzinfo is None:
        v = v.replace(tzinfo=dt.timezone.utc)
    return v.timestamp()


@dataclass(frozen=True)
class RawAssignment:
    engineer_name: str | None
    cw: str
    year: int | None = None
    project: str | None = None
    hours: float | None = None
    engineer_id: int | None = None
    is_tentative: bool = False
    updated_at: dt.datetime | None = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RawAssignment":
        """Accepts both the table column names and the API field names."""
        def _get(*names):
            for n in names:
                if n in row and row[n] is not None:
                    return row[n]
            return None

        hours = _get("mh_tyden", "hours", "weekly_hours")
        year = _get("year")
        return cls(
            engineer_name=_get("konstrukter", "engineer_name", "engineer"),
            cw=str(_get("cw", "week") or ""),
            year=int(year) if year is not None else None,
            project=_get("projekt", "project", "project_code"),
            hours=float(hours) if hours is not None else None,
            engineer_id=_get("engineer_id"),
            is_tentative=bool(_get("is_tentative") or False),
            updated_at=_get("updated_at"),
        )

    @classmethod
    def from_entry(cls, e: Any) -> "RawAssignment":
        return cls(
            engineer_name=e.konstrukter,
            cw=e.cw,
            year=e.year,
            project=e.projekt,
            hours=e.mh_tyden,
            engineer_id=e.engineer_id,
            is_tentative=bool(e.is_tentative),
            updated_at=e.updated_at,
        )


@dataclass(frozen=True)
class AssignmentRecord:
    engineer_id: int
    engineer_name: str
    week_label: str
    week: int
    year: int
    project_code: str
    kind: AssignmentKind
    weekly_hours: float = 0.0
    is_tentative: bool = False
    updated_at: dt.datetime | None = None

    @property
    def key(self) -> tuple[int, str]:
        return self.engineer_id, self.week_label

    @property
    def is_free(self) -> bool:
        return self.kind is AssignmentKind.free


@dataclass(frozen=True)
class OrphanRecord:
    """A raw row whose engineer could not be resolved against the catalog."""

    raw: RawAssignment
    reason: str


@dataclass
class FeedResult:
    records: list[AssignmentRecord] = field(default_factory=list)
    orphans: list[OrphanRecord] = field(default_factory=list)


class EngineerResolver:
    """Id first, then the normalized display name / slug."""

    def __init__(self, engineers: Iterable[EngineerRef]):
        engineers = list(engineers)
        self._by_id = {e.id: e for e in engineers}
        self._by_name = name_index(engineers)

    def resolve(self, engineer_id: Any = None, name: str | None = None) -> EngineerRef | None:
        if engineer_id is not None:
            e = self._by_id.get(engineer_id)
            if e is None and isinstance(engineer_id, str) and engineer_id.isdigit():
                e = self._by_id.get(int(engineer_id))
            if e is not None:
                return e
        key = normalize_name(name)
        if key:
            return self._by_name.get(key)
        return None


def to_record(raw: RawAssignment, engineer: EngineerRef, week: int, year: int) -> AssignmentRecord:
    code = (raw.project or "").strip()
    return AssignmentRecord(
        engineer_id=engineer.id,
        engineer_name=engineer.display_name,
        week_label=week_label(week, year),
        week=week,
        year=year,
        project_code=code,
        kind=classify_project_code(code),
        weekly_hours=float(raw.hours or 0.0),
        is_tentative=bool(raw.is_tentative),
        updated_at=raw.updated_at,
    )


def _preference(rec: AssignmentRecord) -> tuple:
    # non-FREE beats FREE, then the newest update, then a content tie-break
    return (
        not rec.is_free,
        _ts(rec.updated_at),
        rec.project_code,
        rec.weekly_hours,
        rec.is_tentative,
    )


def normalize_feed(rows: Iterable[RawAssignment], engineers: Iterable[EngineerRef]) -> FeedResult:
    """Resolve, classify and deduplicate raw rows.

    The output does not depend on the order of ``rows``: records are sorted by
    (year, week, engineer) and duplicates are resolved with a total order.
    """
    resolver = EngineerResolver(engineers)
    result = FeedResult()
    best: dict[tuple[int, str], AssignmentRecord] = {}

    for raw in rows:
        parsed = parse_week_label(raw.cw, default_year=raw.year)
        if parsed is None:
            result.orphans.append(OrphanRecord(raw=raw, reason="invalid_week"))
            continue
        engineer = resolver.resolve(raw.engineer_id, raw.engineer_name)
        if engineer is None:
            result.orphans.append(OrphanRecord(raw=raw, reason="unknown_engineer"))
            continue
        rec = to_record(raw, engineer, *parsed)
        current = best.get(rec.key)
        if current is None or _preference(rec) > _preference(current):
            best[rec.key] = rec

    result.records = sorted(best.values(), key=lambda r: (r.year, r.week, r.engineer_id))
    result.orphans.sort(key=lambda o: (o.reason, o.raw.engineer_name or "", o.raw.cw, o.raw.year or 0))

    for o in result.orphans:
        dq_logger.warning(
            "orphan_planning_row",
            reason=o.reason,
            engineer=o.raw.engineer_name,
            engineer_id=o.raw.engineer_id,
            cw=o.raw.cw,
            year=o.raw.year,
        )
    return result
