import asyncio

import pytest

from capacity.services.planning.feed import AssignmentKind, FeedResult
from capacity.services.planning.state import DebouncedRefresher, FeedStore


def test_only_latest_requested_fetch_is_applied(make_record):
    store = FeedStore()
    t1 = store.begin_fetch("poll")
    t2 = store.begin_fetch("notify")

    assert store.reconcile(FeedResult(records=[make_record(project="NEW")]), t2)
    # the older fetch arrives last and must not win
    assert not store.reconcile(FeedResult(records=[make_record(project="OLD")]), t1)

    assert [r.project_code for r in store.records()] == ["NEW"]
    assert store.applied_token == t2
    events = {ev.id: ev for ev in store.timeline()}
    assert events[t2].applied and not events[t1].applied
    assert events[t1].ended_at is not None


def test_superseded_fetch_is_dropped_even_if_it_finishes_first(make_record):
    store = FeedStore()
    t1 = store.begin_fetch()
    store.begin_fetch()
    assert not store.reconcile(FeedResult(records=[make_record()]), t1)
    assert store.records() == []
    assert store.version == 0


def test_failed_fetch_keeps_last_feed(make_record):
    store = FeedStore()
    store.reconcile(FeedResult(records=[make_record()]), store.begin_fetch())
    token = store.begin_fetch()
    store.fail_fetch(token, RuntimeError("db down"))
    assert len(store.records()) == 1
    assert store.timeline()[-1].error == "db down"


def test_optimistic_edit_patches_and_creates(make_record):
    store = FeedStore()
    store.reconcile(FeedResult(records=[make_record(engineer_id=1, project="ST_FEM")]), store.begin_fetch())
    version = store.version

    updated = store.apply_optimistic_edit((1, "CW40-2025"), {"project_code": "DOVOLENÁ"})
    assert updated.kind is AssignmentKind.vacation
    assert updated.weekly_hours == 36.0
    assert store.version == version + 1

    created = store.apply_optimistic_edit((2, "cw41-2025"), {"project_code": "ST_KAB", "weekly_hours": "20"})
    assert created.week_label == "CW41-2025"
    assert created.weekly_hours == 20.0
    assert created.kind is AssignmentKind.project
    assert len(store.records()) == 2


def test_optimistic_edit_is_replaced_by_next_accepted_fetch(make_record):
    store = FeedStore()
    store.apply_optimistic_edit((1, "CW40-2025"), {"project_code": "LOCAL"})
    store.reconcile(FeedResult(records=[make_record(project="SERVER")]), store.begin_fetch())
    assert [r.project_code for r in store.records()] == ["SERVER"]


def test_edit_made_while_fetch_runs_survives_its_result(make_record):
    store = FeedStore()
    token = store.begin_fetch()
    store.apply_optimistic_edit((1, "CW40-2025"), {"project_code": "LOCAL"})
    assert store.reconcile(FeedResult(records=[make_record(project="SERVER")]), token)
    assert [r.project_code for r in store.records()] == ["LOCAL"]

    # a fetch started after the edit carries the saved value
    store.reconcile(FeedResult(records=[make_record(project="SAVED")]), store.begin_fetch())
    assert [r.project_code for r in store.records()] == ["SAVED"]


def test_optimistic_edit_rejects_bad_input():
    store = FeedStore()
    with pytest.raises(ValueError):
        store.apply_optimistic_edit((1, "CW40-2025"), {"engineer_id": 3})
    with pytest.raises(ValueError):
        store.apply_optimistic_edit((1, "week 40"), {"project_code": "X"})


@pytest.mark.asyncio
async def test_debounce_coalesces_bursts(make_record):
    store = FeedStore()
    calls = []

    async def fetch():
        calls.append(1)
        return FeedResult(records=[make_record()])

    refresher = DebouncedRefresher(store, fetch, delay_ms=30)
    for _ in range(5):
        refresher.request("notify")
    await refresher.wait_idle()

    assert len(calls) == 1
    assert store.version == 1
    assert [ev.source for ev in store.timeline()] == ["notify"]


@pytest.mark.asyncio
async def test_requests_in_separate_windows_fetch_separately(make_record):
    store = FeedStore()
    calls = []

    async def fetch():
        calls.append(1)
        return FeedResult(records=[make_record()])

    refresher = DebouncedRefresher(store, fetch, delay_ms=10)
    refresher.request()
    await refresher.wait_idle()
    refresher.request()
    await refresher.wait_idle()
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_slow_superseded_fetch_is_discarded(make_record):
    store = FeedStore()
    gate = asyncio.Event()
    calls = []

    async def fetch():
        calls.append(1)
        if len(calls) == 1:
            await gate.wait()
            return FeedResult(records=[make_record(project="OLD")])
        return FeedResult(records=[make_record(project="NEW")])

    refresher = DebouncedRefresher(store, fetch, delay_ms=0)
    first = asyncio.create_task(refresher.refresh_now("poll"))
    await asyncio.sleep(0)
    assert await refresher.refresh_now("notify") is True
    gate.set()
    assert await first is False
    assert [r.project_code for r in store.records()] == ["NEW"]


@pytest.mark.asyncio
async def test_fetch_failure_is_logged_not_raised(make_record):
    store = FeedStore()
    store.reconcile(FeedResult(records=[make_record()]), store.begin_fetch())

    async def fetch():
        raise ConnectionError("unreachable")

    refresher = DebouncedRefresher(store, fetch)
    assert await refresher.refresh_now() is False
    assert len(store.records()) == 1
    assert store.timeline()[-1].error == "unreachable"


@pytest.mark.asyncio
async def test_close_cancels_pending_refresh(make_record):
    store = FeedStore()
    calls = []

    async def fetch():
        calls.append(1)
        return FeedResult()

    refresher = DebouncedRefresher(store, fetch, delay_ms=50)
    refresher.request()
    refresher.close()
    await asyncio.sleep(0.1)
    assert calls == []


@pytest.mark.asyncio
async def test_close_cancels_running_fetch(make_record):
    store = FeedStore()
    store.reconcile(FeedResult(records=[make_record()]), store.begin_fetch())
    started = asyncio.Event()

    async def fetch():
        started.set()
        await asyncio.Event().wait()

    refresher = DebouncedRefresher(store, fetch, delay_ms=0)
    refresher.request("shutdown")
    await started.wait()
    refresher.close()
    await refresher.wait_idle()

    assert store.timeline()[-1].error == "cancelled"
    assert len(store.records()) == 1
