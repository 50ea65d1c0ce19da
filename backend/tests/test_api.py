"""Router tests with FastAPI TestClient and dependency overrides; no database."""
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from capacity.api.routers import planning, reports
from capacity.core.config import settings
from capacity.core.deps import get_catalog, get_db, get_records, get_refresher, get_store
from capacity.services.planning.feed import FeedResult
from capacity.services.planning.state import DebouncedRefresher, FeedStore


@pytest.fixture
def records(make_record):
    return [make_record(engineer_id=i, name=f"Engineer {i}") for i in range(1, 5)]


@pytest.fixture
def store(records):
    s = FeedStore()
    s.reconcile(FeedResult(records=records), s.begin_fetch())
    return s


@pytest.fixture
def refresher():
    return MagicMock(spec=DebouncedRefresher)


@pytest.fixture
def client(monkeypatch, catalog, records, store, refresher):
    monkeypatch.setattr(settings, "WEEK_MONTH_MODE", "majority")
    monkeypatch.setattr(settings, "HOLIDAY_PRORATION", False)
    monkeypatch.setattr(settings, "COUNTRY", "CZ")

    app = FastAPI()
    app.include_router(reports.router, prefix="/reports")
    app.include_router(planning.router, prefix="/planning")
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_records] = lambda: records
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_refresher] = lambda: refresher
    app.dependency_overrides[get_db] = lambda: MagicMock()
    return TestClient(app)


def test_revenue_monthly(client):
    r = client.get("/reports/revenue/monthly", params={"year": 2025})
    assert r.status_code == 200
    body = r.json()
    assert body["periods"] == {"říjen_2025": {"ST_FEM": pytest.approx(4 * 32400)}}
    assert body["totals"]["říjen_2025"] == pytest.approx(129600)


def test_revenue_quarterly_and_annual(client):
    q = client.get("/reports/revenue/quarterly").json()
    assert list(q["periods"]) == ["Q4_2025"]
    a = client.get("/reports/revenue/annual").json()
    assert a["totals"] == {"2025": pytest.approx(129600)}


def test_revenue_kpi(client):
    body = client.get("/reports/revenue/kpi", params={"year": 2025, "month": 10}).json()
    assert body["total_revenue"] == pytest.approx(129600)
    assert body["realizace_pct"] == pytest.approx(100.0)
    assert body["top_projects"][0]["customer"] == "Škoda Transportation"


def test_license_weekly(client):
    r = client.get("/reports/licenses/weekly", params={"week": "cw40-2025"})
    assert r.status_code == 200
    body = r.json()
    assert body["week"] == "CW40-2025"
    [autocad] = body["licenses"]
    assert autocad["required"] == 4
    assert autocad["breakdown"] == [{"project_code": "ST_FEM", "count": 2}]
    assert autocad["over_allocated"] is False


def test_license_weekly_rejects_bad_week(client):
    assert client.get("/reports/licenses/weekly", params={"week": "40"}).status_code == 400


def test_capacity(client):
    body = client.get("/reports/capacity", params={"start": "CW40-2025", "end": "CW43-2025"}).json()
    assert body["weeks"] == ["CW40-2025", "CW41-2025", "CW42-2025", "CW43-2025"]
    rows = {r["engineer_id"]: r for r in body["engineers"]}
    assert rows[1]["free_weeks"] == 3
    assert rows[1]["dominant_label"] == "mostly_free"
    assert rows[5]["free_percentage"] == 100.0


def test_free_matrix(client):
    body = client.get("/reports/capacity/free-matrix", params={"start": "CW40-2025", "end": "CW41-2025"}).json()
    assert body["weeks"]["CW40-2025"]["free"] == 1
    assert body["weeks"]["CW41-2025"]["free"] == 5
    assert body["total_free_weeks"] == 6


def test_calendar_month(client):
    body = client.get("/reports/calendar/month", params={"month": "říjen_2025"}).json()
    assert body["weekdays"] == 23
    assert body["working_days"] == 22
    assert body["holidays"] == ["2025-10-28"]
    assert body["capacity_hours"] == 176.0
    assert client.get("/reports/calendar/month", params={"month": "oct"}).status_code == 400


def test_planning_feed(client):
    body = client.get("/planning", params={"engineer_id": 2}).json()
    assert body["version"] == 1
    assert [r["engineer_id"] for r in body["records"]] == [2]
    assert body["records"][0]["kind"] == "project"


def test_put_entry_patches_store_and_schedules_refresh(client, monkeypatch, store, refresher):
    entry = MagicMock(projekt="DOVOLENÁ", mh_tyden=36.0, is_tentative=False)
    upsert = MagicMock(return_value=(entry, []))
    monkeypatch.setattr(planning, "upsert_cell", upsert)
    monkeypatch.setattr(planning, "get_engineer", lambda db, engineer_id: MagicMock(id=engineer_id))

    r = client.put(
        "/planning/entry",
        json={"engineer_name": "dvorakova petra", "cw": "CW41", "year": 2025, "project": "DOVOLENÁ"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["engineer_id"] == 2
    assert body["week_label"] == "CW41-2025"
    assert body["kind"] == "vacation"
    assert body["weekly_hours"] == 36.0

    assert upsert.call_args.args[2:5] == ("Dvořáková Petra", 41, 2025)
    assert upsert.call_args.kwargs["default_hours"] == settings.DEFAULT_WEEKLY_HOURS
    refresher.request.assert_called_once_with("edit")
    assert any(rec.key == (2, "CW41-2025") for rec in store.records())


def test_put_entry_errors(client, monkeypatch):
    monkeypatch.setattr(planning, "upsert_cell", MagicMock())
    assert client.put("/planning/entry", json={"engineer_id": 1, "cw": "CW40"}).status_code == 400
    assert client.put("/planning/entry", json={"engineer_id": 1, "cw": "CW53-2025"}).status_code == 400
    assert client.put("/planning/entry", json={"engineer_name": "Nikdo", "cw": "CW40-2025"}).status_code == 404


def test_timeline_and_orphans(client):
    timeline = client.get("/planning/timeline").json()
    assert timeline[0]["applied"] is True
    assert client.get("/planning/orphans").json() == []
