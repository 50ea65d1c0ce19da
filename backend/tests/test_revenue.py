import datetime as dt

import pytest

from capacity.services.planning.catalog import Catalog, ProjectRef
from capacity.services.reports.revenue import (
    annual_revenue,
    month_totals,
    monthly_revenue_by_project,
    presales_revenue,
    quarterly_revenue,
    resolve_hourly_rate,
    revenue_kpis,
)
from capacity.services.timeline.weeks import WeekMonthTable


@pytest.fixture
def majority():
    return WeekMonthTable.generate(2025, 2026, mode="majority")


@pytest.fixture
def split():
    return WeekMonthTable.generate(2025, 2026)


def _catalog(*projects):
    return Catalog(projects={p.code: p for p in projects})


def test_single_assignment_in_october(catalog, majority, make_record):
    out = monthly_revenue_by_project([make_record(hours=36)], catalog, majority, country=None)
    assert out == {"říjen_2025": {"ST_FEM": pytest.approx(32400)}}


def test_holiday_coefficient_reduces_october(catalog, majority, make_record):
    out = monthly_revenue_by_project([make_record(hours=36)], catalog, majority, country="CZ")
    # 22 working days out of 23 weekdays
    assert out["říjen_2025"]["ST_FEM"] == pytest.approx(32400 * 22 / 23)


def test_split_week_conserves_revenue(split, make_record):
    catalog = _catalog(ProjectRef(code="P", average_hourly_rate=1000))
    out = monthly_revenue_by_project([make_record(project="P", hours=40)], catalog, split, country=None)
    assert out["září_2025"]["P"] == pytest.approx(16000)
    assert out["říjen_2025"]["P"] == pytest.approx(24000)
    assert sum(month_totals(out).values()) == pytest.approx(40 * 1000)


def test_hand_authored_split_is_applied_per_ratio(make_record):
    table = WeekMonthTable.from_mapping({"CW40-2025": {"září_2025": 0.6, "říjen_2025": 0.4}})
    catalog = _catalog(ProjectRef(code="P", average_hourly_rate=1000))
    out = monthly_revenue_by_project([make_record(project="P", hours=40)], catalog, table, country=None)
    assert out["září_2025"]["P"] == pytest.approx(24000)
    assert out["říjen_2025"]["P"] == pytest.approx(16000)


def test_tentative_contributes_nothing(catalog, majority, make_record):
    out = monthly_revenue_by_project([make_record(tentative=True)], catalog, majority, country=None)
    assert out == {}


def test_pseudo_codes_and_unknowns_are_skipped(catalog, majority, make_record):
    records = [
        make_record(project="FREE"),
        make_record(engineer_id=2, project="DOVOLENÁ"),
        make_record(engineer_id=3, project="UNKNOWN"),
        make_record(engineer_id=4, week="CW10-2030"),
        make_record(engineer_id=5, hours=0),
    ]
    out = monthly_revenue_by_project(records, catalog, majority, country=None)
    assert out == {"říjen_2025": {"ST_FEM": 0.0}}


def test_rate_resolution():
    assert resolve_hourly_rate(ProjectRef(code="A", project_type="WP", average_hourly_rate=900)) == 900
    assert resolve_hourly_rate(ProjectRef(code="A", project_type="WP", budget=5000)) is None
    assert resolve_hourly_rate(ProjectRef(code="A", project_type="Hodinovka", budget=700)) == 700
    assert resolve_hourly_rate(ProjectRef(code="A", project_type="Hodinovka"), default_rate=650) == 650
    assert resolve_hourly_rate(ProjectRef(code="A", project_type="Hodinovka")) is None


def test_missing_rate_omits_project(majority, make_record):
    catalog = _catalog(ProjectRef(code="NORATE", project_type="WP"))
    assert monthly_revenue_by_project([make_record(project="NORATE")], catalog, majority, country=None) == {}


def test_presales_probability(majority, make_record):
    catalog = _catalog(
        ProjectRef(code="PRE", average_hourly_rate=1000, project_status="Pre sales", probability=40)
    )
    out = monthly_revenue_by_project([make_record(project="PRE", hours=10)], catalog, majority, country=None)
    assert out["říjen_2025"]["PRE"] == pytest.approx(4000)


def test_presales_synthesis_spreads_by_working_days(majority):
    pre = ProjectRef(
        code="PRE",
        project_type="WP",
        average_hourly_rate=1000,
        budget=100,
        project_status="Pre sales",
        probability=50,
        presales_start_date=dt.date(2025, 10, 1),
        presales_end_date=dt.date(2025, 11, 30),
    )
    out = monthly_revenue_by_project([], _catalog(pre), majority, country=None)
    # 23 weekdays in October, 20 in November
    assert out["říjen_2025"]["PRE"] == pytest.approx(100 * 23 / 43 * 1000 * 0.5)
    assert out["listopad_2025"]["PRE"] == pytest.approx(100 * 20 / 43 * 1000 * 0.5)
    assert sum(month_totals(out).values()) == pytest.approx(50000)


def test_presales_synthesis_hourly_uses_default_hours():
    pre = ProjectRef(
        code="PRE",
        project_type="Hodinovka",
        average_hourly_rate=800,
        project_status="Pre sales",
        probability=25,
        presales_start_date=dt.date(2025, 10, 6),
        presales_end_date=dt.date(2025, 10, 10),
    )
    assert presales_revenue(pre, country=None) == {"říjen_2025": pytest.approx(100 * 800 * 0.25)}
    assert sum(presales_revenue(pre, country=None, default_hours=40).values()) == pytest.approx(8000)


def test_presales_synthesis_skipped_when_rows_exist(majority, make_record):
    pre = ProjectRef(
        code="PRE",
        average_hourly_rate=1000,
        budget=100,
        project_status="Pre sales",
        probability=100,
        presales_start_date=dt.date(2025, 10, 1),
        presales_end_date=dt.date(2025, 11, 30),
    )
    out = monthly_revenue_by_project([make_record(project="PRE", hours=10)], _catalog(pre), majority, country=None)
    assert out == {"říjen_2025": {"PRE": pytest.approx(10000)}}


def test_presales_without_range_or_not_presales():
    assert presales_revenue(ProjectRef(code="A", average_hourly_rate=1, budget=10, project_status="Pre sales")) == {}
    assert presales_revenue(
        ProjectRef(code="A", average_hourly_rate=1, budget=10,
                   presales_start_date=dt.date(2025, 1, 1), presales_end_date=dt.date(2025, 2, 1))
    ) == {}


def test_rollups():
    monthly = {
        "září_2025": {"A": 100.0},
        "říjen_2025": {"A": 50.0, "B": 25.0},
        "leden_2026": {"B": 10.0},
    }
    assert quarterly_revenue(monthly) == {
        "Q3_2025": {"A": 100.0},
        "Q4_2025": {"A": 50.0, "B": 25.0},
        "Q1_2026": {"B": 10.0},
    }
    assert annual_revenue(monthly) == {"2025": {"A": 150.0, "B": 25.0}, "2026": {"B": 10.0}}


def test_revenue_kpis():
    catalog = _catalog(
        ProjectRef(code="A", name="Alpha", customer="Škoda"),
        ProjectRef(code="B", name="Beta", project_status="Pre sales"),
    )
    monthly = {"září_2025": {"A": 300.0}, "říjen_2025": {"A": 300.0, "B": 400.0}}
    kpi = revenue_kpis(monthly, catalog, ["září_2025", "říjen_2025"])
    assert kpi["total_revenue"] == 1000.0
    assert kpi["realizace_revenue"] == 600.0
    assert kpi["presales_revenue"] == 400.0
    assert kpi["realizace_pct"] == pytest.approx(60.0)
    assert [p["code"] for p in kpi["top_projects"]] == ["A", "B"]
    assert kpi["top_projects"][1]["customer"] == "N/A"

    empty = revenue_kpis({}, catalog, ["leden_2025"])
    assert empty["total_revenue"] == 0
    assert empty["presales_pct"] == 0.0
