"""Glue between the database, the feed store and the pure aggregators."""
import datetime as dt
from functools import lru_cache
from typing import Iterable, Literal

from sqlalchemy.orm import Session

from capacity.core.config import settings
from capacity.crud.planning import list_raw_assignments
from capacity.db.models.engineer import Engineer
from capacity.db.models.license import License, ProjectLicense
from capacity.db.models.project import Project
from capacity.services.planning.catalog import Catalog
from capacity.services.planning.feed import AssignmentRecord, FeedResult, normalize_feed
from capacity.services.reports.capacity import classify_capacity, free_capacity_matrix
from capacity.services.reports.licenses import weekly_license_demand
from capacity.services.reports.revenue import (
    MonthlyRevenue,
    annual_revenue,
    month_totals,
    monthly_revenue_by_project,
    quarterly_revenue,
    revenue_kpis,
)
from capacity.services.timeline.holidays import Country, coerce_country, holidays_for_year
from capacity.services.timeline.weeks import (
    WeekMonthTable,
    holiday_coefficient,
    month_bounds,
    month_key,
    monthly_capacity_hours,
    parse_month_key,
    weekdays_in_month,
    week_of,
    weeks_in_range,
    working_days_in_month,
)

Period = Literal["month", "quarter", "year"]


@lru_cache
def _table(start_year: int, end_year: int, mode: str) -> WeekMonthTable:
    return WeekMonthTable.generate(start_year, end_year, mode)


def week_month_table() -> WeekMonthTable:
    return _table(settings.HORIZON_START_YEAR, settings.HORIZON_END_YEAR, settings.WEEK_MONTH_MODE)


def revenue_country() -> Country | None:
    """Country used for holiday proration; ``None`` when proration is off."""
    if not settings.HOLIDAY_PRORATION:
        return None
    return coerce_country(settings.COUNTRY)


def load_catalog(db: Session) -> Catalog:
    return Catalog.from_rows(
        engineers=db.query(Engineer).order_by(Engineer.id).all(),
        projects=db.query(Project).order_by(Project.id).all(),
        licenses=db.query(License).order_by(License.name).all(),
        links=db.query(ProjectLicense).order_by(ProjectLicense.id).all(),
    )


def fetch_feed(db: Session) -> FeedResult:
    engineers = load_catalog(db).engineers
    return normalize_feed(list_raw_assignments(db), engineers)


# -- revenue --------------------------------------------------------------

def monthly_revenue(records: Iterable[AssignmentRecord], catalog: Catalog) -> MonthlyRevenue:
    return monthly_revenue_by_project(
        records,
        catalog,
        week_month_table(),
        country=revenue_country(),
        default_rate=settings.DEFAULT_HOURLY_RATE,
        presales_default_hours=settings.PRESALES_DEFAULT_HOURS,
    )


def _in_year(key: str, year: int | None) -> bool:
    if year is None:
        return True
    return key.endswith(f"_{year}") or key == str(year)


def revenue_report(
    records: Iterable[AssignmentRecord], catalog: Catalog, period: Period = "month", year: int | None = None
) -> dict:
    monthly = monthly_revenue(records, catalog)
    if period == "quarter":
        data = quarterly_revenue(monthly)
    elif period == "year":
        data = annual_revenue(monthly)
    else:
        data = monthly
    data = {k: v for k, v in data.items() if _in_year(k, year)}
    return dict(periods=data, totals=month_totals(data))


def kpi_report(
    records: Iterable[AssignmentRecord], catalog: Catalog, year: int, month: int | None = None, top: int = 5
) -> dict:
    monthly = monthly_revenue(records, catalog)
    if month is not None:
        keys = [month_key(year, month)]
    else:
        keys = [month_key(year, m) for m in range(1, 13)]
    return revenue_kpis(monthly, catalog, keys, top=top)


# -- licenses -------------------------------------------------------------

def license_report(
    records: Iterable[AssignmentRecord], catalog: Catalog, week: str, include_tentative: bool = True
) -> list[dict]:
    demand = weekly_license_demand(
        records,
        week,
        catalog,
        excluded_engineers=settings.excluded_supplier_engineers,
        include_tentative=include_tentative,
    )
    out = []
    for name in sorted(demand):
        d = demand[name]
        out.append(
            dict(
                license=d.license,
                required=d.required,
                total_seats=d.total_seats,
                over_allocated=d.over_allocated,
                utilization_pct=d.utilization_pct,
                breakdown=[dict(project_code=code, count=n) for code, n in d.breakdown],
                breakdown_text=d.breakdown_text(),
            )
        )
    return out


# -- capacity -------------------------------------------------------------

def period_weeks(start_week: str, end_week: str) -> list[str]:
    """Week labels of the range that the horizon table maps."""
    table = week_month_table()
    return [w for w in weeks_in_range(start_week, end_week) if table.is_mapped(w)]


def capacity_report(records: Iterable[AssignmentRecord], catalog: Catalog, start_week: str, end_week: str) -> dict:
    weeks = period_weeks(start_week, end_week)
    caps = classify_capacity(records, catalog.engineers, weeks)
    rows = sorted((c.as_dict() for c in caps.values()), key=lambda r: (-r["free_weeks"], r["engineer_name"]))
    return dict(weeks=weeks, engineers=rows)


def free_matrix_report(records: Iterable[AssignmentRecord], catalog: Catalog, start_week: str, end_week: str) -> dict:
    weeks = period_weeks(start_week, end_week)
    return free_capacity_matrix(classify_capacity(records, catalog.engineers, weeks))


# -- calendar -------------------------------------------------------------

def month_calendar(key: str) -> dict | None:
    parsed = parse_month_key(key)
    if parsed is None:
        return None
    year, month = parsed
    country = coerce_country(settings.COUNTRY)
    first, last = month_bounds(year, month)
    working = working_days_in_month(year, month, country)
    holidays = sorted(d for d in holidays_for_year(year, country) if first <= d <= last and d.weekday() < 5)
    return dict(
        month=month_key(year, month),
        first_day=first,
        last_day=last,
        weekdays=weekdays_in_month(year, month),
        working_days=working,
        holidays=holidays,
        holiday_coefficient=holiday_coefficient(year, month, country),
        capacity_hours=monthly_capacity_hours(working, settings.HOURS_PER_DAY),
        weeks=week_month_table().weeks_for_month(month_key(year, month)),
    )


def current_week(today: dt.date | None = None) -> str:
    return week_of(today or dt.date.today())
