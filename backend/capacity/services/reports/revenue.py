"""Revenue per month and project.

All amounts are floats in the currency of the stored rates; nothing is rounded
here.
"""
from typing import Iterable

from capacity.services.planning.catalog import (
    PROJECT_TYPE_HOURLY,
    PROJECT_TYPE_WP,
    Catalog,
    ProjectRef,
)
from capacity.services.planning.feed import AssignmentKind, AssignmentRecord
from capacity.services.timeline.holidays import Country, coerce_country
from capacity.services.timeline.weeks import (
    WeekMonthTable,
    holiday_coefficient,
    month_bounds,
    month_key,
    months_between,
    parse_month_key,
    quarter_key,
    working_days_between,
)

MonthlyRevenue = dict[str, dict[str, float]]

DEFAULT_PRESALES_HOURS = 100.0


def resolve_hourly_rate(project: ProjectRef, default_rate: float | None = None) -> float | None:
    if project.project_type == PROJECT_TYPE_WP:
        return project.average_hourly_rate or None
    if project.project_type == PROJECT_TYPE_HOURLY:
        return project.average_hourly_rate or project.budget or default_rate
    return None


def probability_coefficient(project: ProjectRef) -> float:
    if not project.is_presales or project.probability is None:
        return 1.0
    return project.probability / 100.0


def _add(out: MonthlyRevenue, key: str, code: str, amount: float) -> None:
    bucket = out.setdefault(key, {})
    bucket[code] = bucket.get(code, 0.0) + amount


class _HolidayCoefficients:
    def __init__(self, country: Country | None):
        self.country = country
        self._cache: dict[str, float] = {}

    def __call__(self, key: str) -> float:
        if self.country is None:
            return 1.0
        if key not in self._cache:
            parsed = parse_month_key(key)
            self._cache[key] = holiday_coefficient(parsed[0], parsed[1], self.country) if parsed else 1.0
        return self._cache[key]


def monthly_revenue_by_project(
    records: Iterable[AssignmentRecord],
    catalog: Catalog,
    table: WeekMonthTable,
    country: Country | str | None = Country.cz,
    default_rate: float | None = None,
    presales_default_hours: float = DEFAULT_PRESALES_HOURS,
    synthesize_presales: bool = True,
) -> MonthlyRevenue:
    """``{month key: {project code: amount}}``.

    ``country=None`` disables holiday proration (coefficient 1.0).
    """
    country = coerce_country(country)
    coef = _HolidayCoefficients(country)
    out: MonthlyRevenue = {}
    codes_with_rows: set[str] = set()

    for rec in records:
        if rec.project_code:
            codes_with_rows.add(rec.project_code)
        if rec.is_tentative or rec.kind is not AssignmentKind.project:
            continue
        project = catalog.project(rec.project_code)
        if project is None:
            continue
        rate = resolve_hourly_rate(project, default_rate)
        if rate is None:
            continue
        prob = probability_coefficient(project)
        for key, ratio in table.months_for_week(rec.week_label):
            hours = rec.weekly_hours * ratio
            _add(out, key, project.code, hours * rate * coef(key) * prob)

    if synthesize_presales:
        for project in catalog.projects.values():
            if project.code in codes_with_rows:
                continue
            for key, amount in presales_revenue(project, country, default_rate, presales_default_hours).items():
                _add(out, key, project.code, amount)
    return out


def presales_revenue(
    project: ProjectRef,
    country: Country | str | None = Country.cz,
    default_rate: float | None = None,
    default_hours: float = DEFAULT_PRESALES_HOURS,
) -> dict[str, float]:
    """Estimated revenue of a presales project that has no planning rows yet.

    The estimate (WP: budget read as hours, Hodinovka: ``default_hours``) is
    spread over the months of the presales range by working-day share.
    """
    if not project.is_presales:
        return {}
    start, end = project.presales_start_date, project.presales_end_date
    if start is None or end is None:
        return {}
    rate = resolve_hourly_rate(project, default_rate)
    if rate is None:
        return {}
    if project.project_type == PROJECT_TYPE_WP:
        total_hours = project.budget or 0.0
    else:
        total_hours = default_hours
    if total_hours <= 0:
        return {}
    if end < start:
        start, end = end, start

    country = coerce_country(country)
    shares: dict[str, int] = {}
    for year, month in months_between(start, end):
        m_first, m_last = month_bounds(year, month)
        first, last = max(start, m_first), min(end, m_last)
        shares[month_key(year, month)] = working_days_between(first, last, country)
    total_days = sum(shares.values())
    if total_days == 0:
        return {}

    prob = probability_coefficient(project)
    return {
        key: total_hours * (days / total_days) * rate * prob
        for key, days in shares.items()
        if days
    }


# -- rollups --------------------------------------------------------------

def rollup(monthly: MonthlyRevenue, month_keys: Iterable[str]) -> dict[str, float]:
    out: dict[str, float] = {}
    for key in month_keys:
        for code, amount in monthly.get(key, {}).items():
            out[code] = out.get(code, 0.0) + amount
    return out


def _rollup_by(monthly: MonthlyRevenue, bucket) -> MonthlyRevenue:
    out: MonthlyRevenue = {}
    for key, projects in monthly.items():
        parsed = parse_month_key(key)
        if parsed is None:
            continue
        for code, amount in projects.items():
            _add(out, bucket(*parsed), code, amount)
    return out


def quarterly_revenue(monthly: MonthlyRevenue) -> MonthlyRevenue:
    """``{"Q4_2025": {code: amount}}``."""
    return _rollup_by(monthly, quarter_key)


def annual_revenue(monthly: MonthlyRevenue) -> MonthlyRevenue:
    return _rollup_by(monthly, lambda year, month: str(year))


def month_totals(monthly: MonthlyRevenue) -> dict[str, float]:
    return {key: sum(projects.values()) for key, projects in monthly.items()}


def revenue_kpis(monthly: MonthlyRevenue, catalog: Catalog, month_keys: Iterable[str], top: int = 5) -> dict:
    """Total, delivery vs presales split and the top projects for a set of months."""
    per_project = rollup(monthly, month_keys)
    total = sum(per_project.values())
    presales = 0.0
    for code, amount in per_project.items():
        p = catalog.project(code)
        if p is not None and p.is_presales:
            presales += amount
    delivery = total - presales

    ranked = sorted(per_project.items(), key=lambda kv: (-kv[1], kv[0]))[:top]
    top_projects = []
    for code, amount in ranked:
        p = catalog.project(code)
        top_projects.append(
            dict(
                code=code,
                name=p.name if p and p.name else code,
                customer=(p.customer if p and p.customer else "N/A"),
                revenue=amount,
            )
        )
    return dict(
        total_revenue=total,
        realizace_revenue=delivery,
        presales_revenue=presales,
        realizace_pct=(delivery / total * 100.0) if total > 0 else 0.0,
        presales_pct=(presales / total * 100.0) if total > 0 else 0.0,
        top_projects=top_projects,
    )
