"""Weekly license seat demand."""
import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Iterable

from capacity.services.planning.catalog import Catalog, LicenseRef
from capacity.services.planning.feed import AssignmentKind, AssignmentRecord
from capacity.services.planning.names import normalize_name
from capacity.services.timeline.weeks import parse_week_label, week_label

STATUS_ACTIVE = "active"
STATUS_EXPIRING = "expiring_soon"
STATUS_EXPIRED = "expired"


@dataclass
class LicenseDemand:
    license: str
    required: int
    total_seats: int
    breakdown: list[tuple[str, int]] = field(default_factory=list)
    engineers: list[int] = field(default_factory=list)

    @property
    def over_allocated(self) -> bool:
        return self.required > self.total_seats

    @property
    def utilization_pct(self) -> float:
        if self.total_seats <= 0:
            return 0.0
        return self.required / self.total_seats * 100.0

    def breakdown_text(self) -> str:
        return ", ".join(f"{code} ({n})" for code, n in self.breakdown)


def license_status(
    expiration_date: dt.date | None, today: dt.date | None = None, expiring_days: int = 30
) -> str:
    if expiration_date is None:
        return STATUS_ACTIVE
    today = today or dt.date.today()
    left = (expiration_date - today).days
    if left < 0:
        return STATUS_EXPIRED
    if left <= expiring_days:
        return STATUS_EXPIRING
    return STATUS_ACTIVE


def _engineers_by_project(
    records: Iterable[AssignmentRecord],
    label: str,
    excluded: set[str],
    include_tentative: bool,
) -> dict[str, list[int]]:
    out: dict[str, list[int]] = {}
    for rec in records:
        if rec.week_label != label:
            continue
        if rec.kind is not AssignmentKind.project or rec.weekly_hours <= 0:
            continue
        if rec.is_tentative and not include_tentative:
            continue
        if normalize_name(rec.engineer_name) in excluded:
            continue
        engineers = out.setdefault(rec.project_code, [])
        if rec.engineer_id not in engineers:
            engineers.append(rec.engineer_id)
    return out


def weekly_license_demand(
    records: Iterable[AssignmentRecord],
    week: str,
    catalog: Catalog,
    excluded_engineers: Iterable[str] = (),
    include_tentative: bool = True,
) -> dict[str, LicenseDemand]:
    """Seat demand per license for one week.

    ``required`` counts every engineer on a linked project once, however many
    linked projects they sit on. The per-project ``ceil(n * P / 100)`` figures
    only feed the breakdown.
    """
    parsed = parse_week_label(week)
    if parsed is None:
        return {}
    label = week_label(*parsed)
    excluded = {normalize_name(n) for n in excluded_engineers}
    by_project = _engineers_by_project(records, label, excluded, include_tentative)

    out: dict[str, LicenseDemand] = {}
    for lic in catalog.licenses:
        out[lic.name] = LicenseDemand(license=lic.name, required=0, total_seats=lic.total_seats)

    seats: dict[str, set[int]] = {}
    for link in sorted(catalog.links, key=lambda lk: (lk.license_name, lk.project_code)):
        engineers = by_project.get(link.project_code)
        if not engineers:
            continue
        demand = out.get(link.license_name)
        if demand is None:
            demand = out[link.license_name] = LicenseDemand(license=link.license_name, required=0, total_seats=0)
        count = math.ceil(len(engineers) * link.percentage / 100.0)
        if count > 0:
            demand.breakdown.append((link.project_code, count))
        seats.setdefault(link.license_name, set()).update(engineers)

    for name, engineers in seats.items():
        out[name].required = len(engineers)
        out[name].engineers = sorted(engineers)
    return out


def license_demand_by_week(
    records: Iterable[AssignmentRecord],
    weeks: Iterable[str],
    catalog: Catalog,
    excluded_engineers: Iterable[str] = (),
    include_tentative: bool = True,
) -> dict[str, dict[str, LicenseDemand]]:
    records = list(records)
    excluded = list(excluded_engineers)
    out = {}
    for w in weeks:
        parsed = parse_week_label(w)
        if parsed is None:
            continue
        label = week_label(*parsed)
        out[label] = weekly_license_demand(records, label, catalog, excluded, include_tentative)
    return out


def license_overview(lic: LicenseRef, today: dt.date | None = None, expiring_days: int = 30) -> dict:
    return dict(
        name=lic.name,
        provider=lic.provider,
        total_seats=lic.total_seats,
        expiration_date=lic.expiration_date,
        status=license_status(lic.expiration_date, today, expiring_days),
    )
