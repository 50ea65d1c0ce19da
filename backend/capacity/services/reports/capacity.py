"""Free / busy classification of engineers over a range of weeks."""
from dataclasses import dataclass, field
from typing import Iterable

from capacity.services.planning.catalog import EngineerRef
from capacity.services.planning.feed import AssignmentKind, AssignmentRecord
from capacity.services.timeline.weeks import YEAR_END_WEEK, parse_week_label, week_label

DOMINANT_WINDOW = 4

LABEL_MOSTLY_FREE = "mostly_free"
LABEL_PARTIALLY_FREE = "partially_free"
LABEL_FULLY_BOOKED = "fully_booked"

STATUS_FREE = "free"
STATUS_PARTIAL = "partial"
STATUS_FULL = "full"
STATUS_ON_LEAVE = "on_leave"

_LEAVE = (AssignmentKind.vacation, AssignmentKind.sick)


@dataclass
class WeekCell:
    week_label: str
    kind: AssignmentKind
    project_code: str = ""
    weekly_hours: float = 0.0
    is_tentative: bool = False
    defaulted: bool = False


@dataclass
class EngineerCapacity:
    engineer_id: int
    engineer_name: str
    weeks: list[WeekCell] = field(default_factory=list)

    @property
    def total_weeks(self) -> int:
        return len(self.weeks)

    @property
    def free_weeks(self) -> int:
        return sum(1 for c in self.weeks if c.kind is AssignmentKind.free)

    @property
    def busy_weeks(self) -> int:
        return self.total_weeks - self.free_weeks

    @property
    def leave_weeks(self) -> int:
        return sum(1 for c in self.weeks if c.kind in _LEAVE)

    @property
    def free_percentage(self) -> float:
        if not self.weeks:
            return 0.0
        return self.free_weeks / self.total_weeks * 100.0

    @property
    def status(self) -> str:
        if self.weeks and self.leave_weeks == self.total_weeks:
            return STATUS_ON_LEAVE
        if self.free_weeks == self.total_weeks:
            return STATUS_FREE
        if self.free_weeks == 0:
            return STATUS_FULL
        return STATUS_PARTIAL

    @property
    def dominant_label(self) -> str:
        return dominant_label(self.weeks)

    def as_dict(self) -> dict:
        return dict(
            engineer_id=self.engineer_id,
            engineer_name=self.engineer_name,
            free_weeks=self.free_weeks,
            busy_weeks=self.busy_weeks,
            leave_weeks=self.leave_weeks,
            total_weeks=self.total_weeks,
            free_percentage=self.free_percentage,
            status=self.status,
            dominant_label=self.dominant_label,
        )


def default_cell(label: str) -> WeekCell:
    """Empty cell: free, except the year-end week which is vacation."""
    parsed = parse_week_label(label)
    if parsed is not None and parsed[0] == YEAR_END_WEEK:
        return WeekCell(week_label=label, kind=AssignmentKind.vacation, defaulted=True)
    return WeekCell(week_label=label, kind=AssignmentKind.free, defaulted=True)


def dominant_label(cells: list[WeekCell]) -> str:
    window = cells[:DOMINANT_WINDOW]
    counts: dict[str, int] = {}
    for c in window:
        if c.kind is AssignmentKind.project and c.project_code:
            counts[c.project_code] = counts.get(c.project_code, 0) + 1
    best_code, best_count = None, 0
    # dict keeps first-encounter order, strict > keeps the earliest on ties
    for code, n in counts.items():
        if n > best_count:
            best_code, best_count = code, n
    if best_code is not None and best_count >= 2:
        return best_code

    free = sum(1 for c in window if c.kind is AssignmentKind.free)
    if free >= 3:
        return LABEL_MOSTLY_FREE
    if free >= 1:
        return LABEL_PARTIALLY_FREE
    return LABEL_FULLY_BOOKED


def _normalize_weeks(weeks: Iterable[str]) -> list[str]:
    out = []
    for w in weeks:
        parsed = parse_week_label(w)
        if parsed is None:
            continue
        label = week_label(*parsed)
        if label not in out:
            out.append(label)
    return out


def classify_capacity(
    records: Iterable[AssignmentRecord],
    engineers: Iterable[EngineerRef],
    weeks: Iterable[str],
) -> dict[int, EngineerCapacity]:
    """One ``EngineerCapacity`` per engineer over ``weeks`` (in the given order).

    Invalid week labels are dropped from the period.
    """
    labels = _normalize_weeks(weeks)
    wanted = set(labels)
    by_key: dict[tuple[int, str], AssignmentRecord] = {}
    for rec in records:
        if rec.week_label in wanted:
            by_key[rec.key] = rec

    out: dict[int, EngineerCapacity] = {}
    for eng in engineers:
        cap = EngineerCapacity(engineer_id=eng.id, engineer_name=eng.display_name)
        for label in labels:
            rec = by_key.get((eng.id, label))
            if rec is None:
                cap.weeks.append(default_cell(label))
            else:
                cap.weeks.append(
                    WeekCell(
                        week_label=label,
                        kind=rec.kind,
                        project_code=rec.project_code,
                        weekly_hours=rec.weekly_hours,
                        is_tentative=rec.is_tentative,
                    )
                )
        out[eng.id] = cap
    return out


def free_capacity_matrix(capacity: dict[int, EngineerCapacity]) -> dict:
    """Free engineers per week plus totals, engineers ranked by free weeks."""
    per_week: dict[str, list[int]] = {}
    for cap in capacity.values():
        for cell in cap.weeks:
            bucket = per_week.setdefault(cell.week_label, [])
            if cell.kind is AssignmentKind.free:
                bucket.append(cap.engineer_id)

    ranked = sorted(capacity.values(), key=lambda c: (-c.free_weeks, c.engineer_name))
    return dict(
        weeks={label: dict(free=len(ids), engineer_ids=ids) for label, ids in per_week.items()},
        total_free_weeks=sum(c.free_weeks for c in capacity.values()),
        engineers=[
            dict(engineer_id=c.engineer_id, engineer_name=c.engineer_name, free_weeks=c.free_weeks)
            for c in ranked
        ],
    )
