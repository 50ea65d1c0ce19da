"""Calendar-week <-> month mapping.

Week labels look like ``CW40-2025``. Months are keyed ``<czech month>_<year>``
(``říjen_2025``). The week->month table is generated from the weekday overlap
of each ISO week (Mon-Fri) with the calendar months of the planning horizon,
so it never has to be extended by hand.
"""
import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Literal

from capacity.services.timeline.holidays import Country, coerce_country, is_holiday

WeekMonthMode = Literal["split", "majority"]

CZ_MONTHS = {
    1: "leden",
    2: "únor",
    3: "březen",
    4: "duben",
    5: "květen",
    6: "červen",
    7: "červenec",
    8: "srpen",
    9: "září",
    10: "říjen",
    11: "listopad",
    12: "prosinec",
}
_MONTH_NUMBERS = {name: num for num, name in CZ_MONTHS.items()}

_WEEK_RE = re.compile(r"^\s*CW\s*(\d{1,2})(?:\s*[-/]\s*(\d{4}))?\s*$", re.IGNORECASE)

YEAR_END_WEEK = 52
WORKWEEK_DAYS = 5


def week_label(week: int, year: int) -> str:
    return f"CW{week:02d}-{year}"


def parse_week_label(label: str, default_year: int | None = None) -> tuple[int, int] | None:
    """``"CW40-2025"`` -> ``(40, 2025)``; ``None`` for anything unparseable."""
    if not isinstance(label, str):
        return None
    m = _WEEK_RE.match(label)
    if not m:
        return None
    week = int(m.group(1))
    year = int(m.group(2)) if m.group(2) else default_year
    if year is None or not 1 <= week <= 53:
        return None
    return week, year


def week_monday(week: int, year: int) -> dt.date | None:
    try:
        return dt.date.fromisocalendar(year, week, 1)
    except ValueError:
        return None


def week_of(day: dt.date) -> str:
    iso = day.isocalendar()
    return week_label(iso[1], iso[0])


def month_key(year: int, month: int) -> str:
    return f"{CZ_MONTHS[month]}_{year}"


def parse_month_key(key: str) -> tuple[int, int] | None:
    """``"říjen_2025"`` -> ``(2025, 10)``. Also accepts ``"říjen 2025"``."""
    if not isinstance(key, str):
        return None
    parts = key.strip().lower().replace(" ", "_").split("_")
    if len(parts) != 2 or parts[0] not in _MONTH_NUMBERS or not parts[1].isdigit():
        return None
    return int(parts[1]), _MONTH_NUMBERS[parts[0]]


def quarter_key(year: int, month: int) -> str:
    return f"Q{(month - 1) // 3 + 1}_{year}"


def months_between(start: dt.date, end: dt.date) -> list[tuple[int, int]]:
    if end < start:
        start, end = end, start
    out = []
    y, m = start.year, start.month
    while (y, m) <= (end.year, end.month):
        out.append((y, m))
        y, m = (y + 1, 1) if m == 12 else (y, m + 1)
    return out


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    first = dt.date(year, month, 1)
    nxt = dt.date(year + 1, 1, 1) if month == 12 else dt.date(year, month + 1, 1)
    return first, nxt - dt.timedelta(days=1)


def _days(start: dt.date, end: dt.date):
    d = start
    while d <= end:
        yield d
        d += dt.timedelta(days=1)


def weekdays_in_month(year: int, month: int) -> int:
    """Baseline working days: Mon-Fri, holidays ignored."""
    first, last = month_bounds(year, month)
    return sum(1 for d in _days(first, last) if d.weekday() < 5)


def working_days_between(
    start: dt.date, end: dt.date, country: Country | str | None = Country.cz
) -> int:
    country = coerce_country(country)
    return sum(1 for d in _days(start, end) if d.weekday() < 5 and not is_holiday(d, country))


def working_days_in_month(year: int, month: int, country: Country | str | None = Country.cz) -> int:
    first, last = month_bounds(year, month)
    return working_days_between(first, last, country)


def working_days_for_month_key(key: str, country: Country | str | None = Country.cz) -> int:
    parsed = parse_month_key(key)
    if parsed is None:
        return 0
    return working_days_in_month(parsed[0], parsed[1], country)


def holiday_coefficient(year: int, month: int, country: Country | str | None = Country.cz) -> float:
    base = weekdays_in_month(year, month)
    if base == 0:
        return 0.0
    return working_days_in_month(year, month, country) / base


def weekdays_of_week_in_month(
    monday: dt.date, year: int, month: int, country: Country | str | None = None
) -> int:
    """How many of the week's five weekdays land in ``year``/``month``.

    With a country, public holidays are not counted.
    """
    country = coerce_country(country)
    first, last = month_bounds(year, month)
    count = 0
    for i in range(WORKWEEK_DAYS):
        d = monday + dt.timedelta(days=i)
        if first <= d <= last and not is_holiday(d, country):
            count += 1
    return count


def working_days_in_week(monday: dt.date, country: Country | str | None = Country.cz) -> int:
    return working_days_between(monday, monday + dt.timedelta(days=WORKWEEK_DAYS - 1), country)


def monthly_capacity_hours(working_days: int, hours_per_day: float = 8.0) -> float:
    return working_days * hours_per_day


def _week_month_split(monday: dt.date) -> list[tuple[int, int, int]]:
    counts: dict[tuple[int, int], int] = {}
    for i in range(WORKWEEK_DAYS):
        d = monday + dt.timedelta(days=i)
        counts[(d.year, d.month)] = counts.get((d.year, d.month), 0) + 1
    return [(y, m, n) for (y, m), n in sorted(counts.items())]


@dataclass
class WeekMonthTable:
    """Precomputed ``week label -> [(month key, ratio)]`` for a horizon of years."""

    start_year: int
    end_year: int
    mode: WeekMonthMode = "split"
    entries: dict[str, list[tuple[str, float]]] = field(default_factory=dict)

    @classmethod
    def generate(cls, start_year: int, end_year: int, mode: WeekMonthMode = "split") -> "WeekMonthTable":
        if mode not in ("split", "majority"):
            raise ValueError(f"unknown week/month mode: {mode}")
        table = cls(start_year=start_year, end_year=end_year, mode=mode)
        for year in range(start_year, end_year + 1):
            for week in range(1, 54):
                monday = week_monday(week, year)
                if monday is None:
                    continue
                parts = _week_month_split(monday)
                if mode == "majority":
                    y, m, _ = max(parts, key=lambda p: p[2])
                    parts = [(y, m, WORKWEEK_DAYS)]
                mapped = [
                    (month_key(y, m), n / WORKWEEK_DAYS)
                    for y, m, n in parts
                    if start_year <= y <= end_year
                ]
                if mapped:
                    table.entries[week_label(week, year)] = mapped
        return table

    @classmethod
    def from_mapping(cls, mapping: dict[str, dict[str, float]]) -> "WeekMonthTable":
        """Wrap a hand-authored ``{week label: {month key: ratio}}`` table."""
        entries: dict[str, list[tuple[str, float]]] = {}
        years: list[int] = []
        for label, months in mapping.items():
            parsed = parse_week_label(label)
            if parsed is None:
                continue
            years.append(parsed[1])
            entries[week_label(*parsed)] = list(months.items())
        return cls(
            start_year=min(years, default=0),
            end_year=max(years, default=0),
            mode="split",
            entries=entries,
        )

    def months_for_week(self, label: str) -> list[tuple[str, float]]:
        parsed = parse_week_label(label)
        if parsed is None:
            return []
        return list(self.entries.get(week_label(*parsed), []))

    def is_mapped(self, label: str) -> bool:
        return bool(self.months_for_week(label))

    def weeks(self) -> list[str]:
        def _k(label: str):
            week, year = parse_week_label(label)
            return year, week
        return sorted(self.entries, key=_k)

    def weeks_for_month(self, key: str) -> list[str]:
        return [w for w in self.weeks() if any(mk == key for mk, _ in self.entries[w])]

    def month_keys(self) -> list[str]:
        out: list[str] = []
        for year in range(self.start_year, self.end_year + 1):
            for month in range(1, 13):
                out.append(month_key(year, month))
        return out


def weeks_in_range(start: str, end: str) -> list[str]:
    """Inclusive list of week labels from ``start`` to ``end``; empty if either is invalid."""
    a = parse_week_label(start)
    b = parse_week_label(end)
    if a is None or b is None:
        return []
    d1, d2 = week_monday(*a), week_monday(*b)
    if d1 is None or d2 is None or d2 < d1:
        return []
    out = []
    d = d1
    while d <= d2:
        out.append(week_of(d))
        d += dt.timedelta(days=7)
    return out
