import datetime as dt
from sqlalchemy.orm import Session

from capacity.db.models.engineer import Engineer
from capacity.db.models.planning import PlanningChange, PlanningEntry
from capacity.services.planning.feed import AssignmentKind, PSEUDO_CODE_FOR_KIND, RawAssignment
from capacity.services.planning.names import normalize_name
from capacity.services.timeline.weeks import YEAR_END_WEEK, month_key, parse_week_label, week_label, week_monday

FREE_CODE = PSEUDO_CODE_FOR_KIND[AssignmentKind.free]
VACATION_CODE = PSEUDO_CODE_FOR_KIND[AssignmentKind.vacation]


def cw_code(week: int) -> str:
    return f"CW{week:02d}"


def default_project_for_week(week: int) -> str:
    """Code given to a cell nobody filled in yet."""
    return VACATION_CODE if week == YEAR_END_WEEK else FREE_CODE


def _month_of_week(week: int, year: int) -> tuple[str | None, dt.date | None]:
    monday = week_monday(week, year)
    if monday is None:
        return None, None
    thursday = monday + dt.timedelta(days=3)
    return month_key(thursday.year, thursday.month), monday


def list_entries(db: Session, year: int | None = None):
    q = db.query(PlanningEntry)
    if year is not None:
        q = q.filter(PlanningEntry.year == year)
    return q.order_by(PlanningEntry.year, PlanningEntry.cw, PlanningEntry.id).all()


def list_raw_assignments(db: Session, year: int | None = None) -> list[RawAssignment]:
    return [RawAssignment.from_entry(e) for e in list_entries(db, year)]


def find_entry(db: Session, engineer: Engineer | None, name: str, week: int, year: int) -> PlanningEntry | None:
    q = db.query(PlanningEntry).filter(
        PlanningEntry.cw.in_((cw_code(week), week_label(week, year))), PlanningEntry.year == year
    )
    if engineer is not None:
        e = q.filter(PlanningEntry.engineer_id == engineer.id).order_by(PlanningEntry.updated_at.desc()).first()
        if e is not None:
            return e
        # legacy row without the foreign key
        return q.filter(PlanningEntry.engineer_id.is_(None), PlanningEntry.konstrukter == engineer.display_name).first()
    return q.filter(PlanningEntry.konstrukter == name).first()


def _change(entry: PlanningEntry, change_type: str, old, new, changed_by: str | None) -> PlanningChange:
    return PlanningChange(
        engineer_id=entry.engineer_id,
        konstrukter=entry.konstrukter,
        cw=entry.cw,
        year=entry.year,
        change_type=change_type,
        old_value=None if old is None else str(old),
        new_value=None if new is None else str(new),
        changed_by=changed_by,
    )


def upsert_cell(
    db: Session,
    engineer: Engineer | None,
    name: str,
    week: int,
    year: int,
    project: str | None = None,
    hours: float | None = None,
    is_tentative: bool | None = None,
    changed_by: str | None = None,
    default_hours: float = 36.0,
) -> tuple[PlanningEntry, list[PlanningChange]]:
    """Create or update one cell and record what changed.

    A new cell gets ``default_hours`` and the default code of its week unless
    the caller says otherwise.
    """
    entry = find_entry(db, engineer, name, week, year)
    changes: list[PlanningChange] = []

    if entry is None:
        mesic, monday = _month_of_week(week, year)
        entry = PlanningEntry(
            engineer_id=engineer.id if engineer is not None else None,
            konstrukter=engineer.display_name if engineer is not None else name,
            cw=cw_code(week),
            year=year,
            mesic=mesic,
            week_monday=monday,
            projekt=(project or "").strip() or default_project_for_week(week),
            mh_tyden=default_hours if hours is None else hours,
            is_tentative=bool(is_tentative),
        )
        db.add(entry)
        changes.append(_change(entry, "created", None, entry.projekt, changed_by))
    else:
        if engineer is not None and entry.engineer_id is None:
            entry.engineer_id = engineer.id
        if project is not None:
            new_code = project.strip() or FREE_CODE
            if new_code != entry.projekt:
                changes.append(_change(entry, "project", entry.projekt, new_code, changed_by))
                entry.projekt = new_code
        if hours is not None and hours != entry.mh_tyden:
            changes.append(_change(entry, "hours", entry.mh_tyden, hours, changed_by))
            entry.mh_tyden = hours
        if is_tentative is not None and is_tentative != entry.is_tentative:
            changes.append(_change(entry, "tentative", entry.is_tentative, is_tentative, changed_by))
            entry.is_tentative = is_tentative

    # updated_at drives dedup on read
    entry.updated_at = dt.datetime.now(dt.timezone.utc)
    for c in changes:
        db.add(c)
    db.commit()
    db.refresh(entry)
    return entry, changes


def materialize_year(
    db: Session, engineers: list[Engineer], year: int, weeks: int = YEAR_END_WEEK, default_hours: float = 36.0
) -> int:
    """Create the missing cells of ``year`` for every engineer; returns how many were added.

    A week counts as filled when a row exists under the engineer id or, for
    legacy rows without the id, under the display name. Legacy rows are adopted
    (their ``engineer_id`` is set) instead of being shadowed by a new default.
    """
    by_id: set[tuple[int, int]] = set()
    legacy: dict[tuple[str, int], PlanningEntry] = {}
    for e in db.query(PlanningEntry).filter(PlanningEntry.year == year):
        parsed = parse_week_label(e.cw, default_year=year)
        if parsed is None:
            continue
        if e.engineer_id is not None:
            by_id.add((e.engineer_id, parsed[0]))
        else:
            legacy.setdefault((normalize_name(e.konstrukter), parsed[0]), e)

    added = 0
    for eng in engineers:
        for week in range(1, weeks + 1):
            if (eng.id, week) in by_id:
                continue
            orphan = legacy.pop((normalize_name(eng.display_name), week), None)
            if orphan is not None:
                orphan.engineer_id = eng.id
                by_id.add((eng.id, week))
                continue
            mesic, monday = _month_of_week(week, year)
            db.add(
                PlanningEntry(
                    engineer_id=eng.id,
                    konstrukter=eng.display_name,
                    cw=cw_code(week),
                    year=year,
                    mesic=mesic,
                    week_monday=monday,
                    projekt=default_project_for_week(week),
                    mh_tyden=default_hours,
                    is_tentative=False,
                )
            )
            added += 1
    db.commit()
    return added


def list_changes(db: Session, engineer_id: int | None = None, limit: int = 200):
    q = db.query(PlanningChange)
    if engineer_id is not None:
        q = q.filter(PlanningChange.engineer_id == engineer_id)
    return q.order_by(PlanningChange.id.desc()).limit(limit).all()
