import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from capacity.crud.engineers import create_engineer
from capacity.crud.planning import list_changes, list_raw_assignments, materialize_year, upsert_cell
from capacity.db.base import Base
from capacity.db.models.planning import PlanningEntry
import capacity.db.models  # noqa: F401
from capacity.schemas.engineer import EngineerCreate
from capacity.services.planning.catalog import EngineerRef
from capacity.services.planning.feed import normalize_feed


@pytest.fixture
def db():
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def novak(db):
    return create_engineer(db, EngineerCreate(display_name="Novák Jan"))


def test_new_cell_gets_default_hours_and_history(db, novak):
    entry, changes = upsert_cell(db, novak, novak.display_name, 40, 2025, project="ST_FEM", changed_by="tester")
    assert entry.cw == "CW40"
    assert entry.projekt == "ST_FEM"
    assert entry.mh_tyden == 36.0
    assert entry.mesic == "říjen_2025"
    assert [c.change_type for c in changes] == ["created"]
    assert changes[0].changed_by == "tester"


def test_update_records_each_changed_field(db, novak):
    upsert_cell(db, novak, novak.display_name, 40, 2025, project="ST_FEM")
    entry, changes = upsert_cell(db, novak, novak.display_name, 40, 2025, project="ST_KAB", hours=20, is_tentative=True)
    assert (entry.projekt, entry.mh_tyden, entry.is_tentative) == ("ST_KAB", 20, True)
    assert [c.change_type for c in changes] == ["project", "hours", "tentative"]
    assert (changes[0].old_value, changes[0].new_value) == ("ST_FEM", "ST_KAB")

    history = list_changes(db, engineer_id=novak.id)
    assert len(history) == 4
    # newest first
    assert history[0].change_type == "tentative"


def test_unchanged_update_writes_no_history(db, novak):
    upsert_cell(db, novak, novak.display_name, 41, 2025, project="ST_FEM", hours=36)
    _, changes = upsert_cell(db, novak, novak.display_name, 41, 2025, project="ST_FEM", hours=36)
    assert changes == []


def test_empty_cell_defaults_to_free_and_week_52_to_vacation(db, novak):
    free, _ = upsert_cell(db, novak, novak.display_name, 10, 2025)
    year_end, _ = upsert_cell(db, novak, novak.display_name, 52, 2025)
    assert free.projekt == "FREE"
    assert year_end.projekt == "DOVOLENÁ"


def test_materialize_year_fills_only_missing_cells(db, novak):
    upsert_cell(db, novak, novak.display_name, 40, 2025, project="ST_FEM")
    added = materialize_year(db, [novak], 2025)
    assert added == 51
    assert materialize_year(db, [novak], 2025) == 0

    raw = {r.cw: r for r in list_raw_assignments(db, 2025)}
    assert len(raw) == 52
    assert raw["CW40"].project == "ST_FEM"
    assert raw["CW01"].project == "FREE"
    assert raw["CW52"].project == "DOVOLENÁ"
    assert all(r.engineer_id == novak.id for r in raw.values())


def _add_row(db, name, cw, project, engineer_id=None):
    db.add(
        PlanningEntry(
            engineer_id=engineer_id,
            konstrukter=name,
            cw=cw,
            year=2025,
            projekt=project,
            mh_tyden=36.0,
            is_tentative=False,
            updated_at=dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc),
        )
    )
    db.commit()


def test_materialize_adopts_legacy_name_only_rows(db, novak):
    _add_row(db, "Novák Jan", "CW52", "ST_FEM")
    _add_row(db, "novak  jan", "CW51-2025", "FREE")

    assert materialize_year(db, [novak], 2025) == 50

    ref = EngineerRef(id=novak.id, display_name=novak.display_name, slug=novak.slug)
    feed = normalize_feed(list_raw_assignments(db, 2025), [ref])
    by_week = {r.week: r for r in feed.records}
    assert len(by_week) == 52
    assert by_week[52].project_code == "ST_FEM"
    assert by_week[51].project_code == "FREE"
    assert feed.orphans == []
    assert all(r.engineer_id == novak.id for r in list_raw_assignments(db, 2025))


def test_materialize_skips_weeks_stored_with_the_long_label(db, novak):
    _add_row(db, novak.display_name, "CW52-2025", "ST_KAB", engineer_id=novak.id)
    assert materialize_year(db, [novak], 2025) == 51
    codes = [r.project for r in list_raw_assignments(db, 2025) if r.cw.startswith("CW52")]
    assert codes == ["ST_KAB"]


def test_upsert_updates_row_stored_with_the_long_label(db, novak):
    _add_row(db, novak.display_name, "CW30-2025", "ST_FEM", engineer_id=novak.id)
    entry, changes = upsert_cell(db, novak, novak.display_name, 30, 2025, project="ST_KAB")
    assert entry.cw == "CW30-2025"
    assert [c.change_type for c in changes] == ["project"]
    assert len(list_raw_assignments(db, 2025)) == 1
