import datetime as dt
from sqlalchemy.orm import Session
from capacity.db.session import SessionLocal
from capacity.core.config import settings
from capacity.core.logging import logger
from capacity.crud.engineers import create_engineer, list_engineers
from capacity.crud.licenses import create_license, list_licenses, set_project_link
from capacity.crud.planning import upsert_cell
from capacity.crud.projects import create_project, get_project_by_code, list_projects
from capacity.schemas.engineer import EngineerCreate
from capacity.schemas.license import LicenseCreate
from capacity.schemas.project import ProjectCreate

DEMO_ENGINEERS = [
    ("Novák Jan", "active", None),
    ("Dvořáková Petra", "active", None),
    ("Svoboda Tomáš", "active", None),
    ("Černý Martin", "active", None),
    ("Chrenko Peter", "contractor", "MB Tools"),
]

DEMO_PROJECTS = [
    ProjectCreate(
        code="ST_FEM",
        name="FEM analýza rámu",
        customer="Škoda Transportation",
        program="Tramvaje",
        project_manager="Horák Pavel",
        project_type="WP",
        average_hourly_rate=900,
    ),
    ProjectCreate(
        code="ST_KAB",
        name="Kabeláž",
        customer="Škoda Transportation",
        program="Tramvaje",
        project_manager="Horák Pavel",
        project_type="Hodinovka",
        average_hourly_rate=750,
    ),
    ProjectCreate(
        code="SIE_PRE",
        name="Nabídka podvozek",
        customer="Siemens Mobility",
        project_type="WP",
        average_hourly_rate=950,
        budget=400,
        project_status="Pre sales",
        probability=40,
        presales_phase="P1",
        presales_start_date=dt.date(2025, 11, 1),
        presales_end_date=dt.date(2026, 1, 31),
    ),
]

DEMO_LICENSES = [
    (LicenseCreate(name="AutoCAD", provider="Autodesk", total_seats=5), {"ST_FEM": 50, "ST_KAB": 100}),
    (LicenseCreate(name="ANSYS", provider="Ansys", total_seats=2), {"ST_FEM": 100}),
]

DEMO_ASSIGNMENTS = {
    "Novák Jan": "ST_FEM",
    "Dvořáková Petra": "ST_FEM",
    "Svoboda Tomáš": "ST_KAB",
    "Chrenko Peter": "ST_KAB",
}


def _seed(db: Session) -> None:
    if not list_engineers(db):
        for name, status, company in DEMO_ENGINEERS:
            create_engineer(db, EngineerCreate(display_name=name, status=status, company=company))
    if not list_projects(db):
        for p in DEMO_PROJECTS:
            create_project(db, p)
    if not list_licenses(db):
        for data, links in DEMO_LICENSES:
            lic = create_license(db, data)
            for code, pct in links.items():
                project = get_project_by_code(db, code)
                if project is not None:
                    set_project_link(db, lic, project, pct)

        # a few weeks of planning around the current week
        today = dt.date.today()
        engineers = {e.display_name: e for e in list_engineers(db)}
        for offset in range(4):
            iso = (today + dt.timedelta(weeks=offset)).isocalendar()
            for name, code in DEMO_ASSIGNMENTS.items():
                eng = engineers.get(name)
                if eng is not None:
                    upsert_cell(db, eng, name, iso[1], iso[0], project=code, changed_by="seed",
                                default_hours=settings.DEFAULT_WEEKLY_HOURS)


def seed_demo():
    db: Session = SessionLocal()
    try:
        _seed(db)
        logger.info("demo_seeded")
    finally:
        db.close()
