import datetime as dt

import pytest

from capacity.services.planning.catalog import Catalog, EngineerRef, LicenseLink, LicenseRef, ProjectRef
from capacity.services.planning.feed import AssignmentRecord, classify_project_code
from capacity.services.timeline.weeks import parse_week_label, week_label


@pytest.fixture
def engineers():
    return [
        EngineerRef(id=1, display_name="Novák Jan", slug="novak-jan"),
        EngineerRef(id=2, display_name="Dvořáková Petra", slug="dvorakova-petra"),
        EngineerRef(id=3, display_name="Svoboda Tomáš", slug="svoboda-tomas"),
        EngineerRef(id=4, display_name="Černý Martin", slug="cerny-martin"),
        EngineerRef(id=5, display_name="Chrenko Peter", slug="chrenko-peter", status="contractor"),
    ]


@pytest.fixture
def make_record():
    def _make(engineer_id=1, week="CW40-2025", project="ST_FEM", hours=36.0, tentative=False,
              name=None, updated_at=None):
        w, y = parse_week_label(week)
        return AssignmentRecord(
            engineer_id=engineer_id,
            engineer_name=name or f"Engineer {engineer_id}",
            week_label=week_label(w, y),
            week=w,
            year=y,
            project_code=project,
            kind=classify_project_code(project),
            weekly_hours=hours,
            is_tentative=tentative,
            updated_at=updated_at,
        )
    return _make


@pytest.fixture
def st_fem():
    return ProjectRef(code="ST_FEM", name="FEM analýza", project_type="WP", average_hourly_rate=900,
                      project_status="Realizace", customer="Škoda Transportation")


@pytest.fixture
def catalog(engineers, st_fem):
    return Catalog(
        engineers=engineers,
        projects={st_fem.code: st_fem},
        licenses=[LicenseRef(name="AutoCAD", total_seats=5, expiration_date=dt.date(2026, 12, 31))],
        links=[LicenseLink(project_code="ST_FEM", license_name="AutoCAD", percentage=50)],
    )
