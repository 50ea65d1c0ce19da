"""In-memory reference catalogs the aggregators read.

They are plain snapshots of the database rows so that the aggregation code
stays pure and can be exercised without a session.
"""
import datetime as dt
from dataclasses import dataclass, field
from typing import Any

PROJECT_TYPE_WP = "WP"
PROJECT_TYPE_HOURLY = "Hodinovka"
STATUS_DELIVERY = "Realizace"
STATUS_PRESALES = "Pre sales"


def is_presales_status(status: str | None) -> bool:
    if not status:
        return False
    return status.replace("-", " ").replace("_", " ").strip().lower() in ("pre sales", "presales")


@dataclass(frozen=True)
class EngineerRef:
    id: int
    display_name: str
    slug: str = ""
    status: str = "active"
    company: str | None = None


@dataclass(frozen=True)
class ProjectRef:
    code: str
    name: str = ""
    id: int | None = None
    project_type: str = PROJECT_TYPE_WP
    average_hourly_rate: float | None = None
    budget: float | None = None
    project_status: str | None = STATUS_DELIVERY
    probability: float | None = None
    presales_phase: str | None = None
    presales_start_date: dt.date | None = None
    presales_end_date: dt.date | None = None
    customer: str | None = None
    program: str | None = None
    project_manager: str | None = None

    @property
    def is_presales(self) -> bool:
        return is_presales_status(self.project_status)


@dataclass(frozen=True)
class LicenseRef:
    name: str
    total_seats: int = 0
    id: int | None = None
    provider: str | None = None
    expiration_date: dt.date | None = None


@dataclass(frozen=True)
class LicenseLink:
    project_code: str
    license_name: str
    percentage: float


@dataclass
class Catalog:
    engineers: list[EngineerRef] = field(default_factory=list)
    projects: dict[str, ProjectRef] = field(default_factory=dict)
    licenses: list[LicenseRef] = field(default_factory=list)
    links: list[LicenseLink] = field(default_factory=list)

    def project(self, code: str | None) -> ProjectRef | None:
        if not code:
            return None
        return self.projects.get(code.strip())

    @classmethod
    def from_rows(
        cls,
        engineers: list[Any] = (),
        projects: list[Any] = (),
        licenses: list[Any] = (),
        links: list[Any] = (),
    ) -> "Catalog":
        """Build from ORM rows (or anything with the same attributes)."""
        projects_by_id = {getattr(p, "id", None): p for p in projects}
        licenses_by_id = {getattr(lic, "id", None): lic for lic in licenses}

        out = cls()
        out.engineers = [
            EngineerRef(
                id=e.id,
                display_name=e.display_name,
                slug=getattr(e, "slug", "") or "",
                status=getattr(e, "status", "active") or "active",
                company=getattr(e, "company", None),
            )
            for e in engineers
        ]
        for p in projects:
            code = (p.code or "").strip()
            if not code:
                continue
            out.projects[code] = ProjectRef(
                code=code,
                name=p.name,
                id=p.id,
                project_type=p.project_type,
                average_hourly_rate=p.average_hourly_rate,
                budget=p.budget,
                project_status=p.project_status,
                probability=p.probability,
                presales_phase=p.presales_phase,
                presales_start_date=p.presales_start_date,
                presales_end_date=p.presales_end_date,
                customer=getattr(getattr(p, "customer", None), "name", None),
                program=getattr(getattr(p, "program", None), "name", None),
                project_manager=getattr(getattr(p, "project_manager", None), "name", None),
            )
        out.licenses = [
            LicenseRef(
                name=lic.name,
                total_seats=lic.total_seats,
                id=lic.id,
                provider=lic.provider,
                expiration_date=lic.expiration_date,
            )
            for lic in licenses
        ]
        for link in links:
            p = projects_by_id.get(link.project_id)
            lic = licenses_by_id.get(link.license_id)
            if p is None or lic is None:
                continue
            out.links.append(LicenseLink(project_code=p.code.strip(), license_name=lic.name, percentage=link.percentage))
        return out
