from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from capacity.core.config import settings
from capacity.core.deps import get_db
from capacity.crud.licenses import (
    create_license,
    delete_project_link,
    get_license,
    list_licenses,
    set_project_link,
    update_license,
)
from capacity.crud.projects import get_project_by_code
from capacity.db.models.license import License
from capacity.schemas.license import (
    LicenseCreate,
    LicenseOut,
    LicenseUpdate,
    ProjectLicenseIn,
    ProjectLicenseOut,
)
from capacity.services.reports.licenses import license_status

router = APIRouter()


def _out(lic: License) -> LicenseOut:
    out = LicenseOut.model_validate(lic)
    out.status = license_status(lic.expiration_date, expiring_days=settings.LICENSE_EXPIRING_DAYS)
    return out


def _license_or_404(db: Session, license_id: int) -> License:
    lic = get_license(db, license_id)
    if not lic:
        raise HTTPException(status_code=404, detail="License not found")
    return lic


@router.get("", response_model=list[LicenseOut])
def get_licenses(db: Session = Depends(get_db)):
    return [_out(lic) for lic in list_licenses(db)]


@router.post("", response_model=LicenseOut)
def post_license(data: LicenseCreate, db: Session = Depends(get_db)):
    return _out(create_license(db, data))


@router.put("/{license_id}", response_model=LicenseOut)
def put_license(license_id: int, data: LicenseUpdate, db: Session = Depends(get_db)):
    return _out(update_license(db, _license_or_404(db, license_id), data))


@router.get("/{license_id}/projects", response_model=list[ProjectLicenseOut])
def get_license_projects(license_id: int, db: Session = Depends(get_db)):
    lic = _license_or_404(db, license_id)
    return [
        ProjectLicenseOut(project_code=link.project.code, license_name=lic.name, percentage=link.percentage)
        for link in lic.project_links
    ]


@router.put("/{license_id}/projects", response_model=ProjectLicenseOut)
def put_license_project(license_id: int, data: ProjectLicenseIn, db: Session = Depends(get_db)):
    lic = _license_or_404(db, license_id)
    project = get_project_by_code(db, data.project_code)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project {data.project_code} not found")
    link = set_project_link(db, lic, project, data.percentage)
    return ProjectLicenseOut(project_code=project.code, license_name=lic.name, percentage=link.percentage)


@router.delete("/{license_id}/projects/{project_code}")
def delete_license_project(license_id: int, project_code: str, db: Session = Depends(get_db)):
    lic = _license_or_404(db, license_id)
    project = get_project_by_code(db, project_code)
    if not project or not delete_project_link(db, lic, project):
        raise HTTPException(status_code=404, detail="Link not found")
    return {"status": "ok"}
