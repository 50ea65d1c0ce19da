from sqlalchemy.orm import Session
from capacity.db.models.license import License, ProjectLicense
from capacity.db.models.project import Project
from capacity.schemas.license import LicenseCreate, LicenseUpdate

def list_licenses(db: Session):
    return db.query(License).order_by(License.name).all()

def get_license(db: Session, license_id: int) -> License | None:
    return db.query(License).filter(License.id == license_id).one_or_none()

def create_license(db: Session, data: LicenseCreate) -> License:
    lic = License(**data.model_dump())
    db.add(lic)
    db.commit()
    db.refresh(lic)
    return lic


def update_license(db: Session, lic: License, data: LicenseUpdate) -> License:
    for k, v in data.model_dump(exclude_none=True).items():
        setattr(lic, k, v)
    db.commit()
    db.refresh(lic)
    return lic


def list_links(db: Session):
    return db.query(ProjectLicense).order_by(ProjectLicense.id).all()


def set_project_link(db: Session, lic: License, project: Project, percentage: float) -> ProjectLicense:
    link = (
        db.query(ProjectLicense)
        .filter(ProjectLicense.license_id == lic.id, ProjectLicense.project_id == project.id)
        .one_or_none()
    )
    if link is None:
        link = ProjectLicense(license_id=lic.id, project_id=project.id)
        db.add(link)
    link.percentage = percentage
    db.commit()
    db.refresh(link)
    return link


def delete_project_link(db: Session, lic: License, project: Project) -> int:
    n = (
        db.query(ProjectLicense)
        .filter(ProjectLicense.license_id == lic.id, ProjectLicense.project_id == project.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return n
