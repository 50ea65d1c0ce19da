from sqlalchemy.orm import Session
from capacity.db.models.catalogs import Customer, Program, ProjectManager
from capacity.db.models.project import Project
from capacity.schemas.project import ProjectCreate, ProjectUpdate

_SCALAR_FIELDS = (
    "code",
    "name",
    "project_type",
    "average_hourly_rate",
    "budget",
    "project_status",
    "probability",
    "presales_phase",
    "presales_start_date",
    "presales_end_date",
)


def _get_or_create_named(db: Session, model, name: str | None):
    if not name:
        return None
    obj = db.query(model).filter(model.name == name).one_or_none()
    if obj is None:
        obj = model(name=name)
        db.add(obj)
        db.flush()
    return obj


def list_projects(db: Session):
    return db.query(Project).order_by(Project.id).all()

def get_project(db: Session, project_id: int) -> Project | None:
    return db.query(Project).filter(Project.id == project_id).one_or_none()

def get_project_by_code(db: Session, code: str) -> Project | None:
    return db.query(Project).filter(Project.code == code.strip()).one_or_none()

def create_project(db: Session, data: ProjectCreate) -> Project:
    p = Project(**{f: getattr(data, f) for f in _SCALAR_FIELDS})
    p.customer = _get_or_create_named(db, Customer, data.customer)
    p.program = _get_or_create_named(db, Program, data.program)
    p.project_manager = _get_or_create_named(db, ProjectManager, data.project_manager)
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def update_project(db: Session, p: Project, data: ProjectUpdate) -> Project:
    for f in _SCALAR_FIELDS:
        value = getattr(data, f)
        if value is not None:
            setattr(p, f, value)
    if data.customer is not None:
        p.customer = _get_or_create_named(db, Customer, data.customer)
    if data.program is not None:
        p.program = _get_or_create_named(db, Program, data.program)
    if data.project_manager is not None:
        p.project_manager = _get_or_create_named(db, ProjectManager, data.project_manager)
    db.commit()
    db.refresh(p)
    return p
