from sqlalchemy.orm import Session
from capacity.db.models.engineer import Engineer
from capacity.schemas.engineer import EngineerCreate, EngineerUpdate
from capacity.services.planning.names import slugify

def list_engineers(db: Session):
    return db.query(Engineer).order_by(Engineer.display_name, Engineer.id).all()

def get_engineer(db: Session, engineer_id: int) -> Engineer | None:
    return db.query(Engineer).filter(Engineer.id == engineer_id).one_or_none()

def create_engineer(db: Session, data: EngineerCreate) -> Engineer:
    e = Engineer(
        display_name=data.display_name.strip(),
        slug=data.slug or slugify(data.display_name),
        status=data.status,
        company=data.company,
    )
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def update_engineer(db: Session, e: Engineer, data: EngineerUpdate) -> Engineer:
    if data.display_name is not None:
        e.display_name = data.display_name.strip()
    if data.status is not None:
        e.status = data.status
    if data.company is not None:
        e.company = data.company
    db.commit()
    db.refresh(e)
    return e
