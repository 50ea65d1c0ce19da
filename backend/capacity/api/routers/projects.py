from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from capacity.core.deps import get_db
from capacity.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from capacity.crud.projects import create_project, get_project, get_project_by_code, list_projects, update_project
from capacity.db.models.project import Project

router = APIRouter()


def _out(p: Project) -> ProjectOut:
    return ProjectOut(
        id=p.id,
        code=p.code,
        name=p.name,
        customer=p.customer.name if p.customer else None,
        program=p.program.name if p.program else None,
        project_manager=p.project_manager.name if p.project_manager else None,
        project_type=p.project_type,
        average_hourly_rate=p.average_hourly_rate,
        budget=p.budget,
        project_status=p.project_status,
        probability=p.probability,
        presales_phase=p.presales_phase,
        presales_start_date=p.presales_start_date,
        presales_end_date=p.presales_end_date,
    )


@router.get("", response_model=list[ProjectOut])
def get_projects(db: Session = Depends(get_db)):
    return [_out(p) for p in list_projects(db)]

@router.post("", response_model=ProjectOut)
def post_project(data: ProjectCreate, db: Session = Depends(get_db)):
    if get_project_by_code(db, data.code):
        raise HTTPException(status_code=409, detail=f"Project {data.code} already exists")
    return _out(create_project(db, data))


@router.put("/{project_id}", response_model=ProjectOut)
def put_project(project_id: int, data: ProjectUpdate, db: Session = Depends(get_db)):
    p = get_project(db, project_id)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return _out(update_project(db, p, data))
