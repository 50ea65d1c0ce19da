from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from capacity.core.deps import get_db
from capacity.crud.engineers import create_engineer, get_engineer, list_engineers, update_engineer
from capacity.schemas.engineer import EngineerCreate, EngineerOut, EngineerUpdate

router = APIRouter()

@router.get("", response_model=list[EngineerOut])
def get_engineers(db: Session = Depends(get_db)):
    return list_engineers(db)

@router.post("", response_model=EngineerOut)
def post_engineer(data: EngineerCreate, db: Session = Depends(get_db)):
    return create_engineer(db, data)


@router.put("/{engineer_id}", response_model=EngineerOut)
def put_engineer(engineer_id: int, data: EngineerUpdate, db: Session = Depends(get_db)):
    e = get_engineer(db, engineer_id)
    if not e:
        raise HTTPException(status_code=404, detail="Engineer not found")
    return update_engineer(db, e, data)
