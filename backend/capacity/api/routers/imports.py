from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Query
from sqlalchemy.orm import Session
from pathlib import Path
import uuid

from capacity.core.deps import get_db
from capacity.db.models.import_run import ImportRun
from capacity.db.models.import_error import ImportError
from capacity.schemas.imports import ImportRunOut, ImportErrorOut
from capacity.services.etl.importer import file_path
from capacity.services.etl.utils import file_sha256
from capacity.services.files import ensure_dirs, save_upload
from capacity.crud.imports import get_or_create_import_run, list_imports, list_import_errors
from capacity.worker.tasks import run_import_task
from capacity.core.config import settings

router = APIRouter()


@router.get("", response_model=list[ImportRunOut])
def get_imports(year: int | None = Query(None), db: Session = Depends(get_db)):
    return list_imports(db, year)


@router.get("/{import_run_id}/errors", response_model=list[ImportErrorOut])
def get_errors(import_run_id: int, db: Session = Depends(get_db)):
    return list_import_errors(db, import_run_id)


@router.delete("/{import_run_id}")
def delete_import_run(import_run_id: int, db: Session = Depends(get_db)):
    run = db.query(ImportRun).filter(ImportRun.id == import_run_id).one_or_none()
    if not run:
        raise HTTPException(status_code=404, detail="Import run not found")
    if run.status in ("queued", "running"):
        raise HTTPException(status_code=409, detail="Import is running; cannot delete")

    # planning cells stay: they are the live plan, not a snapshot of the file
    path = file_path(run)
    db.query(ImportError).filter(ImportError.import_run_id == run.id).delete(synchronize_session=False)
    db.query(ImportRun).filter(ImportRun.id == run.id).delete(synchronize_session=False)
    db.commit()

    if path.exists():
        path.unlink()

    return {"status": "ok"}


@router.post("/upload", response_model=ImportRunOut)
def upload_excel(
    year: int = Query(..., description="Year of CW columns without an explicit year"),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Only .xlsx supported")

    ensure_dirs()

    # unique tmp name so parallel uploads never overwrite each other
    tmp_name = f"tmp_{year}_{uuid.uuid4().hex}_{Path(file.filename).name}"
    tmp_path = Path(settings.UPLOAD_DIR) / tmp_name
    save_upload(file, tmp_path)

    file_hash = file_sha256(str(tmp_path))
    final_path = Path(settings.UPLOAD_DIR) / f"{year}_{file_hash}.xlsx"

    if final_path.exists():
        final_path.unlink()
    tmp_path.replace(final_path)

    run, created = get_or_create_import_run(db, year, file.filename, file_hash)

    # same file already imported
    if run.status in ("success", "success_with_errors") and not created:
        return run

    run_import_task.delay(run.id)
    return run
