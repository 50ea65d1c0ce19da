import datetime as dt
from sqlalchemy.orm import Session

from capacity.worker.celery_app import celery_app
from capacity.core.logging import logger
from capacity.db.session import SessionLocal
from capacity.crud.imports import set_import_status, add_import_errors, get_import_run
from capacity.services.etl.importer import run_import


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@celery_app.task(name="imports.run_import", bind=True)
def run_import_task(self, import_run_id: int):
    db: Session = SessionLocal()
    try:
        run = get_import_run(db, import_run_id)
        if not run:
            logger.error("import_run_missing", import_run_id=import_run_id)
            return

        set_import_status(db, import_run_id, "running", started_at=_now())

        errors, rows_loaded = run_import(db, run)

        if errors:
            add_import_errors(db, import_run_id, errors)

        status = "success" if not errors else "success_with_errors"
        set_import_status(
            db,
            import_run_id,
            status,
            finished_at=_now(),
            rows_loaded=rows_loaded,
        )

        logger.info(
            "import_finished",
            import_run_id=import_run_id,
            status=status,
            rows_loaded=rows_loaded,
            errors=len(errors),
        )

    except Exception as e:
        logger.exception("import_failed", import_run_id=import_run_id, error=str(e))

        # the transaction may be aborted: roll back before writing the status
        try:
            db.rollback()
            set_import_status(db, import_run_id, "failed", finished_at=_now())
        except Exception as e2:
            logger.exception(
                "import_failed_status_update_failed",
                import_run_id=import_run_id,
                error=str(e2),
            )
            try:
                db2: Session = SessionLocal()
                try:
                    set_import_status(db2, import_run_id, "failed", finished_at=_now())
                finally:
                    db2.close()
            except Exception as e3:
                logger.exception(
                    "import_failed_status_update_failed_second_attempt",
                    import_run_id=import_run_id,
                    error=str(e3),
                )

        raise

    finally:
        db.close()
