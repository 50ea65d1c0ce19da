from __future__ import annotations

from pathlib import Path

from sqlalchemy.orm import Session

from capacity.core.config import settings
from capacity.core.logging import logger
from capacity.crud.planning import upsert_cell
from capacity.db.models.engineer import Engineer
from capacity.db.models.import_run import ImportRun
from capacity.services.etl.parsers.planning_grid import parse_planning_grid
from capacity.services.etl.validators import ValidationError
from capacity.services.planning.catalog import EngineerRef
from capacity.services.planning.feed import EngineerResolver


def file_path(run: ImportRun) -> Path:
    return Path(settings.UPLOAD_DIR) / f"{run.year}_{run.file_hash}.xlsx"


def run_import(db: Session, run: ImportRun) -> tuple[list[ValidationError], int]:
    """Load a planning grid into planning_entry. Returns (errors, rows_loaded)."""
    errors: list[ValidationError] = []
    path = file_path(run)
    if not path.exists():
        return [ValidationError(f"File not found: {path}")], 0

    logger.info("import_start", import_run_id=run.id, path=str(path))

    grid_df, parse_errors = parse_planning_grid(str(path), year=run.year)
    errors.extend(parse_errors)
    if grid_df.empty:
        return errors, 0

    engineers = {e.id: e for e in db.query(Engineer).all()}
    resolver = EngineerResolver(
        EngineerRef(id=e.id, display_name=e.display_name, slug=e.slug, status=e.status, company=e.company)
        for e in engineers.values()
    )

    rows_loaded = 0
    changed_by = f"import:{run.id}"
    for r in grid_df.itertuples(index=False):
        ref = resolver.resolve(name=r.engineer_name)
        if ref is None:
            errors.append(ValidationError(f"Unknown engineer '{r.engineer_name}'", row_num=int(r.row_num)))
            continue
        hours = None if r.hours is None or r.hours != r.hours else float(r.hours)
        upsert_cell(
            db,
            engineers[ref.id],
            ref.display_name,
            int(r.week),
            int(r.year),
            project=r.project,
            hours=hours,
            is_tentative=bool(r.is_tentative),
            changed_by=changed_by,
            default_hours=settings.DEFAULT_WEEKLY_HOURS,
        )
        rows_loaded += 1

    return errors, rows_loaded
