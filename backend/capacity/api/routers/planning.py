from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from capacity.core.config import settings
from capacity.core.deps import get_catalog, get_db, get_refresher, get_store
from capacity.crud.engineers import get_engineer, list_engineers
from capacity.crud.planning import list_changes, materialize_year, upsert_cell
from capacity.schemas.planning import (
    AssignmentOut,
    FeedOut,
    FetchEventOut,
    OrphanOut,
    PlanningCellIn,
    PlanningChangeOut,
)
from capacity.services.planning.catalog import Catalog
from capacity.services.planning.feed import AssignmentRecord, EngineerResolver
from capacity.services.planning.state import DebouncedRefresher, FeedStore
from capacity.services.timeline.weeks import parse_week_label, week_label, week_monday

router = APIRouter()


def _record_out(r: AssignmentRecord) -> AssignmentOut:
    return AssignmentOut(
        engineer_id=r.engineer_id,
        engineer_name=r.engineer_name,
        week_label=r.week_label,
        week=r.week,
        year=r.year,
        project_code=r.project_code,
        kind=r.kind.value,
        weekly_hours=r.weekly_hours,
        is_tentative=r.is_tentative,
        updated_at=r.updated_at,
    )


@router.get("", response_model=FeedOut)
def get_feed(
    year: int | None = Query(None),
    engineer_id: int | None = Query(None),
    store: FeedStore = Depends(get_store),
):
    snap = store.snapshot()
    records = [
        r for r in snap.records
        if (year is None or r.year == year) and (engineer_id is None or r.engineer_id == engineer_id)
    ]
    return FeedOut(version=snap.version, records=[_record_out(r) for r in records])


@router.put("/entry", response_model=AssignmentOut)
async def put_entry(
    data: PlanningCellIn,
    db: Session = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
    store: FeedStore = Depends(get_store),
    refresher: DebouncedRefresher = Depends(get_refresher),
):
    parsed = parse_week_label(data.cw, default_year=data.year)
    if parsed is None or week_monday(*parsed) is None:
        raise HTTPException(status_code=400, detail=f"Invalid calendar week: {data.cw}")
    week, year = parsed

    ref = EngineerResolver(catalog.engineers).resolve(data.engineer_id, data.engineer_name)
    if ref is None:
        raise HTTPException(status_code=404, detail="Engineer not found")
    engineer = get_engineer(db, ref.id)

    entry, _ = await run_in_threadpool(
        upsert_cell,
        db,
        engineer,
        ref.display_name,
        week,
        year,
        project=data.project,
        hours=data.hours,
        is_tentative=data.is_tentative,
        changed_by=data.changed_by,
        default_hours=settings.DEFAULT_WEEKLY_HOURS,
    )

    # mirror the saved row so defaults applied on insert show up at once
    patch = {
        "engineer_name": ref.display_name,
        "project_code": entry.projekt,
        "weekly_hours": entry.mh_tyden,
        "is_tentative": entry.is_tentative,
    }
    record = store.apply_optimistic_edit((ref.id, week_label(week, year)), patch)
    refresher.request("edit")
    return _record_out(record)


@router.post("/refresh")
async def post_refresh(
    store: FeedStore = Depends(get_store),
    refresher: DebouncedRefresher = Depends(get_refresher),
):
    applied = await refresher.refresh_now("manual")
    return {"applied": applied, "version": store.version}


@router.post("/materialize")
async def post_materialize(
    year: int = Query(...),
    db: Session = Depends(get_db),
    refresher: DebouncedRefresher = Depends(get_refresher),
):
    engineers = [e for e in list_engineers(db) if e.status != "inactive"]
    added = await run_in_threadpool(
        materialize_year, db, engineers, year, default_hours=settings.DEFAULT_WEEKLY_HOURS
    )
    if added:
        refresher.request("materialize")
    return {"year": year, "added": added}


@router.get("/timeline", response_model=list[FetchEventOut])
def get_timeline(store: FeedStore = Depends(get_store)):
    return [
        FetchEventOut(
            id=ev.id,
            source=ev.source,
            started_at=ev.started_at,
            ended_at=ev.ended_at,
            applied=ev.applied,
            error=ev.error,
        )
        for ev in store.timeline()
    ]


@router.get("/orphans", response_model=list[OrphanOut])
def get_orphans(store: FeedStore = Depends(get_store)):
    return [
        OrphanOut(
            reason=o.reason,
            engineer_name=o.raw.engineer_name,
            engineer_id=o.raw.engineer_id,
            cw=o.raw.cw,
            year=o.raw.year,
            project=o.raw.project,
        )
        for o in store.snapshot().orphans
    ]


@router.get("/history", response_model=list[PlanningChangeOut])
def get_history(
    engineer_id: int | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return list_changes(db, engineer_id=engineer_id, limit=limit)
