from fastapi import APIRouter, Depends, HTTPException, Query

from capacity.core.deps import get_catalog, get_records
from capacity.schemas.reports import (
    CapacityOut,
    FreeMatrixOut,
    LicenseWeekOut,
    MonthCalendarOut,
    RevenueKPIOut,
    RevenueOut,
)
from capacity.services.planning.catalog import Catalog
from capacity.services.planning.feed import AssignmentRecord
from capacity.services.reports import service
from capacity.services.timeline.weeks import parse_week_label, week_label

router = APIRouter()


def _week_or_400(week: str) -> str:
    parsed = parse_week_label(week)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid calendar week: {week}")
    return week_label(*parsed)


@router.get("/revenue/monthly", response_model=RevenueOut)
def revenue_monthly(
    year: int | None = Query(None),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.revenue_report(records, catalog, "month", year)


@router.get("/revenue/quarterly", response_model=RevenueOut)
def revenue_quarterly(
    year: int | None = Query(None),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.revenue_report(records, catalog, "quarter", year)


@router.get("/revenue/annual", response_model=RevenueOut)
def revenue_annual(
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.revenue_report(records, catalog, "year")


@router.get("/revenue/kpi", response_model=RevenueKPIOut)
def revenue_kpi(
    year: int = Query(...),
    month: int | None = Query(None, ge=1, le=12),
    top: int = Query(5, ge=1, le=50),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.kpi_report(records, catalog, year, month, top)


@router.get("/licenses/weekly", response_model=LicenseWeekOut)
def licenses_weekly(
    week: str | None = Query(None, description="CW40-2025; defaults to the current week"),
    include_tentative: bool = Query(True),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    label = _week_or_400(week) if week else service.current_week()
    return {"week": label, "licenses": service.license_report(records, catalog, label, include_tentative)}


@router.get("/capacity", response_model=CapacityOut)
def capacity(
    start: str = Query(..., description="CW01-2026"),
    end: str = Query(..., description="CW13-2026"),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.capacity_report(records, catalog, _week_or_400(start), _week_or_400(end))


@router.get("/capacity/free-matrix", response_model=FreeMatrixOut)
def capacity_free_matrix(
    start: str = Query(...),
    end: str = Query(...),
    records: list[AssignmentRecord] = Depends(get_records),
    catalog: Catalog = Depends(get_catalog),
):
    return service.free_matrix_report(records, catalog, _week_or_400(start), _week_or_400(end))


@router.get("/calendar/month", response_model=MonthCalendarOut)
def calendar_month(month: str = Query(..., description="říjen_2025")):
    info = service.month_calendar(month)
    if info is None:
        raise HTTPException(status_code=400, detail=f"Invalid month key: {month}")
    return info
