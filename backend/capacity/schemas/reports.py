import datetime as dt
from pydantic import BaseModel


class RevenueOut(BaseModel):
    """``periods`` is ``{period key: {project code: amount}}``."""

    periods: dict[str, dict[str, float]]
    totals: dict[str, float]


class TopProject(BaseModel):
    code: str
    name: str
    customer: str
    revenue: float


class RevenueKPIOut(BaseModel):
    total_revenue: float
    realizace_revenue: float
    presales_revenue: float
    realizace_pct: float
    presales_pct: float
    top_projects: list[TopProject]


class LicenseBreakdownRow(BaseModel):
    project_code: str
    count: int


class LicenseDemandOut(BaseModel):
    license: str
    required: int
    total_seats: int
    over_allocated: bool
    utilization_pct: float
    breakdown: list[LicenseBreakdownRow]
    breakdown_text: str


class LicenseWeekOut(BaseModel):
    week: str
    licenses: list[LicenseDemandOut]


class EngineerCapacityOut(BaseModel):
    engineer_id: int
    engineer_name: str
    free_weeks: int
    busy_weeks: int
    leave_weeks: int
    total_weeks: int
    free_percentage: float
    status: str
    dominant_label: str


class CapacityOut(BaseModel):
    weeks: list[str]
    engineers: list[EngineerCapacityOut]


class FreeWeekOut(BaseModel):
    free: int
    engineer_ids: list[int]


class FreeEngineerOut(BaseModel):
    engineer_id: int
    engineer_name: str
    free_weeks: int


class FreeMatrixOut(BaseModel):
    weeks: dict[str, FreeWeekOut]
    total_free_weeks: int
    engineers: list[FreeEngineerOut]


class MonthCalendarOut(BaseModel):
    month: str
    first_day: dt.date
    last_day: dt.date
    weekdays: int
    working_days: int
    holidays: list[dt.date]
    holiday_coefficient: float
    capacity_hours: float
    weeks: list[str]
