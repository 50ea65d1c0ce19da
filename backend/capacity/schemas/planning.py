import datetime as dt
from pydantic import BaseModel, ConfigDict, Field


class PlanningCellIn(BaseModel):
    """One grid cell. ``engineer_id`` wins over ``engineer_name`` when both are given."""

    engineer_id: int | None = None
    engineer_name: str | None = None
    cw: str = Field(..., description="CW40 or CW40-2025")
    year: int | None = None
    project: str | None = None
    hours: float | None = Field(None, ge=0)
    is_tentative: bool | None = None
    changed_by: str | None = None


class AssignmentOut(BaseModel):
    engineer_id: int
    engineer_name: str
    week_label: str
    week: int
    year: int
    project_code: str
    kind: str
    weekly_hours: float
    is_tentative: bool
    updated_at: dt.datetime | None = None


class FeedOut(BaseModel):
    version: int
    records: list[AssignmentOut]


class OrphanOut(BaseModel):
    reason: str
    engineer_name: str | None = None
    engineer_id: int | None = None
    cw: str
    year: int | None = None
    project: str | None = None


class FetchEventOut(BaseModel):
    id: int
    source: str
    started_at: dt.datetime
    ended_at: dt.datetime | None = None
    applied: bool
    error: str | None = None


class PlanningChangeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    engineer_id: int | None = None
    konstrukter: str
    cw: str
    year: int
    change_type: str
    old_value: str | None = None
    new_value: str | None = None
    changed_by: str | None = None
    created_at: dt.datetime | None = None
