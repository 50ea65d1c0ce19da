import datetime as dt
from pydantic import BaseModel, ConfigDict, Field

class ProjectCreate(BaseModel):
    code: str
    name: str
    customer: str | None = None
    program: str | None = None
    project_manager: str | None = None
    project_type: str = Field("WP", pattern="^(WP|Hodinovka)$")
    average_hourly_rate: float | None = None
    budget: float | None = None
    project_status: str = "Realizace"
    probability: float | None = Field(None, ge=0, le=100)
    presales_phase: str | None = None
    presales_start_date: dt.date | None = None
    presales_end_date: dt.date | None = None


class ProjectUpdate(BaseModel):
    code: str | None = None
    name: str | None = None
    customer: str | None = None
    program: str | None = None
    project_manager: str | None = None
    project_type: str | None = Field(None, pattern="^(WP|Hodinovka)$")
    average_hourly_rate: float | None = None
    budget: float | None = None
    project_status: str | None = None
    probability: float | None = Field(None, ge=0, le=100)
    presales_phase: str | None = None
    presales_start_date: dt.date | None = None
    presales_end_date: dt.date | None = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    customer: str | None = None
    program: str | None = None
    project_manager: str | None = None
    project_type: str
    average_hourly_rate: float | None = None
    budget: float | None = None
    project_status: str | None = None
    probability: float | None = None
    presales_phase: str | None = None
    presales_start_date: dt.date | None = None
    presales_end_date: dt.date | None = None
