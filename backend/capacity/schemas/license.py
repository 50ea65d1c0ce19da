import datetime as dt
from pydantic import BaseModel, ConfigDict, Field


class LicenseCreate(BaseModel):
    name: str
    provider: str | None = None
    license_type: str | None = None
    total_seats: int = Field(0, ge=0)
    cost: float | None = None
    expiration_date: dt.date | None = None


class LicenseUpdate(BaseModel):
    name: str | None = None
    provider: str | None = None
    license_type: str | None = None
    total_seats: int | None = Field(None, ge=0)
    cost: float | None = None
    expiration_date: dt.date | None = None


class LicenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    provider: str | None = None
    license_type: str | None = None
    total_seats: int
    cost: float | None = None
    expiration_date: dt.date | None = None
    status: str = "active"


class ProjectLicenseIn(BaseModel):
    project_code: str
    percentage: float = Field(100.0, ge=0, le=100)


class ProjectLicenseOut(BaseModel):
    project_code: str
    license_name: str
    percentage: float
