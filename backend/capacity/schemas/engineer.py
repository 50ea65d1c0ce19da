from pydantic import BaseModel, ConfigDict, Field

STATUS_PATTERN = "^(active|inactive|contractor|on_leave)$"


class EngineerCreate(BaseModel):
    display_name: str
    slug: str | None = None
    status: str = Field("active", pattern=STATUS_PATTERN)
    company: str | None = None


class EngineerUpdate(BaseModel):
    display_name: str | None = None
    status: str | None = Field(None, pattern=STATUS_PATTERN)
    company: str | None = None


class EngineerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str
    slug: str
    status: str
    company: str | None = None
