import datetime as dt
from pydantic import BaseModel, ConfigDict

class ImportRunOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    file_hash: str
    year: int
    status: str
    rows_loaded: int
    started_at: dt.datetime | None
    finished_at: dt.datetime | None

class ImportErrorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sheet: str | None
    row_num: int | None
    column: str | None
    message: str
