import datetime as dt
from sqlalchemy import String, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin

class ImportRun(Base, TimestampMixin):
    __tablename__ = "import_run"

    id: Mapped[int] = mapped_column(primary_key=True)
    file_name: Mapped[str] = mapped_column(String(512))
    file_hash: Mapped[str] = mapped_column(String(64), index=True)
    year: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(32), default="queued")  # queued|running|done|failed
    started_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    rows_loaded: Mapped[int] = mapped_column(Integer, default=0)

    errors = relationship("ImportError", back_populates="import_run")
