import datetime as dt

from sqlalchemy import Boolean, Date, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin


class PlanningEntry(Base, TimestampMixin):
    """One grid cell: engineer x calendar week."""

    __tablename__ = "planning_entry"
    __table_args__ = (UniqueConstraint("engineer_id", "cw", "year", name="uq_planning_engineer_week"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    # legacy rows carry only the name
    engineer_id: Mapped[int | None] = mapped_column(ForeignKey("engineer.id", ondelete="SET NULL"), nullable=True, index=True)
    konstrukter: Mapped[str] = mapped_column(String(256), index=True)
    cw: Mapped[str] = mapped_column(String(16))  # CW40 or CW40-2025
    year: Mapped[int] = mapped_column(Integer, index=True)
    mesic: Mapped[str | None] = mapped_column(String(32), nullable=True)
    projekt: Mapped[str | None] = mapped_column(String(64), nullable=True)
    mh_tyden: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_tentative: Mapped[bool] = mapped_column(Boolean, default=False)
    week_monday: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    engineer = relationship("Engineer")


class PlanningChange(Base, TimestampMixin):
    __tablename__ = "planning_change"

    id: Mapped[int] = mapped_column(primary_key=True)
    engineer_id: Mapped[int | None] = mapped_column(ForeignKey("engineer.id", ondelete="SET NULL"), nullable=True, index=True)
    konstrukter: Mapped[str] = mapped_column(String(256))
    cw: Mapped[str] = mapped_column(String(16))
    year: Mapped[int] = mapped_column(Integer)
    change_type: Mapped[str] = mapped_column(String(32))  # project|hours|tentative|created
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
