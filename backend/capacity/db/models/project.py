import datetime as dt

from sqlalchemy import Date, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin


class Project(Base, TimestampMixin):
    __tablename__ = "project"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(256))
    customer_id: Mapped[int | None] = mapped_column(ForeignKey("customer.id", ondelete="SET NULL"), nullable=True)
    program_id: Mapped[int | None] = mapped_column(ForeignKey("program.id", ondelete="SET NULL"), nullable=True)
    project_manager_id: Mapped[int | None] = mapped_column(
        ForeignKey("project_manager.id", ondelete="SET NULL"), nullable=True
    )

    project_type: Mapped[str] = mapped_column(String(32), default="WP")  # WP|Hodinovka
    average_hourly_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    project_status: Mapped[str | None] = mapped_column(String(32), default="Realizace")  # Realizace|Pre sales
    probability: Mapped[float | None] = mapped_column(Float, nullable=True)  # 0..100, presales only
    presales_phase: Mapped[str | None] = mapped_column(String(32), nullable=True)
    presales_start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    presales_end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    customer = relationship("Customer", lazy="joined")
    program = relationship("Program", lazy="joined")
    project_manager = relationship("ProjectManager", lazy="joined")
    license_links = relationship("ProjectLicense", back_populates="project", cascade="all, delete-orphan")
