import datetime as dt

from sqlalchemy import Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin


class License(Base, TimestampMixin):
    __tablename__ = "license"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    provider: Mapped[str | None] = mapped_column(String(256), nullable=True)
    license_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    total_seats: Mapped[int] = mapped_column(Integer, default=0)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    expiration_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    project_links = relationship("ProjectLicense", back_populates="license", cascade="all, delete-orphan")


class ProjectLicense(Base, TimestampMixin):
    __tablename__ = "project_license"
    __table_args__ = (UniqueConstraint("project_id", "license_id", name="uq_project_license"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("project.id", ondelete="CASCADE"), index=True)
    license_id: Mapped[int] = mapped_column(ForeignKey("license.id", ondelete="CASCADE"), index=True)
    percentage: Mapped[float] = mapped_column(Float, default=100.0)

    project = relationship("Project", back_populates="license_links")
    license = relationship("License", back_populates="project_links")
