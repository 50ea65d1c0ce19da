from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin


class Engineer(Base, TimestampMixin):
    __tablename__ = "engineer"

    id: Mapped[int] = mapped_column(primary_key=True)
    display_name: Mapped[str] = mapped_column(String(256), index=True)
    slug: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    status: Mapped[str] = mapped_column(String(32), default="active")  # active|inactive|contractor|on_leave
    company: Mapped[str | None] = mapped_column(String(256), nullable=True)
