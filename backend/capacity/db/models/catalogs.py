from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from capacity.db.base import Base
from capacity.db.models._mixins import TimestampMixin


class Customer(Base, TimestampMixin):
    __tablename__ = "customer"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True)


class Program(Base, TimestampMixin):
    __tablename__ = "program"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True)


class ProjectManager(Base, TimestampMixin):
    __tablename__ = "project_manager"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
