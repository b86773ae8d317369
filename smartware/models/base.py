"""SQLAlchemy declarative Base and shared model configuration."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, false, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class EntityMixin:
    """Surrogate key, audit timestamps and soft-delete flag shared by every table."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())


def as_utc(value: datetime) -> datetime:
    """Stored datetimes are UTC; some backends (SQLite) return them naive."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
