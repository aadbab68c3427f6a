"""
Base model definitions for SQLAlchemy.

Provides:
- UTCDateTime TypeDecorator for timezone-aware instants across SQLite and PostgreSQL
- BaseModel declarative base with common fields
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, TypeDecorator, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    PostgreSQL keeps the offset natively (TIMESTAMPTZ). SQLite has no
    timezone support and would persist the wall-clock value of whatever zone
    the datetime carries, so values are normalised to UTC on the way in and
    re-tagged as UTC on the way out. Instants written in different zones then
    compare correctly in SQL on both backends.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert aware datetimes to UTC; reject naive ones."""
        if value is None:
            return value

        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored as an instant")

        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        """Return aware UTC datetimes regardless of backend."""
        if value is None:
            return value

        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all models."""


class BaseModel(Base):
    """
    Base model with common fields for all entities.

    Provides:
    - id: integer surrogate primary key
    - created_at: Timestamp of record creation (UTC)
    - updated_at: Timestamp of last update (UTC, auto-updates)
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique identifier"
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp of record creation (UTC)"
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        doc="Timestamp of last update (UTC)"
    )

    def to_dict(self) -> dict:
        """
        Convert model instance to dictionary.

        Returns:
            Dictionary with all column values (excludes relationships)
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        """String representation showing class name and ID."""
        return f"<{self.__class__.__name__}(id={self.id})>"
