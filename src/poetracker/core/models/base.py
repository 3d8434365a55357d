"""
SQLAlchemy Base Model and Mixins

Provides base class and common mixins for all PoE tracker models.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import DateTime, Integer, TypeDecorator, event
from sqlalchemy import Enum as SAEnum
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC datetime on every backend.

    SQLite drops tzinfo on storage, so values are normalised to UTC on the
    way in and re-stamped as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class IntegerPrimaryKeyMixin:
    """Mixin for an auto-incrementing integer primary key.

    Identifiers are opaque, unique within their collection and allocated by
    the database, which serialises allocate-and-insert.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class CreatedAtMixin:
    """Mixin for a server-assigned creation timestamp (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
        comment="Creation timestamp (UTC)",
    )


# Event listener to stamp in-memory objects before they are flushed
@event.listens_for(CreatedAtMixin, "init", propagate=True)
def receive_init_created_at(target, args, kwargs):  # type: ignore[no-untyped-def]
    """Auto-generate creation timestamp on instance creation if not provided."""
    if "created_at" not in kwargs:
        target.created_at = utcnow()


def str_enum(enum_cls: type[StrEnum]) -> SAEnum:
    """Column type storing a StrEnum by value (portable, no native DB enum)."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=30,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
