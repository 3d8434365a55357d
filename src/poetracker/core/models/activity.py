"""
Notification and Activity Log Models

Notifications are pushed on write by the workflow; activity logs are an
append-only audit trail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin, UTCDateTime, str_enum, utcnow
from .enums import NotificationType


class Notification(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    """A message addressed to one user. Only ``is_read`` ever changes."""

    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(default=False)
    type: Mapped[NotificationType] = mapped_column(str_enum(NotificationType), nullable=False)
    linked_item_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Id of the triggering entity"
    )


class ActivityLog(Base, IntegerPrimaryKeyMixin):
    """Audit record of an action taken by a user. Never updated or deleted."""

    __tablename__ = "activity_logs"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
