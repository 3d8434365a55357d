"""
Best-Effort Side Effects

Notifications and activity-log entries are written after the primary state
change has been committed. Each write is committed on its own; a failure is
logged, rolled back and swallowed so it can never undo the primary change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from poetracker.core.models import ActivityLog, Notification, NotificationType

if TYPE_CHECKING:
    from poetracker.core.store import EntityStore

logger = logging.getLogger(__name__)


class Notifier:
    """Pushes notifications into recipients' inboxes."""

    def __init__(self, store: EntityStore):
        self.store = store
        # Number of writes rolled back; callers reload their records when non-zero
        self.failures = 0

    async def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType,
        linked_item_id: int | None = None,
    ) -> Notification | None:
        """Create one notification.

        Returns:
            The notification, or None if it could not be written
        """
        try:
            notification = await self.store.create(
                Notification,
                user_id=user_id,
                title=title,
                message=message,
                type=type,
                linked_item_id=linked_item_id,
            )
            await self.store.commit()
            return notification
        except Exception as e:
            self.failures += 1
            await self.store.rollback()
            logger.error(
                f"Failed to create notification {title!r} for user {user_id}: {e}",
                exc_info=True,
            )
            return None

    async def notify_all(
        self,
        recipient_ids: Iterable[int],
        title: str,
        message: str,
        type: NotificationType,
        linked_item_id: int | None = None,
    ) -> list[Notification]:
        """Fan a notification out to every recipient; failures skip only that recipient.

        Takes plain ids: a failed write rolls the session back and expires
        every loaded instance.
        """
        sent = []
        for user_id in recipient_ids:
            notification = await self.notify(user_id, title, message, type, linked_item_id)
            if notification is not None:
                sent.append(notification)
        return sent


class ActivityRecorder:
    """Appends audit entries for actions taken through the API."""

    def __init__(self, store: EntityStore, ip_address: str | None = None):
        self.store = store
        self.ip_address = ip_address

    async def record(
        self, user_id: int, action: str, details: dict[str, Any] | None = None
    ) -> ActivityLog | None:
        try:
            entry = await self.store.create(
                ActivityLog,
                user_id=user_id,
                action=action,
                details=details or {},
                ip_address=self.ip_address,
            )
            await self.store.commit()
            return entry
        except Exception as e:
            await self.store.rollback()
            logger.error(
                f"Failed to record activity {action!r} for user {user_id}: {e}", exc_info=True
            )
            return None
