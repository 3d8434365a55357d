"""
Notifications API

A user's inbox. Notifications are created by the workflow; users can only
mark them as read.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends

from poetracker.api.deps import get_current_user, get_store, get_workflow
from poetracker.core.models import Notification, User
from poetracker.core.schemas import MessageResponse, NotificationSchema
from poetracker.core.store import EntityStore
from poetracker.workflow import WorkflowEngine

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationSchema])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> list[Notification]:
    """The caller's notifications, newest first."""
    return await store.notifications_for_user(current_user.id)


@router.post("/read-all", response_model=MessageResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    workflow: WorkflowEngine = Depends(get_workflow),
) -> MessageResponse:
    updated = await workflow.mark_all_notifications_read(current_user)
    return MessageResponse(message=f"Marked {updated} notifications as read")


@router.post("/{notification_id}/read", response_model=NotificationSchema)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    workflow: WorkflowEngine = Depends(get_workflow),
) -> Notification:
    return await workflow.mark_notification_read(current_user, notification_id)
