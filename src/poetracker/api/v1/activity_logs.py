"""
Activity Logs API

Read access to the audit trail (newest first).
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends

from poetracker.api.deps import get_current_user, get_store, require_roles
from poetracker.core.models import ActivityLog, Role, User
from poetracker.core.policy import enforce, self_or_admin
from poetracker.core.schemas import ActivityLogSchema
from poetracker.core.store import EntityStore

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


@router.get("", response_model=list[ActivityLogSchema])
async def list_activity_logs(
    _admin: User = Depends(require_roles(Role.ADMIN)),
    store: EntityStore = Depends(get_store),
) -> list[ActivityLog]:
    return await store.activity_logs()


@router.get("/users/{user_id}", response_model=list[ActivityLogSchema])
async def list_user_activity_logs(
    user_id: int,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> list[ActivityLog]:
    """A user's own activity, or anyone's for an admin."""
    enforce(self_or_admin(current_user, user_id))
    await store.get(User, user_id)
    return await store.activity_logs_for_user(user_id)
