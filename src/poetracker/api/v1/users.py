"""
User Management API

Admin account administration plus self-service profile and password changes.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, Query, status

from poetracker.api.deps import (
    get_current_user,
    get_recorder,
    get_store,
    get_workflow,
    require_roles,
)
from poetracker.core.models import Role, User
from poetracker.core.policy import enforce, self_or_admin
from poetracker.core.schemas import (
    MessageResponse,
    PasswordChange,
    UserCreate,
    UserSchema,
    UserUpdate,
)
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder, WorkflowEngine

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserSchema])
async def list_users(
    role: Role | None = Query(None, description="Only users with this role"),
    _admin: User = Depends(require_roles(Role.ADMIN)),
    store: EntityStore = Depends(get_store),
) -> list[User]:
    """List every account (admin only)."""
    if role is not None:
        return await store.users_by_role(role)
    return await store.list_by(User)


@router.post("", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> UserSchema:
    """Create an account for any role (admin only)."""
    user = await workflow.register_user(data)
    response = UserSchema.model_validate(user)
    await recorder.record(admin.id, "created_user", {"target_user": user.id, "role": user.role})
    return response


@router.get("/{user_id}", response_model=UserSchema)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> User:
    """A user's own profile, or anyone's for an admin."""
    enforce(self_or_admin(current_user, user_id))
    return await store.get(User, user_id)


@router.patch("/{user_id}", response_model=UserSchema)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> UserSchema:
    """Update display name and/or email."""
    actor_id = current_user.id
    user = await workflow.update_profile(current_user, user_id, data)
    response = UserSchema.model_validate(user)
    await recorder.record(
        actor_id,
        "updated_user",
        {"target_user": user_id, "fields": sorted(data.model_dump(exclude_none=True))},
    )
    return response


@router.post("/{user_id}/password", response_model=MessageResponse)
async def change_password(
    user_id: int,
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> MessageResponse:
    """Change the caller's own password."""
    await workflow.change_password(current_user, user_id, data)
    await recorder.record(user_id, "changed_password")
    return MessageResponse(message="Password changed successfully")


@router.post("/{user_id}/deactivate", response_model=MessageResponse)
async def deactivate_user(
    user_id: int,
    admin: User = Depends(require_roles(Role.ADMIN)),
    workflow: WorkflowEngine = Depends(get_workflow),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> MessageResponse:
    """Block an account from authenticating (admin only). The record is kept."""
    admin_id = admin.id
    await workflow.deactivate_user(admin, user_id)
    await recorder.record(admin_id, "deactivated_user", {"target_user": user_id})
    return MessageResponse(message="User deactivated successfully")
