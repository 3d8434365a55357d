"""
Authentication API

Username/password login issuing bearer tokens, logout and the current user.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends

from poetracker.api.deps import get_bearer_token, get_current_user, get_recorder, get_store
from poetracker.core.models import User
from poetracker.core.schemas import LoginRequest, MessageResponse, TokenResponse, UserSchema
from poetracker.core.security import authenticate, issue_token, revoke_token
from poetracker.core.store import EntityStore
from poetracker.workflow import ActivityRecorder

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> TokenResponse:
    """Exchange username and password for a bearer token."""
    user = await authenticate(store, credentials.username, credentials.password)
    token = await issue_token(store, user)
    response = TokenResponse(access_token=token, user=UserSchema.model_validate(user))
    await recorder.record(user.id, "logged_in")
    return response


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> MessageResponse:
    """End the current session."""
    user_id = current_user.id
    await revoke_token(store, token)
    await recorder.record(user_id, "logged_out")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserSchema)
async def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
