"""
Shared API Dependencies

Per-request store handle, authenticated caller, role gates and the workflow
services built on them.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from poetracker.core.database import get_db
from poetracker.core.errors import AuthenticationRequired
from poetracker.core.models import Role, User
from poetracker.core.policy import enforce, role_gated
from poetracker.core.security import resolve_token
from poetracker.core.store import EntityStore
from poetracker.storage.files import FileIntake
from poetracker.workflow import ActivityRecorder, WorkflowEngine

bearer_scheme = HTTPBearer(auto_error=False)


async def get_store(db: AsyncSession = Depends(get_db)) -> EntityStore:
    return EntityStore(db)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequired("Not authenticated")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    store: EntityStore = Depends(get_store),
) -> User:
    """Resolve the bearer token to an active user, else 401."""
    return await resolve_token(store, token)


def require_roles(*roles: Role) -> Callable[..., Awaitable[User]]:
    """Dependency allowing only callers whose role is in ``roles``.

    Usage:
        admin: User = Depends(require_roles(Role.ADMIN))
    """

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        enforce(role_gated(current_user, roles))
        return current_user

    return dependency


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_recorder(
    request: Request, store: EntityStore = Depends(get_store)
) -> ActivityRecorder:
    return ActivityRecorder(store, ip_address=client_ip(request))


async def get_workflow(store: EntityStore = Depends(get_store)) -> WorkflowEngine:
    return WorkflowEngine(store, intake=FileIntake())
