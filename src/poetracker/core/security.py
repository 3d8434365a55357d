"""
Credentials and Sessions

Password hashing uses a passlib CryptContext (salted, constant-time verify).
Sessions are opaque random bearer tokens; only their SHA-256 digest is
stored, with an expiry.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING

from passlib.context import CryptContext
from sqlalchemy import delete

from poetracker.config import settings
from poetracker.core.errors import AuthenticationRequired
from poetracker.core.models import AuthToken, User, utcnow

if TYPE_CHECKING:
    from poetracker.core.store import EntityStore

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Create a salted hash of a plaintext password."""
    return pwd_context.hash(password)


def verify_password(password: str, expected_hash: str | None) -> bool:
    """Check the password against the stored hash.

    A missing hash still runs a verification so unknown usernames take as
    long as wrong passwords.
    """
    if not isinstance(password, str):
        password = ""
    if expected_hash is None:
        pwd_context.dummy_verify()
        return False
    return pwd_context.verify(password, expected_hash)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def authenticate(store: EntityStore, username: str, password: str) -> User:
    """Resolve username + password to an active user.

    Raises:
        AuthenticationRequired: Unknown user, wrong password or deactivated account
    """
    user = await store.user_by_username(username.strip())
    password_ok = verify_password(password, user.password_hash if user else None)
    if user is None or not password_ok:
        logger.info(f"Failed login attempt for username {username!r}")
        raise AuthenticationRequired("Invalid username or password")
    if not user.is_active:
        logger.info(f"Login refused for deactivated user {user.id}")
        raise AuthenticationRequired("Account is deactivated")
    return user


async def issue_token(store: EntityStore, user: User) -> str:
    """Create a session token for a validated user and return the client copy."""
    token = secrets.token_urlsafe(32)
    await store.create(
        AuthToken,
        user_id=user.id,
        token_hash=_digest(token),
        expires_at=utcnow() + timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    await store.commit()
    return token


async def resolve_token(store: EntityStore, token: str) -> User:
    """Return the active user owning ``token``.

    Raises:
        AuthenticationRequired: Unknown or expired token, or deactivated user
    """
    record = await store.first_by(AuthToken, AuthToken.token_hash == _digest(token))
    if record is None:
        raise AuthenticationRequired("Invalid or expired session")
    if record.expires_at <= utcnow():
        raise AuthenticationRequired("Invalid or expired session")

    user = await store.find(User, record.user_id)
    if user is None or not user.is_active:
        raise AuthenticationRequired("Account is deactivated")
    return user


async def revoke_token(store: EntityStore, token: str) -> None:
    await store.db.execute(delete(AuthToken).where(AuthToken.token_hash == _digest(token)))
    await store.commit()


async def revoke_user_tokens(store: EntityStore, user_id: int) -> None:
    """Drop every session of a user (used on deactivation)."""
    await store.db.execute(delete(AuthToken).where(AuthToken.user_id == user_id))
