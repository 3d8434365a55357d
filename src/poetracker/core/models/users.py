"""
User Models

Accounts for every role in the PoE workflow, plus issued access tokens.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin, UTCDateTime, str_enum
from .enums import Role


class User(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    """A trainee, assessor, verifier or administrator.

    Role is fixed at creation. Deactivated accounts cannot authenticate.
    """

    __tablename__ = "users"

    # Identity
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(str_enum(Role), nullable=False)

    # Placement (meaningful for trainees and assessors only)
    department_id: Mapped[int | None] = mapped_column(ForeignKey("departments.id"), nullable=True)
    course_id: Mapped[int | None] = mapped_column(ForeignKey("courses.id"), nullable=True)
    class_intake_id: Mapped[int | None] = mapped_column(
        ForeignKey("class_intakes.id"), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(default=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class AuthToken(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    """Bearer token issued at login. Only the SHA-256 digest is stored."""

    __tablename__ = "auth_tokens"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

