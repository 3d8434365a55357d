"""
User and Auth Schemas

Pydantic models for API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from poetracker.core.models.enums import Role


class UserBase(BaseModel):
    """Base user schema with common fields."""

    username: str = Field(..., min_length=3, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role
    department_id: int | None = None
    course_id: int | None = None
    class_intake_id: int | None = None


class UserCreate(UserBase):
    """Schema for an admin creating an account."""

    password: str = Field(..., min_length=1, max_length=128)
    is_active: bool = True


class UserUpdate(BaseModel):
    """Profile fields a user (or an admin) may change. Role is immutable."""

    full_name: str | None = Field(None, min_length=1, max_length=200)
    email: str | None = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1, max_length=128)


class UserSchema(UserBase):
    """Full user schema for responses. Never includes the credential hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    created_at: datetime


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSchema


class MessageResponse(BaseModel):
    message: str
