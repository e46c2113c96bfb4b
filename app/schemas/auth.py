"""Authentication and user schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from app.models.user import UserRole
from app.schemas.common import BaseSchema


class RegisterRequest(BaseSchema):
    """Self-registration request. Admin accounts are created by script."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.STUDENT
    student_id: str | None = Field(None, max_length=50)
    department: str | None = Field(None, max_length=255)
    year: int | None = Field(None, ge=1, le=10)


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserBrief(BaseSchema):
    """Expanded user reference."""

    id: int
    name: str
    email: str
    student_id: str | None = None


class UserResponse(BaseSchema):
    """User response schema."""

    id: int
    name: str
    email: str
    role: UserRole
    student_id: str | None
    department: str | None
    year: int | None
    groups: list[int] = []
    is_active: bool
    created_at: datetime


class AuthResponse(BaseSchema):
    """Token plus the authenticated user."""

    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class UserEnvelope(BaseSchema):
    success: bool = True
    user: UserResponse


class UserListEnvelope(BaseSchema):
    success: bool = True
    count: int
    users: list[UserResponse]
