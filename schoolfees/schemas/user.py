"""User schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from schoolfees.core.permissions import Role
from schoolfees.schemas.validators import Email


class UserCreate(BaseModel):
    """Schema for creating a new user."""

    email: Email
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: Role | None = None


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    email: Email | None = None
    full_name: str | None = Field(None, min_length=1, max_length=200)


class UserStatusUpdate(BaseModel):
    """Activate or deactivate a user."""

    is_active: bool


class PasswordReset(BaseModel):
    """Admin password reset."""

    new_password: str = Field(..., min_length=6)


class RoleAssignment(BaseModel):
    """Assign a role to a user."""

    role: Role


class UserResponse(BaseModel):
    """User response schema."""

    id: UUID
    email: str
    full_name: str
    role: Role | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """Paginated list of users."""

    items: list[UserResponse]
    total: int
    skip: int
    limit: int
