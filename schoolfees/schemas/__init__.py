"""Pydantic schemas."""

from schoolfees.schemas.auth import (
    LoginRequest,
    MeResponse,
    RefreshRequest,
    Token,
)
from schoolfees.schemas.user import (
    PasswordReset,
    RoleAssignment,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)

__all__ = [
    # Auth
    "Token",
    "LoginRequest",
    "RefreshRequest",
    "MeResponse",
    # User
    "UserCreate",
    "UserUpdate",
    "UserStatusUpdate",
    "UserResponse",
    "UserListResponse",
    "PasswordReset",
    "RoleAssignment",
]
