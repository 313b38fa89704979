"""Authentication schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from schoolfees.core.permissions import Role
from schoolfees.schemas.validators import Email


class Token(BaseModel):
    """JWT token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str


class LoginRequest(BaseModel):
    """Login request schema."""

    email: Email
    password: str = Field(..., min_length=6)


class MeResponse(BaseModel):
    """Current user with resolved role, permissions and capabilities."""

    id: UUID
    email: str
    full_name: str
    role: Role | None
    permissions: list[str]
    capabilities: dict[str, bool]
    can_access_emergency: bool
