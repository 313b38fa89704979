"""Access control schemas."""

from pydantic import BaseModel

from schoolfees.core.permissions import Role


class PermissionCheckResponse(BaseModel):
    """Result of a single permission check."""

    resource: str
    action: str
    allowed: bool
    reason: str | None = None


class MyPermissionsResponse(BaseModel):
    """Permissions and capabilities of the current user."""

    role: Role | None
    permissions: list[str]
    capabilities: dict[str, bool]


class PermissionMatrixResponse(BaseModel):
    """Every valid permission and the permissions granted to each role."""

    permissions: list[str]
    roles: dict[str, list[str]]
