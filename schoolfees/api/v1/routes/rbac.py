"""Access control routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from schoolfees.core.capabilities import Capability
from schoolfees.core.deps import CurrentSession, require_capability
from schoolfees.core.permissions import all_permissions, permission_matrix
from schoolfees.core.session import ActorSession
from schoolfees.schemas.rbac import (
    MyPermissionsResponse,
    PermissionCheckResponse,
    PermissionMatrixResponse,
)

router = APIRouter(prefix="/rbac", tags=["Access control"])


@router.get("/me", response_model=MyPermissionsResponse)
async def my_permissions(session: CurrentSession) -> MyPermissionsResponse:
    """Permissions and capabilities of the current user."""
    return MyPermissionsResponse(
        role=session.role,
        permissions=session.permissions(),
        capabilities=session.capabilities(),
    )


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    session: CurrentSession,
    resource: str = Query(..., description="Resource, e.g. payments"),
    action: str = Query(..., description="Action, e.g. create"),
) -> PermissionCheckResponse:
    """Check a single resource/action pair for the current user.

    Unknown names are answered, not rejected: they are denied for every
    role except SuperAdmin.
    """
    decision = session.evaluate(resource, action)
    return PermissionCheckResponse(
        resource=resource,
        action=action,
        allowed=decision.allowed,
        reason=decision.reason,
    )


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    session: Annotated[ActorSession, Depends(require_capability(Capability.MANAGE_USERS))],
) -> PermissionMatrixResponse:
    """Permissions granted to every role.

    Open to users who can manage other users.
    """
    return PermissionMatrixResponse(
        permissions=[str(p) for p in all_permissions()],
        roles={role.value: perms for role, perms in permission_matrix().items()},
    )
