"""High-level capabilities derived from fine-grained permissions.

A capability holds when ANY of its required permissions is granted.
"""

from enum import Enum

from schoolfees.core.permissions import Action, Permission, Resource, Role, is_allowed


class Capability(str, Enum):
    """Named capability gates used by route guards and clients."""

    ACCESS_ADMIN_PANEL = "can_access_admin_panel"
    MANAGE_USERS = "can_manage_users"
    MANAGE_FINANCIALS = "can_manage_financials"
    PERFORM_SYSTEM_ACTIONS = "can_perform_system_actions"
    MANAGE_PUPILS = "can_manage_pupils"
    VIEW_REPORTS = "can_view_reports"
    MANAGE_TERMS = "can_manage_terms"


CAPABILITY_REQUIREMENTS: dict[Capability, tuple[Permission, ...]] = {
    Capability.ACCESS_ADMIN_PANEL: (
        Permission(Resource.USERS, Action.READ),
        Permission(Resource.SYSTEM, Action.SETTINGS),
        Permission(Resource.AUDIT_LOGS, Action.READ),
    ),
    Capability.MANAGE_USERS: (
        Permission(Resource.USERS, Action.CREATE),
        Permission(Resource.USERS, Action.UPDATE),
        Permission(Resource.USERS, Action.DELETE),
        Permission(Resource.USERS, Action.ASSIGN_ROLE),
    ),
    Capability.MANAGE_FINANCIALS: (
        Permission(Resource.PAYMENTS, Action.CREATE),
        Permission(Resource.PAYMENTS, Action.UPDATE),
        Permission(Resource.FEES, Action.CREATE),
        Permission(Resource.FEES, Action.UPDATE),
        Permission(Resource.PAYMENTS, Action.APPROVE_DELETE),
    ),
    Capability.PERFORM_SYSTEM_ACTIONS: (
        Permission(Resource.SYSTEM, Action.SETTINGS),
        Permission(Resource.SYSTEM, Action.BACKUP),
        Permission(Resource.SYSTEM, Action.MAINTENANCE),
        Permission(Resource.TERM, Action.OVERRIDE),
    ),
    Capability.MANAGE_PUPILS: (
        Permission(Resource.PUPILS, Action.CREATE),
        Permission(Resource.PUPILS, Action.UPDATE),
        Permission(Resource.PARENTS, Action.CREATE),
        Permission(Resource.PARENTS, Action.UPDATE),
    ),
    Capability.VIEW_REPORTS: (
        Permission(Resource.REPORTS, Action.READ),
        Permission(Resource.REPORTS, Action.EXPORT),
    ),
    Capability.MANAGE_TERMS: (
        Permission(Resource.TERM, Action.LOCK),
        Permission(Resource.TERM, Action.UNLOCK),
        Permission(Resource.TERM, Action.OVERRIDE),
    ),
}


def has_capability(role: Role | None, capability: "Capability | str") -> bool:
    """Check if a role holds a capability."""
    requirements = CAPABILITY_REQUIREMENTS[Capability(capability)]
    return any(is_allowed(role, p.resource, p.action) for p in requirements)


def capabilities_for(role: Role | None) -> dict[str, bool]:
    """Evaluate the whole capability catalogue for a role."""
    return {capability.value: has_capability(role, capability) for capability in Capability}
