"""User roles and permissions.

Permission string format: "resource:action", e.g. ``payments:create``.
Every resource accepts a fixed set of actions (see ``RESOURCE_ACTIONS``);
anything outside that matrix is never granted to a non-SuperAdmin role.
"""

from enum import Enum
from typing import NamedTuple


class Role(str, Enum):
    """User roles in the system."""

    SUPER_ADMIN = "SuperAdmin"  # Governance role, full access
    DIRECTOR = "Director"  # Everything except system and user management
    SCHOOL_ADMIN = "SchoolAdmin"  # Day to day operations only

    @classmethod
    def parse(cls, label: "str | Role | None") -> "Role | None":
        """Parse a stored role label, tolerating legacy spellings like 'School Admin'."""
        if label is None:
            return None
        if isinstance(label, Role):
            return label
        compact = "".join(str(label).split())
        for role in cls:
            if role.value.lower() == compact.lower():
                return role
        return None


class Resource(str, Enum):
    """Protected domain object classes."""

    USERS = "users"
    PUPILS = "pupils"
    PARENTS = "parents"
    PAYMENTS = "payments"
    FEES = "fees"
    GRADES = "grades"
    REPORTS = "reports"
    AUDIT_LOGS = "audit_logs"
    SYSTEM = "system"
    TERM = "term"


class Action(str, Enum):
    """Operations that can be performed on resources."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ACTIVATE = "activate"
    ASSIGN_ROLE = "assign_role"
    RESET_PASSWORD = "reset_password"
    SOFT_DELETE = "soft_delete"
    APPROVE_DELETE = "approve_delete"
    ADJUST = "adjust"
    REFUND = "refund"
    LOCK = "lock"
    UNLOCK = "unlock"
    OVERRIDE = "override"
    SETTINGS = "settings"
    BACKUP = "backup"
    RESTORE = "restore"
    MAINTENANCE = "maintenance"
    EXPORT = "export"


class Permission(NamedTuple):
    """A permission is a combination of resource and action."""

    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Parse a permission string like 'pupils:read'."""
        parts = perm_str.split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid permission format: {perm_str}")
        permission = cls(Resource(parts[0]), Action(parts[1]))
        if permission.action not in RESOURCE_ACTIONS[permission.resource]:
            raise ValueError(f"Action '{parts[1]}' is not valid for resource '{parts[0]}'")
        return permission


# Valid actions per resource
RESOURCE_ACTIONS: dict[Resource, frozenset[Action]] = {
    Resource.USERS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
        Action.ACTIVATE, Action.ASSIGN_ROLE, Action.RESET_PASSWORD,
    ]),
    Resource.PUPILS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
    ]),
    Resource.PARENTS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
    ]),
    Resource.PAYMENTS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
        Action.SOFT_DELETE, Action.APPROVE_DELETE, Action.ADJUST, Action.REFUND,
    ]),
    Resource.FEES: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.ACTIVATE,
    ]),
    Resource.GRADES: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
    ]),
    Resource.REPORTS: frozenset([
        Action.READ, Action.CREATE, Action.EXPORT,
    ]),
    Resource.AUDIT_LOGS: frozenset([
        Action.READ, Action.EXPORT,
    ]),
    Resource.SYSTEM: frozenset([
        Action.SETTINGS, Action.BACKUP, Action.RESTORE, Action.MAINTENANCE,
    ]),
    Resource.TERM: frozenset([
        Action.LOCK, Action.UNLOCK, Action.OVERRIDE,
    ]),
}


# SchoolAdmin rules
GOVERNANCE_RESOURCES = frozenset([Resource.SYSTEM, Resource.USERS, Resource.AUDIT_LOGS])
GOVERNANCE_ACTIONS = frozenset([
    Action.DELETE, Action.BACKUP, Action.RESTORE, Action.MAINTENANCE,
    Action.SETTINGS, Action.OVERRIDE, Action.ASSIGN_ROLE,
])
OPERATIONAL_RESOURCES = frozenset([
    Resource.PUPILS, Resource.PARENTS, Resource.PAYMENTS,
    Resource.FEES, Resource.GRADES, Resource.REPORTS,
])
OPERATIONAL_ACTIONS = frozenset([Action.READ, Action.CREATE, Action.UPDATE])
SCHOOL_ADMIN_CARVE_OUTS = frozenset([
    Permission(Resource.PAYMENTS, Action.DELETE),
    Permission(Resource.PAYMENTS, Action.ADJUST),
    Permission(Resource.PAYMENTS, Action.REFUND),
    Permission(Resource.FEES, Action.DELETE),
])

# Director rules
DIRECTOR_DENIED_RESOURCES = frozenset([Resource.SYSTEM, Resource.USERS])
DIRECTOR_DENIED_ACTIONS = frozenset([
    Action.BACKUP, Action.RESTORE, Action.MAINTENANCE, Action.OVERRIDE,
])


class Decision(NamedTuple):
    """Outcome of a permission evaluation."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


def _as_resource(value: "Resource | str") -> Resource | None:
    try:
        return Resource(value)
    except ValueError:
        return None


def _as_action(value: "Action | str") -> Action | None:
    try:
        return Action(value)
    except ValueError:
        return None


def _evaluate_school_admin(resource: Resource, action: Action) -> Decision:
    if resource in GOVERNANCE_RESOURCES:
        return Decision(False, f"'{resource.value}' is reserved for SuperAdmin")
    if action in GOVERNANCE_ACTIONS:
        return Decision(False, f"'{action.value}' is reserved for SuperAdmin")
    if resource in OPERATIONAL_RESOURCES and action in OPERATIONAL_ACTIONS:
        if Permission(resource, action) in SCHOOL_ADMIN_CARVE_OUTS:
            return Decision(False, f"'{resource.value}:{action.value}' is reserved for SuperAdmin")
        return Decision(True)
    return Decision(False, f"SchoolAdmin cannot {action.value} {resource.value}")


def _evaluate_director(resource: Resource, action: Action) -> Decision:
    if resource in DIRECTOR_DENIED_RESOURCES:
        return Decision(False, f"Director cannot access '{resource.value}'")
    if action in DIRECTOR_DENIED_ACTIONS:
        return Decision(False, f"Director cannot perform '{action.value}'")
    return Decision(True)


def evaluate(
    role: Role | None,
    resource: "Resource | str",
    action: "Action | str",
) -> Decision:
    """Decide whether ``role`` may perform ``action`` on ``resource``."""
    if role is None:
        return Decision(False, "No role assigned")

    if role == Role.SUPER_ADMIN:
        return Decision(True)

    parsed_resource = _as_resource(resource)
    parsed_action = _as_action(action)
    if parsed_resource is None or parsed_action is None:
        return Decision(False, f"Unrecognized permission '{resource}:{action}'")
    if parsed_action not in RESOURCE_ACTIONS[parsed_resource]:
        return Decision(False, f"'{parsed_action.value}' is not an action on '{parsed_resource.value}'")

    if role == Role.SCHOOL_ADMIN:
        return _evaluate_school_admin(parsed_resource, parsed_action)
    if role == Role.DIRECTOR:
        return _evaluate_director(parsed_resource, parsed_action)

    return Decision(False, f"Unknown role '{role}'")


def is_allowed(
    role: Role | None,
    resource: "Resource | str",
    action: "Action | str",
) -> bool:
    """Check if a role may perform an action on a resource."""
    return evaluate(role, resource, action).allowed


def has_permission(role: Role | None, permission: "str | Permission") -> bool:
    """Check a 'resource:action' permission string for a role."""
    if isinstance(permission, Permission):
        return is_allowed(role, permission.resource, permission.action)
    if role == Role.SUPER_ADMIN:
        return True
    try:
        parsed = Permission.from_string(permission)
    except ValueError:
        return False
    return is_allowed(role, parsed.resource, parsed.action)


def all_permissions() -> list[Permission]:
    """Every valid permission in the resource/action matrix."""
    return [
        Permission(resource, action)
        for resource in Resource
        for action in Action
        if action in RESOURCE_ACTIONS[resource]
    ]


def is_valid_permission(perm_str: str) -> bool:
    """Check if a permission string names a valid resource/action pair."""
    try:
        Permission.from_string(perm_str)
    except ValueError:
        return False
    return True


def permissions_for_role(role: Role | None) -> list[str]:
    """All permission strings granted to a role."""
    return [str(p) for p in all_permissions() if is_allowed(role, p.resource, p.action)]


def permission_matrix() -> dict[Role, list[str]]:
    """Permissions granted to every role."""
    return {role: permissions_for_role(role) for role in Role}
