"""Role resolution for authenticated actors."""

from collections.abc import Mapping
from dataclasses import dataclass
from uuid import UUID

from schoolfees.core.permissions import Role


@dataclass(frozen=True)
class Actor:
    """The authenticated identity behind a session."""

    id: UUID | str
    email: str
    role: Role | str | None = None  # stored role record, if any


def resolve_role(
    actor: Actor | None,
    break_glass: Mapping[str, Role | str] | None = None,
) -> Role | None:
    """Resolve the effective role of an actor.

    Identities listed in ``break_glass`` (by email or id) get the mapped role
    regardless of what is stored for them.
    """
    if actor is None:
        return None

    if break_glass:
        for identifier in (actor.email, str(actor.id)):
            if identifier in break_glass:
                forced = Role.parse(break_glass[identifier])
                if forced is not None:
                    return forced

    return Role.parse(actor.role)
