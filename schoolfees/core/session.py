"""Per-session permission state and auth-state notifications."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum

from schoolfees.core.capabilities import Capability, capabilities_for, has_capability
from schoolfees.core.permissions import (
    Action,
    Decision,
    Resource,
    Role,
    evaluate,
    permissions_for_role,
)
from schoolfees.core.roles import Actor, resolve_role

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    """Identity changes reported by the auth layer."""

    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"
    ROLE_CHANGED = "role_changed"


AuthEventHandler = Callable[[AuthEvent, Actor | None], Awaitable[None]]


class AuthStateNotifier:
    """In-memory dispatcher that fans auth events out to subscribers."""

    def __init__(self) -> None:
        self._handlers: list[AuthEventHandler] = []

    def subscribe(self, handler: AuthEventHandler) -> Callable[[], None]:
        """Register ``handler``; returns a callable that unsubscribes it."""
        if handler not in self._handlers:
            self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: AuthEventHandler) -> None:
        """Remove ``handler`` when present."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            return

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    async def publish(self, event: AuthEvent, actor: Actor | None = None) -> None:
        """Dispatch ``event`` to every subscriber in registration order.

        A failing handler is logged and skipped.
        """
        for handler in list(self._handlers):
            try:
                await handler(event, actor)
            except Exception:
                logger.exception("Auth event handler failed on %s", event.value)


@dataclass
class ActorSession:
    """The current actor and its role, resolved once and cached."""

    actor: Actor | None = None
    role: Role | None = None

    @classmethod
    def start(
        cls,
        actor: Actor | None,
        break_glass: Mapping[str, Role | str] | None = None,
    ) -> "ActorSession":
        session = cls()
        session.refresh(actor, break_glass)
        return session

    def refresh(
        self,
        actor: Actor | None,
        break_glass: Mapping[str, Role | str] | None = None,
    ) -> None:
        """Re-run role resolution for ``actor``."""
        self.actor = actor
        self.role = resolve_role(actor, break_glass)

    def watch(
        self,
        notifier: AuthStateNotifier,
        break_glass: Mapping[str, Role | str] | None = None,
    ) -> Callable[[], None]:
        """Keep this session in sync with ``notifier``; returns the unsubscribe callable."""

        async def on_auth_event(event: AuthEvent, actor: Actor | None) -> None:
            if event == AuthEvent.SIGNED_OUT:
                if actor is None or self._is_current(actor):
                    self.refresh(None)
                return
            if actor is None:
                return
            if self.actor is not None and not self._is_current(actor):
                return
            self.refresh(actor, break_glass)
            logger.debug("Session role refreshed on %s: %s", event.value, self.role)

        return notifier.subscribe(on_auth_event)

    def _is_current(self, actor: Actor) -> bool:
        return self.actor is not None and str(self.actor.id) == str(actor.id)

    @property
    def is_authenticated(self) -> bool:
        return self.actor is not None

    # Permission checks

    def evaluate(self, resource: Resource | str, action: Action | str) -> Decision:
        return evaluate(self.role, resource, action)

    def is_allowed(self, resource: Resource | str, action: Action | str) -> bool:
        return self.evaluate(resource, action).allowed

    def has_capability(self, capability: Capability | str) -> bool:
        return has_capability(self.role, capability)

    def capabilities(self) -> dict[str, bool]:
        return capabilities_for(self.role)

    def permissions(self) -> list[str]:
        return permissions_for_role(self.role)

    # Role predicates

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def is_director(self) -> bool:
        return self.role == Role.DIRECTOR

    @property
    def is_school_admin(self) -> bool:
        return self.role == Role.SCHOOL_ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.SUPER_ADMIN, Role.DIRECTOR)

    @property
    def has_any_role(self) -> bool:
        return self.role is not None

    @property
    def can_access_emergency(self) -> bool:
        """Emergency console (term overrides, payment adjustments) is SuperAdmin only."""
        return self.is_super_admin


auth_events = AuthStateNotifier()
