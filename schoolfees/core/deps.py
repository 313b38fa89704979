"""Dependencies for FastAPI routes."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.capabilities import Capability
from schoolfees.core.config import settings
from schoolfees.core.database import get_db
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.roles import Actor
from schoolfees.core.security import decode_access_token
from schoolfees.core.session import ActorSession
from schoolfees.models.user import User
from schoolfees.services import audit as audit_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login/form")


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None or payload.get("type") != "access":
        raise credentials_exception

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    try:
        uuid_id = UUID(user_id)
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == uuid_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )

    return user


def actor_for(user: User) -> Actor:
    """Identity of a user as seen by the role resolver."""
    return Actor(id=user.id, email=user.email, role=user.role)


async def get_actor_session(
    current_user: Annotated[User, Depends(get_current_user)],
) -> ActorSession:
    """Resolve the role of the current user once per request."""
    return ActorSession.start(actor_for(current_user), settings.BREAK_GLASS_ACCOUNTS)


def require_permission(resource: Resource, action: Action):
    """Dependency factory to check if the user may perform ``action`` on ``resource``."""

    async def permission_checker(
        session: Annotated[ActorSession, Depends(get_actor_session)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> ActorSession:
        decision = session.evaluate(resource, action)
        if settings.ACCESS_AUDIT_ENABLED:
            await audit_service.record_access(
                db,
                user_id=session.actor.id,
                resource=resource.value,
                action=action.value,
                success=decision.allowed,
                denial_reason=None if decision.allowed else decision.reason,
            )
        if not decision.allowed:
            logger.info(
                "Denied %s:%s for %s (%s)",
                resource.value,
                action.value,
                session.actor.email,
                decision.reason,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return session

    return permission_checker


def require_capability(capability: Capability):
    """Dependency factory to check if the user holds a capability."""

    async def capability_checker(
        session: Annotated[ActorSession, Depends(get_actor_session)],
    ) -> ActorSession:
        if not session.has_capability(capability):
            logger.info("Denied %s for %s", capability.value, session.actor.email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return session

    return capability_checker


# Common dependency aliases
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentSession = Annotated[ActorSession, Depends(get_actor_session)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
