"""User routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import actor_for, require_permission
from schoolfees.core.permissions import Action, Resource, Role
from schoolfees.core.session import ActorSession, AuthEvent, auth_events
from schoolfees.models.user import User
from schoolfees.schemas.user import (
    PasswordReset,
    RoleAssignment,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)
from schoolfees.services import auth as auth_service
from schoolfees.services import user as user_service

router = APIRouter(prefix="/users", tags=["Users"])


# ============== Helper Functions ==============

async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    """Load a user or raise 404."""
    user = await user_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def ensure_not_self(session: ActorSession, target: User, detail: str) -> None:
    """Users cannot lock themselves out."""
    if str(session.actor.id) == str(target.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


# ============== Endpoints ==============

@router.get("", response_model=UserListResponse)
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.READ))],
    role: Role | None = Query(None, description="Filter by role"),
    is_active: bool | None = Query(None, description="Filter by active status"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Max number of records"),
) -> UserListResponse:
    """List users with optional filters."""
    users, total = await user_service.get_users(
        db,
        role=role,
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.CREATE))],
) -> UserResponse:
    """Create a new user, optionally with a role."""
    if await auth_service.get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    user = await user_service.create_user(db, user_data, created_by=session.actor.id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.READ))],
) -> UserResponse:
    """Get user by ID."""
    user = await get_user_or_404(db, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.UPDATE))],
) -> UserResponse:
    """Update user details."""
    user = await get_user_or_404(db, user_id)

    if user_data.email and user_data.email != user.email:
        if await auth_service.get_user_by_email(db, user_data.email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User with this email already exists",
            )

    user = await user_service.update_user(db, user, user_data, updated_by=session.actor.id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: UUID,
    status_data: UserStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.ACTIVATE))],
) -> UserResponse:
    """Activate or deactivate a user."""
    user = await get_user_or_404(db, user_id)
    if not status_data.is_active:
        ensure_not_self(session, user, "Cannot deactivate yourself")

    user = await user_service.set_active(db, user, status_data.is_active, updated_by=session.actor.id)
    if not user.is_active:
        await auth_events.publish(AuthEvent.SIGNED_OUT, actor_for(user))
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reset-password", response_model=UserResponse)
async def reset_user_password(
    user_id: UUID,
    data: PasswordReset,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.RESET_PASSWORD))],
) -> UserResponse:
    """Set a new password for a user."""
    user = await get_user_or_404(db, user_id)
    user = await user_service.reset_password(db, user, data.new_password, reset_by=session.actor.id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}/role", response_model=UserResponse)
async def assign_user_role(
    user_id: UUID,
    data: RoleAssignment,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.ASSIGN_ROLE))],
) -> UserResponse:
    """Assign a role to a user, replacing the current one."""
    user = await get_user_or_404(db, user_id)
    user = await user_service.assign_role(db, user, data.role, assigned_by=session.actor.id)
    await auth_events.publish(AuthEvent.ROLE_CHANGED, actor_for(user))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}/role", response_model=UserResponse)
async def remove_user_role(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.ASSIGN_ROLE))],
) -> UserResponse:
    """Remove the role of a user."""
    user = await get_user_or_404(db, user_id)
    ensure_not_self(session, user, "Cannot remove your own role")
    user = await user_service.remove_role(db, user, removed_by=session.actor.id)
    await auth_events.publish(AuthEvent.ROLE_CHANGED, actor_for(user))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.USERS, Action.DELETE))],
) -> None:
    """Delete a user."""
    user = await get_user_or_404(db, user_id)
    ensure_not_self(session, user, "Cannot delete yourself")

    actor = actor_for(user)
    await user_service.delete_user(db, user, deleted_by=session.actor.id)
    await auth_events.publish(AuthEvent.SIGNED_OUT, actor)
