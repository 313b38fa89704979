"""Authentication routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import CurrentSession, CurrentUser, actor_for
from schoolfees.core.security import create_access_token, create_refresh_token, decode_access_token
from schoolfees.core.session import AuthEvent, auth_events
from schoolfees.models.user import User
from schoolfees.schemas.auth import LoginRequest, MeResponse, RefreshRequest, Token
from schoolfees.services import user as user_service
from schoolfees.services.auth import authenticate_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


async def _issue_tokens(user: User | None, event: AuthEvent) -> Token:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )

    await auth_events.publish(event, actor_for(user))

    access_token = create_access_token(data={"sub": str(user.id)})
    refresh_token = create_refresh_token(data={"sub": str(user.id)})
    return Token(access_token=access_token, refresh_token=refresh_token)


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Login with email and password."""
    user = await authenticate_user(db, login_data.email, login_data.password)
    return await _issue_tokens(user, AuthEvent.SIGNED_IN)


@router.post("/login/form", response_model=Token)
async def login_form(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Login with OAuth2 form (for Swagger UI). Username = email."""
    user = await authenticate_user(db, form_data.username, form_data.password)
    return await _issue_tokens(user, AuthEvent.SIGNED_IN)


@router.post("/refresh", response_model=Token)
async def refresh_tokens(
    refresh_data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Get new access and refresh tokens using a valid refresh token."""
    payload = decode_access_token(refresh_data.refresh_token)

    if payload is None or payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    user = await user_service.get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return await _issue_tokens(user, AuthEvent.TOKEN_REFRESHED)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: CurrentUser) -> None:
    """Sign out. Tokens are stateless; subscribers drop their cached session."""
    await auth_events.publish(AuthEvent.SIGNED_OUT, actor_for(current_user))


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: CurrentUser, session: CurrentSession) -> MeResponse:
    """Current user with effective role, permissions and capabilities."""
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=session.role,
        permissions=session.permissions(),
        capabilities=session.capabilities(),
        can_access_emergency=session.can_access_emergency,
    )
