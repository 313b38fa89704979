"""Term lock routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import CurrentSession, require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.schemas.term import TermLockResponse, TermOverride, TermRef
from schoolfees.services import term as term_service

router = APIRouter(prefix="/terms", tags=["Terms"])


@router.get("", response_model=list[TermLockResponse])
async def list_term_locks(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: CurrentSession,
    year: int | None = Query(None, description="Filter by year"),
):
    """List terms that have a lock record."""
    return await term_service.get_term_locks(db, year=year)


@router.post("/lock", response_model=TermLockResponse)
async def lock_term(
    data: TermRef,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.TERM, Action.LOCK))],
):
    """Lock a term; its payments can no longer be recorded or edited."""
    return await term_service.lock_term(db, data.term_number, data.year, locked_by=session.actor.id)


@router.post("/unlock", response_model=TermLockResponse)
async def unlock_term(
    data: TermRef,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.TERM, Action.UNLOCK))],
):
    """Unlock a term.

    A term locked by someone else can only be reopened by a user who may
    override locks.
    """
    term_lock = await term_service.get_term_lock(db, data.term_number, data.year)
    if (
        term_lock is not None
        and term_lock.locked_by is not None
        and term_lock.locked_by != session.actor.id
        and not session.is_allowed(Resource.TERM, Action.OVERRIDE)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Term was locked by another user; use override",
        )
    return await term_service.unlock_term(db, data.term_number, data.year, unlocked_by=session.actor.id)


@router.post("/override", response_model=TermLockResponse)
async def override_term_lock(
    data: TermOverride,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.TERM, Action.OVERRIDE))],
):
    """Emergency unlock of a locked term. The reason is kept on the term and in the audit trail."""
    if not await term_service.is_term_locked(db, data.term_number, data.year):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Term is not locked",
        )
    return await term_service.override_term_lock(
        db,
        data.term_number,
        data.year,
        data.reason,
        overridden_by=session.actor.id,
    )
