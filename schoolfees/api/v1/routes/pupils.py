"""Pupil routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.models.pupil import Pupil, PupilStatus
from schoolfees.schemas.payment import PaymentResponse
from schoolfees.schemas.pupil import (
    PupilCreate,
    PupilListResponse,
    PupilResponse,
    PupilUpdate,
)
from schoolfees.services import grade as grade_service
from schoolfees.services import parent as parent_service
from schoolfees.services import payment as payment_service
from schoolfees.services import pupil as pupil_service

router = APIRouter(prefix="/pupils", tags=["Pupils"])


# ============== Helper Functions ==============

async def get_pupil_or_404(db: AsyncSession, pupil_id: UUID) -> Pupil:
    """Load a pupil or raise 404."""
    pupil = await pupil_service.get_pupil_by_id(db, pupil_id)
    if not pupil:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pupil not found",
        )
    return pupil


async def check_references(db: AsyncSession, grade_id: UUID | None, parent_id: UUID | None) -> None:
    """Ensure the referenced grade and parent exist."""
    if grade_id and not await grade_service.get_grade_by_id(db, grade_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Grade not found",
        )
    if parent_id and not await parent_service.get_parent_by_id(db, parent_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Parent not found",
        )


# ============== Endpoints ==============

@router.get("", response_model=PupilListResponse)
async def list_pupils(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PUPILS, Action.READ))],
    grade_id: UUID | None = Query(None, description="Filter by grade"),
    parent_id: UUID | None = Query(None, description="Filter by parent"),
    pupil_status: PupilStatus | None = Query(None, alias="status", description="Filter by status"),
    search: str | None = Query(None, description="Search by name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List pupils with optional filters."""
    pupils, total = await pupil_service.get_pupils(
        db,
        grade_id=grade_id,
        parent_id=parent_id,
        status=pupil_status,
        search=search,
        skip=skip,
        limit=limit,
    )
    return PupilListResponse(items=pupils, total=total, skip=skip, limit=limit)


@router.post("", response_model=PupilResponse, status_code=status.HTTP_201_CREATED)
async def create_pupil(
    pupil_data: PupilCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PUPILS, Action.CREATE))],
):
    """Enroll a new pupil."""
    await check_references(db, pupil_data.grade_id, pupil_data.parent_id)
    return await pupil_service.create_pupil(db, pupil_data, created_by=session.actor.id)


@router.get("/{pupil_id}", response_model=PupilResponse)
async def get_pupil(
    pupil_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PUPILS, Action.READ))],
):
    """Get pupil by ID."""
    return await get_pupil_or_404(db, pupil_id)


@router.get("/{pupil_id}/payments", response_model=list[PaymentResponse])
async def get_pupil_payments(
    pupil_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.READ))],
):
    """Payment history of a pupil, soft-deleted payments included."""
    pupil = await get_pupil_or_404(db, pupil_id)
    return await payment_service.get_pupil_payment_history(db, pupil.id)


@router.patch("/{pupil_id}", response_model=PupilResponse)
async def update_pupil(
    pupil_id: UUID,
    pupil_data: PupilUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PUPILS, Action.UPDATE))],
):
    """Update a pupil."""
    pupil = await get_pupil_or_404(db, pupil_id)
    await check_references(db, pupil_data.grade_id, pupil_data.parent_id)
    return await pupil_service.update_pupil(db, pupil, pupil_data, updated_by=session.actor.id)


@router.delete("/{pupil_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pupil(
    pupil_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PUPILS, Action.DELETE))],
) -> None:
    """Delete a pupil and their payments."""
    pupil = await get_pupil_or_404(db, pupil_id)
    await pupil_service.delete_pupil(db, pupil, deleted_by=session.actor.id)
