"""Fee routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.models.fee import Fee
from schoolfees.schemas.fee import FeeActivation, FeeCreate, FeeResponse, FeeUpdate
from schoolfees.services import fee as fee_service
from schoolfees.services import grade as grade_service

router = APIRouter(prefix="/fees", tags=["Fees"])


async def get_fee_or_404(db: AsyncSession, fee_id: UUID) -> Fee:
    """Load a fee or raise 404."""
    fee = await fee_service.get_fee_by_id(db, fee_id)
    if not fee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Fee not found",
        )
    return fee


async def ensure_unique(
    db: AsyncSession,
    grade_id: UUID,
    term_number: int,
    year: int,
    exclude_id: UUID | None = None,
) -> None:
    """Only one fee per grade and term."""
    existing = await fee_service.find_fee(db, grade_id, term_number, year)
    if existing and existing.id != exclude_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A fee for this grade and term already exists",
        )


@router.get("", response_model=list[FeeResponse])
async def list_fees(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.READ))],
    grade_id: UUID | None = Query(None, description="Filter by grade"),
    term_number: int | None = Query(None, ge=1, le=3, description="Filter by term"),
    year: int | None = Query(None, description="Filter by year"),
    is_active: bool | None = Query(None, description="Filter by active status"),
):
    """List fees."""
    return await fee_service.get_fees(
        db,
        grade_id=grade_id,
        term_number=term_number,
        year=year,
        is_active=is_active,
    )


@router.post("", response_model=FeeResponse, status_code=status.HTTP_201_CREATED)
async def create_fee(
    fee_data: FeeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.CREATE))],
):
    """Set the fee of a grade for a term."""
    if not await grade_service.get_grade_by_id(db, fee_data.grade_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Grade not found",
        )
    await ensure_unique(db, fee_data.grade_id, fee_data.term_number, fee_data.year)
    return await fee_service.create_fee(db, fee_data, created_by=session.actor.id)


@router.get("/{fee_id}", response_model=FeeResponse)
async def get_fee(
    fee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.READ))],
):
    """Get fee by ID."""
    return await get_fee_or_404(db, fee_id)


@router.patch("/{fee_id}", response_model=FeeResponse)
async def update_fee(
    fee_id: UUID,
    fee_data: FeeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.UPDATE))],
):
    """Update a fee."""
    fee = await get_fee_or_404(db, fee_id)
    await ensure_unique(
        db,
        fee.grade_id,
        fee_data.term_number or fee.term_number,
        fee_data.year or fee.year,
        exclude_id=fee.id,
    )
    return await fee_service.update_fee(db, fee, fee_data, updated_by=session.actor.id)


@router.patch("/{fee_id}/status", response_model=FeeResponse)
async def set_fee_status(
    fee_id: UUID,
    data: FeeActivation,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.ACTIVATE))],
):
    """Activate or deactivate a fee."""
    fee = await get_fee_or_404(db, fee_id)
    return await fee_service.set_active(db, fee, data.is_active, updated_by=session.actor.id)


@router.delete("/{fee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee(
    fee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.FEES, Action.DELETE))],
) -> None:
    """Delete a fee."""
    fee = await get_fee_or_404(db, fee_id)
    await fee_service.delete_fee(db, fee, deleted_by=session.actor.id)
