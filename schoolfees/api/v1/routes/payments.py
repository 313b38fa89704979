"""Payment routes."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.models.payment import ApprovalStatus, Payment
from schoolfees.schemas.payment import (
    PaymentAdjustment,
    PaymentCreate,
    PaymentDeletionRejection,
    PaymentListResponse,
    PaymentResponse,
    PaymentSoftDelete,
    PaymentUpdate,
    PendingDeletionResponse,
    TermTotal,
)
from schoolfees.services import payment as payment_service
from schoolfees.services import pupil as pupil_service
from schoolfees.services import term as term_service

router = APIRouter(prefix="/payments", tags=["Payments"])


# ============== Helper Functions ==============

async def get_payment_or_404(db: AsyncSession, payment_id: UUID) -> Payment:
    """Load a payment or raise 404."""
    payment = await payment_service.get_payment_by_id(db, payment_id)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found",
        )
    return payment


async def ensure_term_open(db: AsyncSession, term_number: int, year: int) -> None:
    """Payments of a locked term cannot change."""
    if await term_service.is_term_locked(db, term_number, year):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Term {term_number} {year} is locked",
        )


def ensure_active(payment: Payment) -> None:
    """Soft-deleted payments only move through the approval workflow."""
    if payment.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Payment has been deleted",
        )


def ensure_pending(payment: Payment) -> None:
    """Only pending deletions can be approved or rejected."""
    if payment.approval_status != ApprovalStatus.PENDING_APPROVAL:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Payment is not pending deletion approval",
        )


# ============== Endpoints ==============

@router.get("", response_model=PaymentListResponse)
async def list_payments(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.READ))],
    pupil_id: UUID | None = Query(None, description="Filter by pupil"),
    term_number: int | None = Query(None, ge=1, le=3, description="Filter by term"),
    year: int | None = Query(None, description="Filter by year"),
    approval_status: ApprovalStatus | None = Query(None, description="Filter by approval status"),
    include_deleted: bool = Query(False, description="Include soft-deleted payments"),
    date_from: date | None = Query(None, description="Filter by payment date from"),
    date_to: date | None = Query(None, description="Filter by payment date to"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max number of records"),
) -> PaymentListResponse:
    """
    List payments with optional filters.

    - **include_deleted**: also return payments that were soft deleted
    - **date_from/to**: filter by payment date range
    """
    payments, total = await payment_service.get_payments(
        db,
        pupil_id=pupil_id,
        term_number=term_number,
        year=year,
        approval_status=approval_status,
        include_deleted=include_deleted,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.CREATE))],
) -> PaymentResponse:
    """Record a payment for a pupil."""
    if not await pupil_service.get_pupil_by_id(db, payment_data.pupil_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pupil not found",
        )
    await ensure_term_open(db, payment_data.term_number, payment_data.year)

    payment = await payment_service.create_payment(db, payment_data, recorded_by=session.actor.id)
    return PaymentResponse.model_validate(payment)


@router.get("/totals", response_model=TermTotal)
async def get_term_total(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.READ))],
    term_number: int = Query(..., ge=1, le=3, description="Term number"),
    year: int = Query(..., ge=2000, le=2100, description="Year"),
) -> TermTotal:
    """Total of the payments that count towards balances in a term."""
    total_amount, total_payments = await payment_service.get_term_total(db, term_number, year)
    return TermTotal(
        term_number=term_number,
        year=year,
        total_amount=total_amount,
        total_payments=total_payments,
    )


@router.get("/pending-deletions", response_model=list[PendingDeletionResponse])
async def list_pending_deletions(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.APPROVE_DELETE))],
) -> list[PendingDeletionResponse]:
    """Soft-deleted payments waiting for approval."""
    pending = await payment_service.get_pending_deletions(db)
    return [
        PendingDeletionResponse(
            payment_id=payment.id,
            pupil_id=payment.pupil_id,
            pupil_name=pupil_name,
            amount_paid=payment.amount_paid,
            payment_date=payment.payment_date,
            deletion_reason=payment.deletion_reason,
            deleted_at=payment.deleted_at,
            deleted_by=payment.deleted_by,
        )
        for payment, pupil_name in pending
    ]


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.READ))],
) -> PaymentResponse:
    """Get payment by ID."""
    payment = await get_payment_or_404(db, payment_id)
    return PaymentResponse.model_validate(payment)


@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: UUID,
    payment_data: PaymentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.UPDATE))],
) -> PaymentResponse:
    """Update a payment of an open term."""
    payment = await get_payment_or_404(db, payment_id)
    ensure_active(payment)
    await ensure_term_open(db, payment.term_number, payment.year)

    payment = await payment_service.update_payment(db, payment, payment_data, updated_by=session.actor.id)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/soft-delete", response_model=PaymentResponse)
async def soft_delete_payment(
    payment_id: UUID,
    data: PaymentSoftDelete,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.SOFT_DELETE))],
) -> PaymentResponse:
    """Request removal of a payment; it stops counting until the request is rejected."""
    payment = await get_payment_or_404(db, payment_id)
    ensure_active(payment)
    await ensure_term_open(db, payment.term_number, payment.year)

    payment = await payment_service.soft_delete_payment(db, payment, data.reason, deleted_by=session.actor.id)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/approve-deletion", response_model=PaymentResponse)
async def approve_payment_deletion(
    payment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.APPROVE_DELETE))],
) -> PaymentResponse:
    """Confirm a pending deletion."""
    payment = await get_payment_or_404(db, payment_id)
    ensure_pending(payment)

    payment = await payment_service.approve_deletion(db, payment, approved_by=session.actor.id)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/reject-deletion", response_model=PaymentResponse)
async def reject_payment_deletion(
    payment_id: UUID,
    data: PaymentDeletionRejection,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.APPROVE_DELETE))],
) -> PaymentResponse:
    """Refuse a pending deletion and restore the payment."""
    payment = await get_payment_or_404(db, payment_id)
    ensure_pending(payment)

    payment = await payment_service.reject_deletion(db, payment, data.reason, rejected_by=session.actor.id)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/adjust", response_model=PaymentResponse)
async def adjust_payment(
    payment_id: UUID,
    data: PaymentAdjustment,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.ADJUST))],
) -> PaymentResponse:
    """Correct the amount of a payment. Allowed on locked terms."""
    payment = await get_payment_or_404(db, payment_id)
    ensure_active(payment)

    payment = await payment_service.adjust_payment(
        db,
        payment,
        data.new_amount,
        data.reason,
        adjusted_by=session.actor.id,
    )
    return PaymentResponse.model_validate(payment)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PAYMENTS, Action.DELETE))],
) -> None:
    """Remove a payment permanently."""
    payment = await get_payment_or_404(db, payment_id)
    await payment_service.delete_payment(db, payment, deleted_by=session.actor.id)
