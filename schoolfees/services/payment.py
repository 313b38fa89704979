"""Payment service - recording, soft delete approval and adjustments."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.payment import ApprovalStatus, Payment
from schoolfees.models.pupil import Pupil
from schoolfees.schemas.payment import PaymentCreate, PaymentUpdate
from schoolfees.services import audit as audit_service


async def get_payment_by_id(db: AsyncSession, payment_id: UUID) -> Payment | None:
    """Get payment by ID, including soft-deleted ones."""
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    return result.scalar_one_or_none()


async def get_payments(
    db: AsyncSession,
    *,
    pupil_id: UUID | None = None,
    term_number: int | None = None,
    year: int | None = None,
    approval_status: ApprovalStatus | None = None,
    include_deleted: bool = False,
    date_from: date | None = None,
    date_to: date | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Payment], int]:
    """Get payments with filters. Soft-deleted payments are hidden unless asked for."""
    query = select(Payment)

    if not include_deleted:
        query = query.where(Payment.is_deleted.is_(False))
    if pupil_id:
        query = query.where(Payment.pupil_id == pupil_id)
    if term_number:
        query = query.where(Payment.term_number == term_number)
    if year:
        query = query.where(Payment.year == year)
    if approval_status:
        query = query.where(Payment.approval_status == approval_status.value)
    if date_from:
        query = query.where(Payment.payment_date >= date_from)
    if date_to:
        query = query.where(Payment.payment_date <= date_to)

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    query = query.offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_pupil_payment_history(db: AsyncSession, pupil_id: UUID) -> list[Payment]:
    """All payments of a pupil, soft-deleted ones included."""
    result = await db.execute(
        select(Payment)
        .where(Payment.pupil_id == pupil_id)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    )
    return list(result.scalars().all())


async def create_payment(
    db: AsyncSession,
    data: PaymentCreate,
    recorded_by: UUID | None = None,
) -> Payment:
    """Record a payment. Payments count towards the balance immediately."""
    payment = Payment(
        pupil_id=data.pupil_id,
        amount_paid=data.amount_paid,
        payment_date=data.payment_date or date.today(),
        term_number=data.term_number,
        year=data.year,
        recorded_by=recorded_by,
        approval_status=ApprovalStatus.APPROVED.value,
        is_deleted=False,
        note=data.note,
    )
    db.add(payment)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="INSERT",
        record_id=payment.id,
        performed_by=recorded_by,
        new_data=audit_service.snapshot(payment),
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def update_payment(
    db: AsyncSession,
    payment: Payment,
    data: PaymentUpdate,
    updated_by: UUID | None = None,
) -> Payment:
    """Update an existing payment."""
    update_data = data.model_dump(exclude_unset=True)
    old_data = audit_service.snapshot(payment)
    for field, value in update_data.items():
        setattr(payment, field, value)
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="UPDATE",
        record_id=payment.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=update_data,
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def soft_delete_payment(
    db: AsyncSession,
    payment: Payment,
    reason: str,
    deleted_by: UUID | None = None,
) -> Payment:
    """Mark a payment deleted and queue it for approval."""
    payment.is_deleted = True
    payment.deleted_at = datetime.now(timezone.utc)
    payment.deleted_by = deleted_by
    payment.deletion_reason = reason
    payment.approval_status = ApprovalStatus.PENDING_APPROVAL.value
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="SOFT_DELETE",
        record_id=payment.id,
        performed_by=deleted_by,
        new_data={"reason": reason, "amount_paid": payment.amount_paid},
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def get_pending_deletions(db: AsyncSession) -> list[tuple[Payment, str]]:
    """Soft-deleted payments waiting for approval, with the pupil's name."""
    result = await db.execute(
        select(Payment, Pupil.full_name)
        .join(Pupil, Pupil.id == Payment.pupil_id)
        .where(
            Payment.is_deleted.is_(True),
            Payment.approval_status == ApprovalStatus.PENDING_APPROVAL.value,
        )
        .order_by(Payment.deleted_at.desc())
    )
    return [(payment, pupil_name) for payment, pupil_name in result.all()]


async def approve_deletion(
    db: AsyncSession,
    payment: Payment,
    approved_by: UUID | None = None,
) -> Payment:
    """Confirm a pending deletion; the payment stays out of every balance."""
    payment.approval_status = ApprovalStatus.DELETED.value
    payment.approved_at = datetime.now(timezone.utc)
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="APPROVE_DELETE",
        record_id=payment.id,
        performed_by=approved_by,
        new_data={"deletion_reason": payment.deletion_reason},
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def reject_deletion(
    db: AsyncSession,
    payment: Payment,
    reason: str,
    rejected_by: UUID | None = None,
) -> Payment:
    """Refuse a pending deletion and restore the payment."""
    payment.is_deleted = False
    payment.deleted_at = None
    payment.deleted_by = None
    payment.approval_status = ApprovalStatus.APPROVED.value
    payment.rejection_reason = reason
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="REJECT_DELETE",
        record_id=payment.id,
        performed_by=rejected_by,
        new_data={"reason": reason},
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def adjust_payment(
    db: AsyncSession,
    payment: Payment,
    new_amount: Decimal,
    reason: str,
    adjusted_by: UUID | None = None,
) -> Payment:
    """Correct the amount of a payment, keeping the old amount in the audit trail."""
    old_amount = payment.amount_paid
    payment.amount_paid = new_amount
    payment.adjustment_reason = reason
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="ADJUST",
        record_id=payment.id,
        performed_by=adjusted_by,
        old_data={"amount_paid": old_amount},
        new_data={"amount_paid": new_amount, "reason": reason},
    )
    await db.commit()
    await db.refresh(payment)
    return payment


async def delete_payment(db: AsyncSession, payment: Payment, deleted_by: UUID | None = None) -> None:
    """Remove a payment permanently."""
    audit_service.record_change(
        db,
        table_name="payments",
        action_type="DELETE",
        record_id=payment.id,
        performed_by=deleted_by,
        old_data=audit_service.snapshot(payment),
    )
    await db.delete(payment)
    await db.commit()


async def get_term_total(db: AsyncSession, term_number: int, year: int) -> tuple[Decimal, int]:
    """Sum and count of the payments that count towards balances in a term."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(Payment.amount_paid), 0),
            func.count(Payment.id),
        ).where(
            Payment.term_number == term_number,
            Payment.year == year,
            Payment.is_deleted.is_(False),
            Payment.approval_status == ApprovalStatus.APPROVED.value,
        )
    )
    total, count = result.one()
    return Decimal(total), count
