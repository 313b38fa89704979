"""Fee service."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.fee import Fee
from schoolfees.schemas.fee import FeeCreate, FeeUpdate
from schoolfees.services import audit as audit_service


async def get_fee_by_id(db: AsyncSession, fee_id: UUID) -> Fee | None:
    """Get fee by ID."""
    result = await db.execute(select(Fee).where(Fee.id == fee_id))
    return result.scalar_one_or_none()


async def find_fee(
    db: AsyncSession,
    grade_id: UUID,
    term_number: int,
    year: int,
) -> Fee | None:
    """Get the fee of a grade for a term, if one is set."""
    result = await db.execute(
        select(Fee).where(
            Fee.grade_id == grade_id,
            Fee.term_number == term_number,
            Fee.year == year,
        )
    )
    return result.scalar_one_or_none()


async def get_fees(
    db: AsyncSession,
    *,
    grade_id: UUID | None = None,
    term_number: int | None = None,
    year: int | None = None,
    is_active: bool | None = None,
) -> list[Fee]:
    """Get fees with filters."""
    query = select(Fee)

    if grade_id:
        query = query.where(Fee.grade_id == grade_id)
    if term_number:
        query = query.where(Fee.term_number == term_number)
    if year:
        query = query.where(Fee.year == year)
    if is_active is not None:
        query = query.where(Fee.is_active == is_active)

    query = query.order_by(Fee.year.desc(), Fee.term_number.desc(), Fee.created_at)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_fee(db: AsyncSession, data: FeeCreate, created_by: UUID | None = None) -> Fee:
    """Create a fee."""
    fee = Fee(
        grade_id=data.grade_id,
        amount=data.amount,
        term_number=data.term_number,
        year=data.year,
        is_active=data.is_active,
        created_by=created_by,
    )
    db.add(fee)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="fees",
        action_type="INSERT",
        record_id=fee.id,
        performed_by=created_by,
        new_data=audit_service.snapshot(fee),
    )
    await db.commit()
    await db.refresh(fee)
    return fee


async def update_fee(
    db: AsyncSession,
    fee: Fee,
    data: FeeUpdate,
    updated_by: UUID | None = None,
) -> Fee:
    """Update a fee."""
    update_data = data.model_dump(exclude_unset=True)
    old_data = audit_service.snapshot(fee)
    for field, value in update_data.items():
        setattr(fee, field, value)
    audit_service.record_change(
        db,
        table_name="fees",
        action_type="UPDATE",
        record_id=fee.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=update_data,
    )
    await db.commit()
    await db.refresh(fee)
    return fee


async def set_active(
    db: AsyncSession,
    fee: Fee,
    is_active: bool,
    updated_by: UUID | None = None,
) -> Fee:
    """Activate or deactivate a fee. Inactive fees are not expected from pupils."""
    fee.is_active = is_active
    audit_service.record_change(
        db,
        table_name="fees",
        action_type="ACTIVATE" if is_active else "DEACTIVATE",
        record_id=fee.id,
        performed_by=updated_by,
        new_data={"is_active": is_active},
    )
    await db.commit()
    await db.refresh(fee)
    return fee


async def delete_fee(db: AsyncSession, fee: Fee, deleted_by: UUID | None = None) -> None:
    """Delete a fee."""
    audit_service.record_change(
        db,
        table_name="fees",
        action_type="DELETE",
        record_id=fee.id,
        performed_by=deleted_by,
        old_data=audit_service.snapshot(fee),
    )
    await db.delete(fee)
    await db.commit()
