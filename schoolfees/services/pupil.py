"""Pupil service."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.payment import Payment
from schoolfees.models.pupil import Pupil, PupilStatus
from schoolfees.schemas.pupil import PupilCreate, PupilUpdate
from schoolfees.services import audit as audit_service


async def get_pupil_by_id(db: AsyncSession, pupil_id: UUID) -> Pupil | None:
    """Get pupil by ID."""
    result = await db.execute(select(Pupil).where(Pupil.id == pupil_id))
    return result.scalar_one_or_none()


async def get_pupils(
    db: AsyncSession,
    *,
    grade_id: UUID | None = None,
    parent_id: UUID | None = None,
    status: PupilStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Pupil], int]:
    """Get pupils with filters."""
    query = select(Pupil)

    if grade_id:
        query = query.where(Pupil.grade_id == grade_id)
    if parent_id:
        query = query.where(Pupil.parent_id == parent_id)
    if status:
        query = query.where(Pupil.status == status.value)
    if search:
        query = query.where(Pupil.full_name.ilike(f"%{search}%"))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Pupil.full_name).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_pupil(db: AsyncSession, data: PupilCreate, created_by: UUID | None = None) -> Pupil:
    """Enroll a pupil."""
    pupil = Pupil(
        full_name=data.full_name,
        grade_id=data.grade_id,
        parent_id=data.parent_id,
        status=data.status.value,
    )
    db.add(pupil)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="pupils",
        action_type="INSERT",
        record_id=pupil.id,
        performed_by=created_by,
        new_data=audit_service.snapshot(pupil),
    )
    await db.commit()
    await db.refresh(pupil)
    return pupil


async def update_pupil(
    db: AsyncSession,
    pupil: Pupil,
    data: PupilUpdate,
    updated_by: UUID | None = None,
) -> Pupil:
    """Update a pupil."""
    update_data = data.model_dump(exclude_unset=True)
    old_data = audit_service.snapshot(pupil)
    for field, value in update_data.items():
        if isinstance(value, PupilStatus):
            value = value.value
        setattr(pupil, field, value)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="pupils",
        action_type="UPDATE",
        record_id=pupil.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=audit_service.snapshot(pupil),
    )
    await db.commit()
    await db.refresh(pupil)
    return pupil


async def delete_pupil(db: AsyncSession, pupil: Pupil, deleted_by: UUID | None = None) -> None:
    """Delete a pupil together with their payments."""
    audit_service.record_change(
        db,
        table_name="pupils",
        action_type="DELETE",
        record_id=pupil.id,
        performed_by=deleted_by,
        old_data=audit_service.snapshot(pupil),
    )
    await db.execute(delete(Payment).where(Payment.pupil_id == pupil.id))
    await db.delete(pupil)
    await db.commit()
