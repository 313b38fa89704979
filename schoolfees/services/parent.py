"""Parent service."""

from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.parent import Parent
from schoolfees.models.pupil import Pupil
from schoolfees.schemas.parent import ParentCreate, ParentUpdate
from schoolfees.services import audit as audit_service


async def get_parent_by_id(db: AsyncSession, parent_id: UUID) -> Parent | None:
    """Get parent by ID."""
    result = await db.execute(select(Parent).where(Parent.id == parent_id))
    return result.scalar_one_or_none()


async def get_parents(
    db: AsyncSession,
    *,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Parent], int]:
    """Get parents, optionally searching by name or phone."""
    query = select(Parent)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Parent.full_name.ilike(pattern),
                Parent.phone_number.ilike(pattern),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Parent.full_name).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_parent(db: AsyncSession, data: ParentCreate, created_by: UUID | None = None) -> Parent:
    """Create a parent."""
    parent = Parent(**data.model_dump())
    db.add(parent)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="parents",
        action_type="INSERT",
        record_id=parent.id,
        performed_by=created_by,
        new_data=audit_service.snapshot(parent),
    )
    await db.commit()
    await db.refresh(parent)
    return parent


async def update_parent(
    db: AsyncSession,
    parent: Parent,
    data: ParentUpdate,
    updated_by: UUID | None = None,
) -> Parent:
    """Update a parent."""
    update_data = data.model_dump(exclude_unset=True)
    old_data = audit_service.snapshot(parent)
    for field, value in update_data.items():
        setattr(parent, field, value)
    audit_service.record_change(
        db,
        table_name="parents",
        action_type="UPDATE",
        record_id=parent.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=update_data,
    )
    await db.commit()
    await db.refresh(parent)
    return parent


async def delete_parent(db: AsyncSession, parent: Parent, deleted_by: UUID | None = None) -> None:
    """Delete a parent. Their pupils keep their records without a parent link."""
    audit_service.record_change(
        db,
        table_name="parents",
        action_type="DELETE",
        record_id=parent.id,
        performed_by=deleted_by,
        old_data=audit_service.snapshot(parent),
    )
    await db.execute(update(Pupil).where(Pupil.parent_id == parent.id).values(parent_id=None))
    await db.delete(parent)
    await db.commit()
