"""Grade service."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.fee import Fee
from schoolfees.models.grade import Grade
from schoolfees.models.pupil import Pupil
from schoolfees.schemas.grade import GradeCreate, GradeUpdate
from schoolfees.services import audit as audit_service


async def get_grade_by_id(db: AsyncSession, grade_id: UUID) -> Grade | None:
    """Get grade by ID."""
    result = await db.execute(select(Grade).where(Grade.id == grade_id))
    return result.scalar_one_or_none()


async def get_grade_by_name(db: AsyncSession, name: str) -> Grade | None:
    """Get grade by name."""
    result = await db.execute(select(Grade).where(Grade.name == name))
    return result.scalar_one_or_none()


async def get_grades(db: AsyncSession) -> list[Grade]:
    """Get all grades ordered by name."""
    result = await db.execute(select(Grade).order_by(Grade.name))
    return list(result.scalars().all())


async def create_grade(db: AsyncSession, data: GradeCreate, created_by: UUID | None = None) -> Grade:
    """Create a grade."""
    grade = Grade(name=data.name)
    db.add(grade)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="grades",
        action_type="INSERT",
        record_id=grade.id,
        performed_by=created_by,
        new_data={"name": grade.name},
    )
    await db.commit()
    await db.refresh(grade)
    return grade


async def update_grade(
    db: AsyncSession,
    grade: Grade,
    data: GradeUpdate,
    updated_by: UUID | None = None,
) -> Grade:
    """Rename a grade."""
    update_data = data.model_dump(exclude_unset=True)
    old_data = audit_service.snapshot(grade)
    for field, value in update_data.items():
        setattr(grade, field, value)
    audit_service.record_change(
        db,
        table_name="grades",
        action_type="UPDATE",
        record_id=grade.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=update_data,
    )
    await db.commit()
    await db.refresh(grade)
    return grade


async def count_pupils(db: AsyncSession, grade_id: UUID) -> int:
    """Number of pupils enrolled in a grade."""
    result = await db.execute(
        select(func.count(Pupil.id)).where(Pupil.grade_id == grade_id)
    )
    return result.scalar() or 0


async def delete_grade(db: AsyncSession, grade: Grade, deleted_by: UUID | None = None) -> None:
    """Delete a grade and its fees."""
    audit_service.record_change(
        db,
        table_name="grades",
        action_type="DELETE",
        record_id=grade.id,
        performed_by=deleted_by,
        old_data=audit_service.snapshot(grade),
    )
    await db.execute(delete(Fee).where(Fee.grade_id == grade.id))
    await db.delete(grade)
    await db.commit()
