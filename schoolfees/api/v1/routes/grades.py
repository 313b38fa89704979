"""Grade routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.models.grade import Grade
from schoolfees.schemas.grade import GradeCreate, GradeResponse, GradeUpdate
from schoolfees.services import grade as grade_service

router = APIRouter(prefix="/grades", tags=["Grades"])


async def get_grade_or_404(db: AsyncSession, grade_id: UUID) -> Grade:
    """Load a grade or raise 404."""
    grade = await grade_service.get_grade_by_id(db, grade_id)
    if not grade:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Grade not found",
        )
    return grade


@router.get("", response_model=list[GradeResponse])
async def list_grades(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.GRADES, Action.READ))],
):
    """List all grades."""
    return await grade_service.get_grades(db)


@router.post("", response_model=GradeResponse, status_code=status.HTTP_201_CREATED)
async def create_grade(
    grade_data: GradeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.GRADES, Action.CREATE))],
):
    """Create a new grade."""
    if await grade_service.get_grade_by_name(db, grade_data.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Grade with this name already exists",
        )
    return await grade_service.create_grade(db, grade_data, created_by=session.actor.id)


@router.get("/{grade_id}", response_model=GradeResponse)
async def get_grade(
    grade_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.GRADES, Action.READ))],
):
    """Get grade by ID."""
    return await get_grade_or_404(db, grade_id)


@router.patch("/{grade_id}", response_model=GradeResponse)
async def update_grade(
    grade_id: UUID,
    grade_data: GradeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.GRADES, Action.UPDATE))],
):
    """Rename a grade."""
    grade = await get_grade_or_404(db, grade_id)
    if grade_data.name and grade_data.name != grade.name:
        if await grade_service.get_grade_by_name(db, grade_data.name):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Grade with this name already exists",
            )
    return await grade_service.update_grade(db, grade, grade_data, updated_by=session.actor.id)


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_grade(
    grade_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.GRADES, Action.DELETE))],
) -> None:
    """Delete a grade without pupils."""
    grade = await get_grade_or_404(db, grade_id)
    if await grade_service.count_pupils(db, grade.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete a grade that has pupils",
        )
    await grade_service.delete_grade(db, grade, deleted_by=session.actor.id)
