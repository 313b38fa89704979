"""Parent routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.models.parent import Parent
from schoolfees.schemas.parent import (
    ParentCreate,
    ParentListResponse,
    ParentResponse,
    ParentUpdate,
)
from schoolfees.services import parent as parent_service

router = APIRouter(prefix="/parents", tags=["Parents"])


async def get_parent_or_404(db: AsyncSession, parent_id: UUID) -> Parent:
    """Load a parent or raise 404."""
    parent = await parent_service.get_parent_by_id(db, parent_id)
    if not parent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Parent not found",
        )
    return parent


@router.get("", response_model=ParentListResponse)
async def list_parents(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PARENTS, Action.READ))],
    search: str | None = Query(None, description="Search by name or phone"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """List parents."""
    parents, total = await parent_service.get_parents(db, search=search, skip=skip, limit=limit)
    return ParentListResponse(items=parents, total=total, skip=skip, limit=limit)


@router.post("", response_model=ParentResponse, status_code=status.HTTP_201_CREATED)
async def create_parent(
    parent_data: ParentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PARENTS, Action.CREATE))],
):
    """Create a new parent."""
    return await parent_service.create_parent(db, parent_data, created_by=session.actor.id)


@router.get("/{parent_id}", response_model=ParentResponse)
async def get_parent(
    parent_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PARENTS, Action.READ))],
):
    """Get parent by ID."""
    return await get_parent_or_404(db, parent_id)


@router.patch("/{parent_id}", response_model=ParentResponse)
async def update_parent(
    parent_id: UUID,
    parent_data: ParentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PARENTS, Action.UPDATE))],
):
    """Update a parent."""
    parent = await get_parent_or_404(db, parent_id)
    return await parent_service.update_parent(db, parent, parent_data, updated_by=session.actor.id)


@router.delete("/{parent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_parent(
    parent_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: Annotated[ActorSession, Depends(require_permission(Resource.PARENTS, Action.DELETE))],
) -> None:
    """Delete a parent. Their pupils are kept without a parent."""
    parent = await get_parent_or_404(db, parent_id)
    await parent_service.delete_parent(db, parent, deleted_by=session.actor.id)
