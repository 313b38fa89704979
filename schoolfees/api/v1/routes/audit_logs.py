"""Audit log routes."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.database import get_db
from schoolfees.core.deps import require_permission
from schoolfees.core.permissions import Action, Resource
from schoolfees.core.session import ActorSession
from schoolfees.schemas.audit import AccessLogResponse, AuditLogListResponse, AuditLogResponse
from schoolfees.services import audit as audit_service

router = APIRouter(prefix="/audit-logs", tags=["Audit logs"])

AuditReader = Annotated[ActorSession, Depends(require_permission(Resource.AUDIT_LOGS, Action.READ))]


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: AuditReader,
    table_name: str | None = Query(None, description="Filter by table"),
    action_type: str | None = Query(None, description="Filter by action, e.g. ROLE_ASSIGN"),
    performed_by: UUID | None = Query(None, description="Filter by user"),
    date_from: date | None = Query(None, description="Filter by date from"),
    date_to: date | None = Query(None, description="Filter by date to"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> AuditLogListResponse:
    """Data change trail, newest first."""
    entries, total = await audit_service.get_audit_logs(
        db,
        table_name=table_name,
        action_type=action_type,
        performed_by=performed_by,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(e) for e in entries],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/access", response_model=list[AccessLogResponse])
async def list_access_attempts(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: AuditReader,
    success: bool | None = Query(None, description="Only granted (true) or denied (false) checks"),
    limit: int = Query(50, ge=1, le=500),
) -> list[AccessLogResponse]:
    """Most recent permission checks."""
    attempts = await audit_service.get_recent_access_attempts(db, success=success, limit=limit)
    return [AccessLogResponse.model_validate(a) for a in attempts]
