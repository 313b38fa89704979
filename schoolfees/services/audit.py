"""Audit service - data change trail and access attempt log."""

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.audit import AccessLog, AuditLog

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _jsonable(data: dict[str, Any] | None) -> dict[str, Any] | None:
    if data is None:
        return None
    return {key: _json_value(value) for key, value in data.items()}


def snapshot(instance: Any) -> dict[str, Any]:
    """Column values of a model instance as a JSON-serializable dict."""
    state = inspect(instance)
    # Server-generated columns are not loaded until the next refresh
    return {
        column.key: _json_value(getattr(instance, column.key))
        for column in state.mapper.column_attrs
        if column.key not in state.unloaded
    }


def record_change(
    db: AsyncSession,
    *,
    table_name: str,
    action_type: str,
    record_id: UUID | str | None,
    performed_by: UUID | None,
    old_data: dict[str, Any] | None = None,
    new_data: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the session; committed together with the change."""
    entry = AuditLog(
        table_name=table_name,
        action_type=action_type,
        record_id=str(record_id) if record_id is not None else None,
        old_data=_jsonable(old_data),
        new_data=_jsonable(new_data),
        performed_by=performed_by,
    )
    db.add(entry)
    return entry


async def record_access(
    db: AsyncSession,
    *,
    user_id: UUID | None,
    resource: str,
    action: str,
    success: bool,
    denial_reason: str | None = None,
    resource_id: str | None = None,
) -> None:
    """Log a permission check. Best-effort: failures are logged, never raised."""
    try:
        db.add(
            AccessLog(
                user_id=user_id,
                resource=resource,
                action=action,
                resource_id=resource_id,
                success=success,
                denial_reason=denial_reason,
            )
        )
        await db.commit()
    except SQLAlchemyError:
        logger.warning("Could not write access log for %s:%s", resource, action, exc_info=True)
        await db.rollback()


async def get_audit_logs(
    db: AsyncSession,
    *,
    table_name: str | None = None,
    action_type: str | None = None,
    performed_by: UUID | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[AuditLog], int]:
    """Get audit log entries with filters, newest first."""
    query = select(AuditLog)

    if table_name:
        query = query.where(AuditLog.table_name == table_name)
    if action_type:
        query = query.where(AuditLog.action_type == action_type)
    if performed_by:
        query = query.where(AuditLog.performed_by == performed_by)
    if date_from:
        query = query.where(func.date(AuditLog.created_at) >= date_from)
    if date_to:
        query = query.where(func.date(AuditLog.created_at) <= date_to)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_recent_access_attempts(
    db: AsyncSession,
    *,
    success: bool | None = None,
    limit: int = 50,
) -> list[AccessLog]:
    """Most recent permission checks, newest first."""
    query = select(AccessLog)
    if success is not None:
        query = query.where(AccessLog.success == success)
    query = query.order_by(AccessLog.created_at.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
