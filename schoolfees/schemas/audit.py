"""Audit log schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    """Data change record."""

    id: UUID
    table_name: str
    action_type: str
    record_id: str | None
    old_data: dict[str, Any] | None
    new_data: dict[str, Any] | None
    performed_by: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Paginated audit log list."""

    items: list[AuditLogResponse]
    total: int
    skip: int
    limit: int


class AccessLogResponse(BaseModel):
    """Permission check record."""

    id: UUID
    user_id: UUID | None
    resource: str
    action: str
    resource_id: str | None
    success: bool
    denial_reason: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
