"""Audit trail models."""

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from schoolfees.core.database import BaseModel


class AuditLog(BaseModel):
    """Record of a data change."""

    __tablename__ = "audit_logs"

    table_name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    record_id: Mapped[str | None] = mapped_column(String(64))
    old_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    new_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    performed_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog({self.action_type} {self.table_name}:{self.record_id})>"


class AccessLog(BaseModel):
    """Record of a permission check made by the API guard."""

    __tablename__ = "access_logs"

    user_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    resource: Mapped[str] = mapped_column(String(30), nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(64))
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    denial_reason: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<AccessLog({self.resource}:{self.action} success={self.success})>"
