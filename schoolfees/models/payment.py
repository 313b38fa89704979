"""Payment model."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from schoolfees.core.database import TimestampedModel


class ApprovalStatus(str, Enum):
    """Approval state of a payment record."""

    APPROVED = "approved"
    PENDING_APPROVAL = "pending_approval"  # soft deleted, waiting for approval
    DELETED = "deleted"  # deletion approved


class Payment(TimestampedModel):
    """Money received against a pupil's fees for a term."""

    __tablename__ = "payments"

    pupil_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("pupils.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    term_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        String(20),
        default=ApprovalStatus.APPROVED,
        server_default="approved",
        nullable=False,
    )

    # Soft delete workflow
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=expression.false(),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    deleted_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    deletion_reason: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    adjustment_reason: Mapped[str | None] = mapped_column(Text)
    note: Mapped[str | None] = mapped_column(Text)

    @property
    def counts_towards_balance(self) -> bool:
        return not self.is_deleted and self.approval_status == ApprovalStatus.APPROVED

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, pupil={self.pupil_id}, amount={self.amount_paid})>"
