"""Payment schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schoolfees.models.payment import ApprovalStatus
from schoolfees.schemas.validators import TermNumber, Year


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""

    pupil_id: UUID
    amount_paid: Decimal = Field(gt=0, description="Payment amount")
    payment_date: date | None = None
    term_number: TermNumber
    year: Year
    note: str | None = None


class PaymentUpdate(BaseModel):
    """Schema for updating a payment."""

    amount_paid: Decimal | None = Field(default=None, gt=0)
    payment_date: date | None = None
    note: str | None = None


class PaymentSoftDelete(BaseModel):
    """Request removal of a payment; requires approval."""

    reason: str = Field(..., min_length=3)


class PaymentDeletionRejection(BaseModel):
    """Reject a pending deletion."""

    reason: str = Field(..., min_length=3)


class PaymentAdjustment(BaseModel):
    """Correct the amount of an approved payment."""

    new_amount: Decimal = Field(gt=0)
    reason: str = Field(..., min_length=3)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: UUID
    pupil_id: UUID
    amount_paid: Decimal
    payment_date: date
    term_number: int
    year: int
    recorded_by: UUID | None
    approval_status: ApprovalStatus
    is_deleted: bool
    deleted_at: datetime | None
    deleted_by: UUID | None
    deletion_reason: str | None
    approved_at: datetime | None
    rejection_reason: str | None
    adjustment_reason: str | None
    note: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(BaseModel):
    """Schema for paginated payment list."""

    items: list[PaymentResponse]
    total: int
    skip: int
    limit: int


class PendingDeletionResponse(BaseModel):
    """A soft-deleted payment waiting for approval."""

    payment_id: UUID
    pupil_id: UUID
    pupil_name: str
    amount_paid: Decimal
    payment_date: date
    deletion_reason: str | None
    deleted_at: datetime | None
    deleted_by: UUID | None


class TermTotal(BaseModel):
    """Total approved payments for a term."""

    term_number: int
    year: int
    total_amount: Decimal
    total_payments: int
