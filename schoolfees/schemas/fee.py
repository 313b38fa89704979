"""Fee schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schoolfees.schemas.validators import TermNumber, Year


class FeeCreate(BaseModel):
    """Schema for creating a fee."""

    grade_id: UUID
    amount: Decimal = Field(gt=0, description="Fee per pupil for the term")
    term_number: TermNumber
    year: Year
    is_active: bool = True


class FeeUpdate(BaseModel):
    """Schema for updating a fee."""

    amount: Decimal | None = Field(default=None, gt=0)
    term_number: TermNumber | None = None
    year: Year | None = None


class FeeActivation(BaseModel):
    """Activate or deactivate a fee."""

    is_active: bool


class FeeResponse(BaseModel):
    """Fee response."""

    id: UUID
    grade_id: UUID
    amount: Decimal
    term_number: int
    year: int
    is_active: bool
    created_by: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
