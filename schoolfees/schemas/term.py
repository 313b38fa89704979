"""Term lock schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schoolfees.schemas.validators import TermNumber, Year


class TermRef(BaseModel):
    """Identifies a term."""

    term_number: TermNumber
    year: Year


class TermOverride(TermRef):
    """Emergency override of a term lock."""

    reason: str = Field(..., min_length=3)


class TermLockResponse(BaseModel):
    """Term lock state."""

    id: UUID
    term_number: int
    year: int
    is_locked: bool
    locked_at: datetime | None
    locked_by: UUID | None
    override_reason: str | None

    model_config = ConfigDict(from_attributes=True)
