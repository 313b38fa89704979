"""Grade schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GradeCreate(BaseModel):
    """Schema for creating a grade."""

    name: str = Field(..., min_length=1, max_length=100)


class GradeUpdate(BaseModel):
    """Schema for renaming a grade."""

    name: str | None = Field(None, min_length=1, max_length=100)


class GradeResponse(BaseModel):
    """Grade response."""

    id: UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
