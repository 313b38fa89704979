"""Pupil schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schoolfees.models.pupil import PupilStatus


class PupilCreate(BaseModel):
    """Schema for enrolling a pupil."""

    full_name: str = Field(..., min_length=1, max_length=200)
    grade_id: UUID | None = None
    parent_id: UUID | None = None
    status: PupilStatus = PupilStatus.ACTIVE


class PupilUpdate(BaseModel):
    """Schema for updating a pupil."""

    full_name: str | None = Field(None, min_length=1, max_length=200)
    grade_id: UUID | None = None
    parent_id: UUID | None = None
    status: PupilStatus | None = None


class PupilResponse(BaseModel):
    """Pupil response."""

    id: UUID
    full_name: str
    grade_id: UUID | None
    parent_id: UUID | None
    status: PupilStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PupilListResponse(BaseModel):
    """Paginated list of pupils."""

    items: list[PupilResponse]
    total: int
    skip: int
    limit: int
