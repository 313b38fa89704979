"""Parent schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schoolfees.schemas.validators import PhoneNumber


class ParentCreate(BaseModel):
    """Schema for creating a parent."""

    full_name: str = Field(..., min_length=1, max_length=200)
    phone_number: PhoneNumber | None = None
    account_number: str | None = Field(None, max_length=50)


class ParentUpdate(BaseModel):
    """Schema for updating a parent."""

    full_name: str | None = Field(None, min_length=1, max_length=200)
    phone_number: PhoneNumber | None = None
    account_number: str | None = Field(None, max_length=50)


class ParentResponse(BaseModel):
    """Parent response."""

    id: UUID
    full_name: str
    phone_number: str | None
    account_number: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParentListResponse(BaseModel):
    """Paginated list of parents."""

    items: list[ParentResponse]
    total: int
    skip: int
    limit: int
