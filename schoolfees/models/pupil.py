"""Pupil model."""

from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from schoolfees.core.database import BaseModel


class PupilStatus(str, Enum):
    """Enrollment status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Pupil(BaseModel):
    """Pupil enrolled in a grade; the unit fees are charged against."""

    __tablename__ = "pupils"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    grade_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("grades.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("parents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[PupilStatus] = mapped_column(
        String(20),
        default=PupilStatus.ACTIVE,
        server_default="active",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Pupil(id={self.id}, name={self.full_name})>"
