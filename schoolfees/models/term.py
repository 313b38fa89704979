"""Term lock model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from schoolfees.core.database import TimestampedModel


class TermLock(TimestampedModel):
    """Lock state of a school term; financial records of a locked term are frozen."""

    __tablename__ = "term_locks"
    __table_args__ = (
        UniqueConstraint("term_number", "year", name="uq_term_locks_term_year"),
    )

    term_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_locked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=expression.false(),
    )
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    locked_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    override_reason: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<TermLock(term={self.term_number}/{self.year}, locked={self.is_locked})>"
