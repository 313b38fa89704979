"""Fee model."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import expression

from schoolfees.core.database import BaseModel


class Fee(BaseModel):
    """Amount charged per pupil of a grade for one term."""

    __tablename__ = "fees"
    __table_args__ = (
        UniqueConstraint("grade_id", "term_number", "year", name="uq_fees_grade_term_year"),
    )

    grade_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("grades.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    term_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=expression.true(),
    )
    created_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Fee(grade={self.grade_id}, term={self.term_number}/{self.year}, amount={self.amount})>"
