"""Parent model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from schoolfees.core.database import BaseModel


class Parent(BaseModel):
    """Parent or guardian responsible for a pupil's fees."""

    __tablename__ = "parents"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50))
    account_number: Mapped[str | None] = mapped_column(String(50))

    def __repr__(self) -> str:
        return f"<Parent(id={self.id}, name={self.full_name})>"
