"""Grade (school class) model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from schoolfees.core.database import BaseModel


class Grade(BaseModel):
    """A grade pupils are enrolled in; fees are set per grade."""

    __tablename__ = "grades"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Grade(id={self.id}, name={self.name})>"
