"""User and role assignment models."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from schoolfees.core.database import BaseModel, TimestampedModel
from schoolfees.core.permissions import Role


class User(TimestampedModel):
    """User account used for authentication."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=expression.true(),
    )

    role_assignment: Mapped["UserRole | None"] = relationship(
        "UserRole",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def role(self) -> Role | None:
        """Stored role, before any break-glass override."""
        if self.role_assignment is None:
            return None
        return Role.parse(self.role_assignment.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class UserRole(BaseModel):
    """At most one role per user."""

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    role: Mapped[Role] = mapped_column(String(20), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="role_assignment")

    def __repr__(self) -> str:
        return f"<UserRole(user={self.user_id}, role={self.role})>"
