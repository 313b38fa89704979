"""User service."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.core.permissions import Role
from schoolfees.core.security import get_password_hash
from schoolfees.models.user import User, UserRole
from schoolfees.schemas.user import UserCreate, UserUpdate
from schoolfees.services import audit as audit_service


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    """Get user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_users(
    db: AsyncSession,
    *,
    role: Role | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[User], int]:
    """Get list of users with optional filters."""
    query = select(User)

    if role is not None:
        query = query.join(UserRole, UserRole.user_id == User.id).where(UserRole.role == role.value)

    if is_active is not None:
        query = query.where(User.is_active == is_active)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(User.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    users = list(result.scalars().all())

    return users, total


async def create_user(
    db: AsyncSession,
    user_data: UserCreate,
    created_by: UUID | None = None,
) -> User:
    """Create a new user, optionally with a role."""
    user = User(
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        full_name=user_data.full_name,
    )
    if user_data.role is not None:
        user.role_assignment = UserRole(role=user_data.role.value)

    db.add(user)
    await db.flush()
    audit_service.record_change(
        db,
        table_name="users",
        action_type="INSERT",
        record_id=user.id,
        performed_by=created_by,
        new_data={"email": user.email, "full_name": user.full_name, "role": user_data.role},
    )
    await db.commit()
    await db.refresh(user)

    return user


async def update_user(
    db: AsyncSession,
    user: User,
    user_data: UserUpdate,
    updated_by: UUID | None = None,
) -> User:
    """Update a user."""
    update_data = user_data.model_dump(exclude_unset=True)
    old_data = {field: getattr(user, field) for field in update_data}

    for field, value in update_data.items():
        setattr(user, field, value)

    audit_service.record_change(
        db,
        table_name="users",
        action_type="UPDATE",
        record_id=user.id,
        performed_by=updated_by,
        old_data=old_data,
        new_data=update_data,
    )
    await db.commit()
    await db.refresh(user)

    return user


async def set_active(
    db: AsyncSession,
    user: User,
    is_active: bool,
    updated_by: UUID | None = None,
) -> User:
    """Activate or deactivate a user."""
    user.is_active = is_active
    audit_service.record_change(
        db,
        table_name="users",
        action_type="ACTIVATE" if is_active else "DEACTIVATE",
        record_id=user.id,
        performed_by=updated_by,
        new_data={"is_active": is_active},
    )
    await db.commit()
    await db.refresh(user)
    return user


async def reset_password(
    db: AsyncSession,
    user: User,
    new_password: str,
    reset_by: UUID | None = None,
) -> User:
    """Set a new password for a user."""
    user.password_hash = get_password_hash(new_password)
    audit_service.record_change(
        db,
        table_name="users",
        action_type="RESET_PASSWORD",
        record_id=user.id,
        performed_by=reset_by,
    )
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user: User, deleted_by: UUID | None = None) -> None:
    """Delete a user and their role assignment."""
    audit_service.record_change(
        db,
        table_name="users",
        action_type="DELETE",
        record_id=user.id,
        performed_by=deleted_by,
        old_data={"email": user.email, "full_name": user.full_name, "role": user.role},
    )
    await db.delete(user)
    await db.commit()


async def assign_role(
    db: AsyncSession,
    user: User,
    role: Role,
    assigned_by: UUID | None = None,
) -> User:
    """Give a user a role, replacing any existing one."""
    old_role = user.role
    if user.role_assignment is None:
        user.role_assignment = UserRole(role=role.value)
    else:
        user.role_assignment.role = role.value

    audit_service.record_change(
        db,
        table_name="user_roles",
        action_type="ROLE_ASSIGN",
        record_id=user.id,
        performed_by=assigned_by,
        old_data={"role": old_role} if old_role else None,
        new_data={"role": role},
    )
    await db.commit()
    await db.refresh(user)
    return user


async def remove_role(
    db: AsyncSession,
    user: User,
    removed_by: UUID | None = None,
) -> User:
    """Remove a user's role; the user keeps the account but loses all permissions."""
    old_role = user.role
    user.role_assignment = None

    audit_service.record_change(
        db,
        table_name="user_roles",
        action_type="ROLE_REMOVE",
        record_id=user.id,
        performed_by=removed_by,
        old_data={"role": old_role} if old_role else None,
    )
    await db.commit()
    await db.refresh(user)
    return user
