"""CLI commands for management tasks."""

import asyncio
import sys

from schoolfees.core.config import settings
from schoolfees.core.database import async_session_maker
from schoolfees.core.permissions import Role
from schoolfees.core.roles import Actor
from schoolfees.core.session import ActorSession
from schoolfees.schemas.user import UserCreate
from schoolfees.services import auth as auth_service
from schoolfees.services import user as user_service

USAGE = """Usage: python -m schoolfees.cli <command>
Commands:
  create-superadmin <email> <password> <full_name>
  assign-role <email> <role>
  check <email> <resource> <action>"""


async def create_superadmin(email: str, password: str, full_name: str) -> None:
    """Create a user with the SuperAdmin role."""
    async with async_session_maker() as db:
        if await auth_service.get_user_by_email(db, email):
            print(f"Error: Email {email} is already registered!")
            sys.exit(1)

        user = await user_service.create_user(
            db,
            UserCreate(email=email, password=password, full_name=full_name, role=Role.SUPER_ADMIN),
        )

        print("✓ SuperAdmin created successfully!")
        print(f"  ID: {user.id}")
        print(f"  Name: {user.full_name}")
        print(f"  Email: {user.email}")


async def assign_role(email: str, role_label: str) -> None:
    """Give an existing user a role."""
    role = Role.parse(role_label)
    if role is None:
        print(f"Error: Unknown role {role_label}. Choose from: {', '.join(r.value for r in Role)}")
        sys.exit(1)

    async with async_session_maker() as db:
        user = await auth_service.get_user_by_email(db, email)
        if user is None:
            print(f"Error: No user with email {email}")
            sys.exit(1)

        await user_service.assign_role(db, user, role)
        print(f"✓ {user.email} is now {role.value}")


async def check(email: str, resource: str, action: str) -> None:
    """Evaluate a permission for a user as the API would."""
    async with async_session_maker() as db:
        user = await auth_service.get_user_by_email(db, email)
        if user is None:
            print(f"Error: No user with email {email}")
            sys.exit(1)

        actor = Actor(id=user.id, email=user.email, role=user.role)
        session = ActorSession.start(actor, settings.BREAK_GLASS_ACCOUNTS)
        decision = session.evaluate(resource, action)

        print(f"Role: {session.role.value if session.role else 'none'}")
        if decision.allowed:
            print(f"✓ {resource}:{action} allowed")
        else:
            print(f"✗ {resource}:{action} denied ({decision.reason})")
            sys.exit(2)


def main() -> None:
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]

    if command == "create-superadmin":
        if len(args) != 3:
            print("Usage: python -m schoolfees.cli create-superadmin <email> <password> <full_name>")
            sys.exit(1)
        asyncio.run(create_superadmin(*args))
    elif command == "assign-role":
        if len(args) != 2:
            print("Usage: python -m schoolfees.cli assign-role <email> <role>")
            sys.exit(1)
        asyncio.run(assign_role(*args))
    elif command == "check":
        if len(args) != 3:
            print("Usage: python -m schoolfees.cli check <email> <resource> <action>")
            sys.exit(1)
        asyncio.run(check(*args))
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
