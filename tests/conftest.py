"""Test configuration and fixtures."""

import os
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from schoolfees.core.database import Base, get_db
from schoolfees.core.permissions import Role
from schoolfees.core.security import get_password_hash
from schoolfees.models.grade import Grade
from schoolfees.models.parent import Parent
from schoolfees.models.pupil import Pupil
from schoolfees.models.user import User, UserRole
from main import app

# Throwaway database; point TEST_DATABASE_URL at Postgres to test against it
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test_school_fees.db",
)

# Create test engine with NullPool to avoid connection issues
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)
test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "password123"


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Override database dependency for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def setup_database() -> AsyncGenerator[None, None]:
    """Create test database tables before each test that needs it."""
    app.dependency_overrides[get_db] = override_get_db

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def db(setup_database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(setup_database: None) -> AsyncGenerator[AsyncClient, None]:
    """Get async HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ============== Users ==============


async def create_user(db: AsyncSession, email: str, full_name: str, role: Role | str | None) -> User:
    """Insert a user directly, bypassing the API."""
    user = User(
        email=email,
        password_hash=get_password_hash(PASSWORD),
        full_name=full_name,
    )
    if role is not None:
        user.role_assignment = UserRole(role=role.value if isinstance(role, Role) else role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def login(client: AsyncClient, email: str) -> str:
    """Log in and return the access token."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": PASSWORD},
    )
    return response.json()["access_token"]


@pytest_asyncio.fixture
async def super_admin(db: AsyncSession) -> User:
    """Create a SuperAdmin user for tests."""
    return await create_user(db, "super@school.zm", "Super Admin", Role.SUPER_ADMIN)


@pytest_asyncio.fixture
async def director(db: AsyncSession) -> User:
    """Create a Director user for tests."""
    return await create_user(db, "director@school.zm", "Dana Director", Role.DIRECTOR)


@pytest_asyncio.fixture
async def school_admin(db: AsyncSession) -> User:
    """Create a SchoolAdmin user for tests."""
    return await create_user(db, "admin@school.zm", "Sam Admin", Role.SCHOOL_ADMIN)


@pytest_asyncio.fixture
async def no_role_user(db: AsyncSession) -> User:
    """Create a user without any role."""
    return await create_user(db, "norole@school.zm", "Nora Norole", None)


@pytest_asyncio.fixture
async def super_admin_token(client: AsyncClient, super_admin: User) -> str:
    """Get auth token for the SuperAdmin."""
    return await login(client, super_admin.email)


@pytest_asyncio.fixture
async def director_token(client: AsyncClient, director: User) -> str:
    """Get auth token for the Director."""
    return await login(client, director.email)


@pytest_asyncio.fixture
async def school_admin_token(client: AsyncClient, school_admin: User) -> str:
    """Get auth token for the SchoolAdmin."""
    return await login(client, school_admin.email)


@pytest_asyncio.fixture
async def no_role_token(client: AsyncClient, no_role_user: User) -> str:
    """Get auth token for the user without a role."""
    return await login(client, no_role_user.email)


# ============== School data ==============


@pytest_asyncio.fixture
async def grade(db: AsyncSession) -> Grade:
    """Create a grade."""
    grade = Grade(name="Grade 1")
    db.add(grade)
    await db.commit()
    await db.refresh(grade)
    return grade


@pytest_asyncio.fixture
async def parent(db: AsyncSession) -> Parent:
    """Create a parent."""
    parent = Parent(full_name="Mary Banda", phone_number="+260971234567")
    db.add(parent)
    await db.commit()
    await db.refresh(parent)
    return parent


@pytest_asyncio.fixture
async def pupil(db: AsyncSession, grade: Grade, parent: Parent) -> Pupil:
    """Create an active pupil in ``grade``."""
    pupil = Pupil(full_name="John Banda", grade_id=grade.id, parent_id=parent.id)
    db.add(pupil)
    await db.commit()
    await db.refresh(pupil)
    return pupil


def auth_header(token: str) -> dict[str, str]:
    """Create authorization header."""
    return {"Authorization": f"Bearer {token}"}
