"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (auth, employees, leave, attendance, ...).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test secrets before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("AUTH_HOOK_SECRET", "test-hook-secret")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hrdesk.common.constants import AppRole
from hrdesk.config import settings
from hrdesk.database import Base, get_db
from hrdesk.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import hrdesk.auth.models  # noqa: F401
import hrdesk.employees.models  # noqa: F401
import hrdesk.leave.models  # noqa: F401
import hrdesk.attendance.models  # noqa: F401
import hrdesk.common.audit  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

HOOK_HEADERS = {"X-Auth-Hook-Secret": "test-hook-secret"}


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hrdesk.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

async def seed_profile(
    db: AsyncSession,
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    department: Optional[str] = "Engineering",
    hire_date: Optional[date] = date(2024, 1, 15),
    role: Optional[AppRole] = AppRole.user,
    position: Optional[str] = None,
):
    """Insert a profile (plus role row and confidential record if given) and commit."""
    from hrdesk.auth.models import RoleAssignment
    from hrdesk.employees.models import ConfidentialRecord, Profile

    profile_id = uuid.uuid4()
    profile = Profile(
        id=profile_id,
        name=name,
        email=email or f"{profile_id.hex[:8]}@example.com",
        department=department,
        hire_date=hire_date,
    )
    db.add(profile)
    await db.flush()

    if role is not None:
        db.add(RoleAssignment(user_id=profile_id, role=role))
    if position is not None:
        db.add(ConfidentialRecord(user_id=profile_id, position=position))
    await db.commit()
    return profile


@pytest.fixture
async def admin(db):
    return await seed_profile(db, name="Ada Admin", email="ada@example.com", role=AppRole.admin)


@pytest.fixture
async def employee(db):
    return await seed_profile(
        db, name="Eve Employee", email="eve@example.com", position="Engineer",
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    identity_id: uuid.UUID,
    email: Optional[str] = None,
    expired: bool = False,
    audience: Optional[str] = None,
) -> str:
    """Mint a provider-style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(identity_id),
        "email": email,
        "aud": audience or settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(identity_id: uuid.UUID, email: Optional[str] = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity_id, email)}"}
