"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Database session fixtures over an in-memory SQLite database
- Seeded users with bearer tokens
- An HTTP client bound to the application
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test_secret_key_at_least_32_characters_long_for_jwt"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "true"

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture(scope="function")
async def async_session():
    """
    Provide an async database session.

    Creates tables before the test and drops them after.
    """
    from skillz.core.database import engine, async_session_maker
    from skillz.models.base import Base
    from skillz import models  # noqa: F401 - registers every model

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session
        await session.commit()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _create_user(session, name, email, password, roles=()):
    from skillz.core.security import get_password_hash
    from skillz.repositories.user import UserRepository

    repo = UserRepository(session)
    user = await repo.create_user(name, email, get_password_hash(password), diploma="2010")
    for role in roles:
        await repo.add_role(user, role)
    await session.commit()
    return user


@pytest.fixture
async def admin_user(async_session):
    """Admin user row (password "adminpass123")."""
    return await _create_user(
        async_session, "Julien Smadja", "jsmadja@xebia.fr", "adminpass123", roles=("Admin",)
    )


@pytest.fixture
async def regular_user(async_session):
    """User without any role (password "userpass123")."""
    return await _create_user(
        async_session, "Michaël OHAYON", "mohayon@xebia.fr", "userpass123"
    )


def _bearer(user_id: int) -> dict:
    from skillz.core.security import create_user_token

    return {"Authorization": f"Bearer {create_user_token(user_id).access_token}"}


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user id."""
    return _bearer


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user["id"])


@pytest.fixture
def user_headers(regular_user):
    return _bearer(regular_user["id"])


@pytest.fixture
async def client(async_session):
    """
    HTTP client bound to the application (lifespan not run; tables
    come from the async_session fixture).
    """
    from httpx import ASGITransport, AsyncClient
    from skillz.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
