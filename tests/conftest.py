"""Test configuration and fixtures.

Each test gets its own in-memory SQLite database:
1. A fresh engine is created per test and the schema is built from the models
2. The application's session dependency is overridden with the test session
3. Stores commit as they do in production; isolation comes from discarding the database
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET", "test-signing-secret-with-at-least-32-bytes")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.database.base import Base  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.jwt_utils import AccessTokenCodec  # noqa: E402
from src.features.auth.models import RefreshToken  # noqa: E402, F401
from src.features.auth.store import RefreshTokenStore  # noqa: E402
from src.features.user.hashing import default_hasher  # noqa: E402
from src.features.user.models import User  # noqa: E402
from src.features.user.store import CredentialStore  # noqa: E402
from src.main import app  # noqa: E402

# Database Setup - Function Scope (Fresh Database Per Test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # One shared connection, so the in-memory database survives
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a database session per test."""
    async with AsyncSession(bind=db_engine, expire_on_commit=False) as async_session:
        yield async_session


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_get_db_session(session: AsyncSession):
    """Override the database session dependency with the test session."""

    async def _get_test_session():
        yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP test client (unauthenticated)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Components


@pytest.fixture
def codec() -> AccessTokenCodec:
    """The codec the application verifies bearer tokens with."""
    return app.state.token_codec


@pytest.fixture
def credential_store(session: AsyncSession) -> CredentialStore:
    return CredentialStore(session, hasher=default_hasher)


@pytest.fixture
def refresh_store(session: AsyncSession) -> RefreshTokenStore:
    return RefreshTokenStore(session, ttl=timedelta(hours=24))


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create committed test users.

    Usage:
        user = await make_user()                               # defaults
        alice = await make_user(username="alice", password="secret")
    """
    counter = 0  # Counter for unique username generation

    async def _factory(username=None, password="secret", email=None) -> User:
        nonlocal counter
        counter += 1

        if username is None:
            username = f"testuser{counter}"
        if email is None:
            email = f"{username}@example.com"

        user = User(username=username, email=email, password_hash=default_hasher.hash(password))
        session.add(user)
        await session.commit()
        return user

    yield _factory
