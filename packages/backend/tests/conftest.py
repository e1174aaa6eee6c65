"""Test fixtures — a fresh in-memory database per test.

Each test gets its own SQLite engine (aiosqlite + StaticPool, so every
connection sees the same in-memory database), the schema created from
Base.metadata, and the app's get_db overridden to use that session.
Auth is NOT mocked: tests sign up and log in through the API and send
real bearer tokens, so the whole token pipeline is exercised.

Env vars are set before importing the app so settings pick them up.
"""

import os

os.environ.setdefault("TASKMANAGER_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TASKMANAGER_ENVIRONMENT", "test")
os.environ.setdefault("TASKMANAGER_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKMANAGER_JWT_SECRET", "test-secret-at-least-32-bytes-long")
os.environ["TASKMANAGER_SENDGRID_API_KEY"] = ""

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskmanager.db.engine import get_db  # noqa: E402
from taskmanager.db.models import Base  # noqa: E402
from taskmanager.main import app  # noqa: E402


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
    await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with only get_db overridden."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def signup(client):
    """Factory: create an account through the API.

    Returns a dict with the profile, the token, the password used, and
    ready-made Authorization headers.
    """
    async def _signup(name: str = "User", password: str = "longpass1", **extra):
        email = extra.pop("email", f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com")
        r = await client.post(
            "/api/v1/users",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return {
            "user": body["user"],
            "token": body["token"],
            "email": email,
            "password": password,
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _signup


@pytest_asyncio.fixture()
async def alice(signup):
    return await signup("Alice")


@pytest_asyncio.fixture()
async def bob(signup):
    return await signup("Bob")
