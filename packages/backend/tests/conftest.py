"""Test fixtures — a fresh SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite file under tmp_path with all tables created.
2. The app's get_db dependency is overridden so every request opens its
   own session on that database. Requests never share a session, so
   tests can fire concurrent requests the way real clients would.
3. The database file disappears with tmp_path, so tests never see each other's data.

Environment is set before anything from todoapp is imported: settings
are read once at import time.
"""

import os

os.environ.setdefault("TODOAPP_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TODOAPP_JWT_SECRET", "test-secret-do-not-use")
os.environ.setdefault("TODOAPP_BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from todoapp.config import settings  # noqa: E402
from todoapp.db.engine import build_engine, get_db, init_models  # noqa: E402
from todoapp.main import app  # noqa: E402


@pytest_asyncio.fixture()
async def engine(tmp_path):
    """Per-test engine on a throwaway SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with the app's get_db pointed at the test database.

    Learn: Auth is NOT overridden. Every protected request in the tests
    goes through the real pipeline: header → token codec → session
    registry → user.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def signup(client):
    """Factory: create an account through the API, return (user, token)."""

    async def _signup(email: str, password: str = "password_123"):
        r = await client.post("/users", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json(), r.headers[settings.auth_header]

    return _signup
