"""Health endpoint tests."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from todoapp.db.engine import build_engine, get_db
from todoapp.main import app


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version, and DB status."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    resp = await client.get("/health", headers={"x-auth": "garbage"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_health_degraded_hides_database_error(client, tmp_path):
    """An unreachable database is reported, but not its error text."""
    missing = tmp_path / "missing" / "db.sqlite"
    broken = build_engine(f"sqlite+aiosqlite:///{missing}")

    async def broken_get_db():
        async with AsyncSession(broken) as session:
            yield session

    app.dependency_overrides[get_db] = broken_get_db
    try:
        resp = await client.get("/health")
    finally:
        await broken.dispose()

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["database"] == "error"
    assert "unable to open" not in resp.text
    assert str(missing) not in resp.text
