"""Health endpoint and HTTP middleware tests."""

import pytest


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"
    assert "version" in body


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/api/v1/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_user_responses_are_not_cached(client, alice):
    r = await client.get("/api/v1/users/me", headers=alice["headers"])
    assert r.headers["Cache-Control"] == "no-store"

    r = await client.get("/api/v1/health")
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated_and_propagated(client):
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]

    r = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-123"})
    assert r.headers["X-Request-ID"] == "trace-123"


@pytest.mark.asyncio
async def test_store_failure_is_generic_500(client, alice, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from taskmanager.services.task_service import TaskService

    async def broken(self, owner_id, query=None):
        raise OperationalError("SELECT 1", {}, Exception("connection refused to db-host"))

    monkeypatch.setattr(TaskService, "list_tasks", broken)
    r = await client.get("/api/v1/tasks", headers=alice["headers"])
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
    assert "db-host" not in r.text
