"""Health endpoint tests."""

import pytest

from rentdesk import __version__


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and DB check."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["code"] == 200
    assert data["message"] == "healthy"
    assert data["result"]["server"] == "ok"
    assert data["result"]["version"] == __version__
    assert data["result"]["database"] == "ok"
