import pytest

from synqit.main import app

pytestmark = pytest.mark.asyncio


async def test_health_reports_database_state(client):
    resp = await client.get("/api/health")
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["database"] == "unknown"
    assert body["data"]["status"] == "ok"

    await app.state.health_monitor.check_once()
    body = (await client.get("/api/health")).json()
    assert body["data"]["database"] == "connected"
    assert body["data"]["timestamp"].endswith("Z")


async def test_api_info(client):
    body = (await client.get("/api")).json()
    assert body["data"]["endpoints"]["matches"] == "/api/matches"


async def test_unknown_route_uses_error_envelope(client):
    resp = await client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


async def test_general_rate_limit(client, register_user, monkeypatch):
    from synqit.config import settings
    from synqit.core.rate_limit import general_limiter

    headers, _ = await register_user()
    monkeypatch.setattr(settings, "rate_limit_enabled", True)
    monkeypatch.setattr(general_limiter, "max_requests", 3)

    statuses = [(await client.get("/api/projects")).status_code for _ in range(4)]
    assert statuses == [200, 200, 200, 429]
    body = (await client.get("/api/profile/user", headers=headers)).json()
    assert body == {"success": False, "message": "Too many requests from this IP, please try again later."}
