"""Tests for the /health endpoint."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    """GET /health should report both the database and the outbox as reachable."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "ok",
        "redis": "ok",
        "outbox": {"email": 0, "sms": 0, "push": 0},
    }


@pytest.mark.asyncio
async def test_health_reports_outbox_depth(client, gateway):
    gateway.send_sms("+46700000001", "test")
    gateway.send_sms("+46700000002", "test")

    response = await client.get("/health")
    assert response.json()["outbox"]["sms"] == 2
