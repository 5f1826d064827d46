"""
Tests for the HTTP API.

Uses the client fixture from conftest.py: a fresh SQLite database per test
and the request clock pinned to the test's FakeClock.
"""
from datetime import timedelta

import pytest

from support import T0


async def _create_rule(client, org="org-1", priority="high", first=60, resolution=480):
    return await client.post(
        f"/sla/organizations/{org}/rules",
        json={"priority": priority, "first_response_minutes": first, "resolution_minutes": resolution},
    )


async def _create_ticket(client, org="org-1", priority="high"):
    return await client.post("/tickets", json={
        "organization_id": org,
        "requester_id": "customer-1",
        "subject": "Printer offline",
        "description": "The office printer shows as offline for everyone.",
        "priority": priority,
    })


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_create_rule(client):
    resp = await _create_rule(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["organization_id"] == "org-1"
    assert data["priority"] == "high"
    assert data["first_response_minutes"] == 60


@pytest.mark.asyncio
async def test_duplicate_rule_returns_409(client):
    await _create_rule(client)

    resp = await _create_rule(client, first=5, resolution=10)

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"
    rule = (await client.get("/sla/organizations/org-1/rules/high")).json()
    assert rule["first_response_minutes"] == 60


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"priority": "high", "first_response_minutes": 0, "resolution_minutes": 480},
    {"priority": "high", "first_response_minutes": 1.5, "resolution_minutes": 480},
    {"priority": "high", "first_response_minutes": True, "resolution_minutes": 480},
    {"priority": "critical", "first_response_minutes": 60, "resolution_minutes": 480},
    {"priority": "high", "first_response_minutes": 60},
])
async def test_invalid_rule_returns_400(client, payload):
    resp = await client.post("/sla/organizations/org-1/rules", json=payload)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert "correlation_id" in body


@pytest.mark.asyncio
async def test_missing_rule_returns_404(client):
    resp = await client.get("/sla/organizations/org-1/rules/urgent")

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_and_list_rules(client, clock):
    await _create_rule(client, priority="urgent", first=30, resolution=240)
    await _create_rule(client, priority="low", first=480, resolution=2880)
    clock.advance(minutes=10)

    resp = await client.put(
        "/sla/organizations/org-1/rules/urgent",
        json={"first_response_minutes": 15, "resolution_minutes": 120},
    )
    assert resp.status_code == 200
    assert resp.json()["first_response_minutes"] == 15

    rules = (await client.get("/sla/organizations/org-1/rules")).json()
    assert [r["priority"] for r in rules] == ["low", "urgent"]


@pytest.mark.asyncio
async def test_create_ticket_without_rule_returns_404(client):
    resp = await _create_ticket(client, priority="urgent")

    assert resp.status_code == 404
    assert (await client.get("/tickets")).json() == []


@pytest.mark.asyncio
async def test_ticket_lifecycle(client, clock):
    await _create_rule(client)
    created = await _create_ticket(client)
    assert created.status_code == 201
    ticket = created.json()
    assert ticket["status"] == "new"
    assert ticket["sla_timers"]["breached"] is False

    clock.advance(minutes=5)
    resp = await client.patch(f"/tickets/{ticket['id']}", json={"assignee_id": "agent-1"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "open"

    resp = await client.patch(f"/tickets/{ticket['id']}", json={"status": "new"})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"] == {"from": "open", "to": "new"}

    clock.advance(hours=1)
    resp = await client.patch(f"/tickets/{ticket['id']}", json={"status": "resolved"})
    assert resp.status_code == 200
    assert resp.json()["sla_timers"]["resolved_at"] is not None


@pytest.mark.asyncio
async def test_unknown_ticket_returns_404(client):
    resp = await client.get("/tickets/0f0e0d0c-0000-4000-8000-000000000000")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_comments_and_first_response(client, clock):
    await _create_rule(client)
    ticket = (await _create_ticket(client)).json()

    clock.advance(minutes=15)
    resp = await client.post(f"/tickets/{ticket['id']}/comments", json={
        "author_id": "agent-1", "author_role": "agent", "body": "Restarting the print server", "is_public": True,
    })
    assert resp.status_code == 201

    sla = (await client.get(f"/sla/tickets/{ticket['id']}")).json()
    assert sla["stored"]["first_response_at"] is not None
    comments = (await client.get(f"/tickets/{ticket['id']}/comments")).json()
    assert len(comments) == 1


@pytest.mark.asyncio
async def test_ticket_sla_live_evaluation_is_not_persisted(client, clock):
    await _create_rule(client)
    ticket = (await _create_ticket(client)).json()
    clock.set(T0 + timedelta(hours=2))

    resp = await client.get(f"/sla/tickets/{ticket['id']}")

    assert resp.status_code == 200
    data = resp.json()
    assert data["current"]["breached"] is True
    assert data["first_response_breached"] is True
    assert data["resolution_breached"] is False
    assert data["stored"]["breached"] is False


@pytest.mark.asyncio
async def test_manual_sweep(client, clock):
    await _create_rule(client)
    ticket = (await _create_ticket(client)).json()
    clock.set(T0 + timedelta(hours=2))

    resp = await client.post("/sla/monitor/run")

    assert resp.status_code == 200
    summary = resp.json()
    assert summary["total_tickets"] == 1
    assert summary["breached_count"] == 1
    assert summary["failed"] is False
    stored = (await client.get(f"/tickets/{ticket['id']}")).json()
    assert stored["sla_timers"]["breached"] is True


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    resp = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert resp.headers["X-Correlation-ID"] == "abc-123"
