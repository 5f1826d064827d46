"""
Tests for SLA rule resolution and management (SLARuleService).

Runs against the per-test SQLite database.
"""
from datetime import timedelta

import pytest

from helpdesk.config import TicketPriority
from helpdesk.core import (
    ConflictException,
    ResourceNotFoundException,
    SLARuleNotFoundException,
    ValidationException,
)
from helpdesk.sla.application import SLARuleService, SLATimerService

from support import T0


@pytest.fixture
def service(rule_repository, clock):
    return SLARuleService(rule_repository, clock)


@pytest.mark.asyncio
async def test_create_and_resolve_rule(service):
    created = await service.create_rule("org-1", "high", 60, 480)

    rule = await service.resolve("org-1", TicketPriority.HIGH)
    assert rule is not None
    assert rule.id == created.id
    assert rule.first_response_minutes == 60
    assert rule.resolution_minutes == 480
    assert rule.created_at == T0


@pytest.mark.asyncio
async def test_resolve_returns_none_without_rule(service):
    await service.create_rule("org-1", "high", 60, 480)

    assert await service.resolve("org-1", "low") is None
    assert await service.resolve("org-2", "high") is None


@pytest.mark.asyncio
async def test_require_raises_not_found(service):
    with pytest.raises(SLARuleNotFoundException) as exc_info:
        await service.require("org-1", "urgent")

    assert isinstance(exc_info.value, ResourceNotFoundException)
    assert exc_info.value.status_code == 404
    assert "org-1" in exc_info.value.message
    assert "urgent" in exc_info.value.message


@pytest.mark.asyncio
async def test_duplicate_rule_conflicts_and_keeps_existing(service):
    original = await service.create_rule("org-1", "high", 60, 480)

    with pytest.raises(ConflictException) as exc_info:
        await service.create_rule("org-1", "high", 5, 10)

    assert exc_info.value.status_code == 409
    rule = await service.resolve("org-1", "high")
    assert rule.id == original.id
    assert rule.first_response_minutes == 60
    assert rule.resolution_minutes == 480


@pytest.mark.asyncio
async def test_same_priority_in_other_organization_is_allowed(service):
    await service.create_rule("org-1", "high", 60, 480)
    other = await service.create_rule("org-2", "high", 15, 120)

    assert other.organization_id == "org-2"


@pytest.mark.asyncio
@pytest.mark.parametrize("minutes", [0, -5, 1.5, True])
async def test_create_rejects_invalid_minutes(service, minutes):
    with pytest.raises(ValidationException):
        await service.create_rule("org-1", "high", minutes, 480)
    with pytest.raises(ValidationException):
        await service.create_rule("org-1", "high", 60, minutes)

    assert await service.resolve("org-1", "high") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("priority", ["critical", "", None, "HIGH"])
async def test_invalid_priority_is_rejected(service, priority):
    with pytest.raises(ValidationException):
        await service.resolve("org-1", priority)


@pytest.mark.asyncio
async def test_empty_organization_is_rejected(service):
    with pytest.raises(ValidationException):
        await service.resolve("", "high")
    with pytest.raises(ValidationException):
        await service.list_rules("")


@pytest.mark.asyncio
async def test_update_rule_changes_durations(service, clock):
    created = await service.create_rule("org-1", "urgent", 30, 240)
    clock.advance(hours=1)

    updated = await service.update_rule("org-1", "urgent", 15, 120)

    assert updated.id == created.id
    assert updated.first_response_minutes == 15
    assert updated.resolution_minutes == 120
    assert updated.updated_at == T0 + timedelta(hours=1)


@pytest.mark.asyncio
async def test_update_missing_rule_is_not_found(service):
    with pytest.raises(SLARuleNotFoundException):
        await service.update_rule("org-1", "low", 60, 480)


@pytest.mark.asyncio
async def test_update_validates_minutes(service):
    await service.create_rule("org-1", "low", 60, 480)

    with pytest.raises(ValidationException):
        await service.update_rule("org-1", "low", 0, 480)

    rule = await service.resolve("org-1", "low")
    assert rule.first_response_minutes == 60


@pytest.mark.asyncio
async def test_list_rules_ordered_by_priority(service):
    for priority in ("urgent", "low", "high", "medium"):
        await service.create_rule("org-1", priority, 60, 480)
    await service.create_rule("org-2", "low", 60, 480)

    rules = await service.list_rules("org-1")

    assert [r.priority for r in rules] == [
        TicketPriority.LOW, TicketPriority.MEDIUM, TicketPriority.HIGH, TicketPriority.URGENT
    ]


@pytest.mark.asyncio
async def test_timer_service_uses_rule_durations(service, clock):
    await service.create_rule("org-1", "urgent", 30, 240)
    timers = SLATimerService(service, clock)

    timer = await timers.calculate_timers("org-1", "urgent", T0)

    assert timer.first_response_due == T0 + timedelta(minutes=30)
    assert timer.resolution_due == T0 + timedelta(minutes=240)
    assert timer.breached is False


@pytest.mark.asyncio
async def test_timer_service_passes_not_found_through(service, clock):
    timers = SLATimerService(service, clock)

    with pytest.raises(SLARuleNotFoundException):
        await timers.calculate_timers("org-1", "urgent", T0)


@pytest.mark.asyncio
async def test_timer_service_check_breach_uses_clock(service, clock):
    await service.create_rule("org-1", "urgent", 30, 240)
    timers = SLATimerService(service, clock)
    timer = await timers.calculate_timers("org-1", "urgent", T0)

    clock.advance(minutes=31)

    assert timers.check_breach(timer).breached is True
    assert timers.check_breach(timer, T0 + timedelta(minutes=10)).breached is False
