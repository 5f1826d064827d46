"""
Tests for SLA timer calculation and breach detection.

Pure functions only; no database.
"""
from dataclasses import replace
from datetime import timedelta

import pytest

from helpdesk.config import TicketPriority
from helpdesk.core import ValidationException
from helpdesk.sla.domain import SLACalculator, SLARule, SLATimer

from support import T0


def _rule(first_response_minutes=60, resolution_minutes=480) -> SLARule:
    return SLARule(
        id="rule-1",
        organization_id="org-1",
        priority=TicketPriority.HIGH,
        first_response_minutes=first_response_minutes,
        resolution_minutes=resolution_minutes,
        created_at=T0,
    )


def test_due_dates_are_offsets_from_created_at():
    timer = SLACalculator.calculate_timers(_rule(60, 480), T0)

    assert timer.first_response_due == T0 + timedelta(hours=1)
    assert timer.resolution_due == T0 + timedelta(hours=8)
    assert timer.first_response_due.isoformat() == "2024-01-01T01:00:00+00:00"
    assert timer.resolution_due.isoformat() == "2024-01-01T08:00:00+00:00"
    assert timer.breached is False
    assert timer.first_response_at is None
    assert timer.resolved_at is None


def test_calculation_is_deterministic():
    rule = _rule(45, 1440)
    assert SLACalculator.calculate_timers(rule, T0) == SLACalculator.calculate_timers(rule, T0)


def test_not_breached_before_first_response_due():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    assert SLACalculator.check_breach(timer, T0 + timedelta(minutes=59)).breached is False


def test_breached_after_first_response_due():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    assert SLACalculator.check_breach(timer, T0 + timedelta(minutes=61)).breached is True


def test_deadline_equal_to_now_is_not_breached():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    assert SLACalculator.check_breach(timer, timer.first_response_due).breached is False
    assert SLACalculator.check_breach(timer, timer.first_response_due + timedelta(microseconds=1)).breached is True


def test_breach_is_monotone_in_time():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    results = [
        SLACalculator.check_breach(timer, T0 + timedelta(minutes=m)).breached
        for m in range(0, 600, 7)
    ]
    first_true = results.index(True)
    assert all(results[first_true:])
    assert not any(results[:first_true])


def test_late_first_response_clears_first_response_breach():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    late = timer.with_first_response(T0 + timedelta(minutes=90))

    assert SLACalculator.check_breach(late, T0 + timedelta(minutes=120)).breached is False
    assert SLACalculator.is_first_response_breached(late, T0 + timedelta(days=30)) is False


def test_resolution_breach_still_holds_after_first_response():
    timer = SLACalculator.calculate_timers(_rule(), T0).with_first_response(T0 + timedelta(minutes=5))
    now = T0 + timedelta(hours=9)

    assert SLACalculator.check_breach(timer, now).breached is True
    assert SLACalculator.is_resolution_breached(timer, now) is True


def test_resolved_timer_is_not_breached():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    done = timer.with_first_response(T0 + timedelta(minutes=30)).with_resolution(T0 + timedelta(hours=9))

    assert SLACalculator.check_breach(done, T0 + timedelta(days=2)).breached is False


def test_check_breach_does_not_mutate_input():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    result = SLACalculator.check_breach(timer, T0 + timedelta(days=1))

    assert result is not timer
    assert timer.breached is False
    assert result == replace(timer, breached=True)


def test_first_response_is_recorded_once():
    timer = SLACalculator.calculate_timers(_rule(), T0)
    first = timer.with_first_response(T0 + timedelta(minutes=10))
    second = first.with_first_response(T0 + timedelta(minutes=20))

    assert second.first_response_at == T0 + timedelta(minutes=10)


def test_reopened_clears_resolution_only():
    timer = SLATimer(
        first_response_due=T0 + timedelta(hours=1),
        resolution_due=T0 + timedelta(hours=8),
        first_response_at=T0 + timedelta(minutes=5),
        resolved_at=T0 + timedelta(hours=2),
    )
    reopened = timer.reopened()

    assert reopened.resolved_at is None
    assert reopened.first_response_at == timer.first_response_at
    assert reopened.resolution_due == timer.resolution_due


@pytest.mark.parametrize("minutes", [0, -1, 1.5, True, "60", None])
def test_rule_rejects_non_positive_integer_minutes(minutes):
    with pytest.raises(ValidationException):
        _rule(first_response_minutes=minutes)
    with pytest.raises(ValidationException):
        _rule(resolution_minutes=minutes)


def test_rule_rejects_unknown_priority():
    with pytest.raises(ValidationException) as exc_info:
        SLARule(
            id=None,
            organization_id="org-1",
            priority="critical",
            first_response_minutes=30,
            resolution_minutes=240,
            created_at=T0,
        )
    assert exc_info.value.details["field"] == "priority"
