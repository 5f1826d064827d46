"""
SLA Value Objects
==================

Stateless SLA calculations.

Both functions are pure: they depend only on their arguments, never read the
wall clock and never mutate their inputs.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from helpdesk.sla.domain.entities import SLARule, SLATimer


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all SLA timing logic in one place.
    """

    @staticmethod
    def calculate_timers(rule: SLARule, created_at: datetime) -> SLATimer:
        """
        Calculate SLA due dates for a new ticket.

        Args:
            rule: The organization's rule for the ticket priority
            created_at: The ticket's own creation timestamp

        Returns:
            A fresh, unbreached SLATimer
        """
        return SLATimer(
            first_response_due=created_at + timedelta(minutes=rule.first_response_minutes),
            resolution_due=created_at + timedelta(minutes=rule.resolution_minutes),
            breached=False,
        )

    @staticmethod
    def is_first_response_breached(timer: SLATimer, now: datetime) -> bool:
        """First response deadline passed without a response."""
        return timer.first_response_at is None and now > timer.first_response_due

    @staticmethod
    def is_resolution_breached(timer: SLATimer, now: datetime) -> bool:
        """Resolution deadline passed without a resolution."""
        return timer.resolved_at is None and now > timer.resolution_due

    @staticmethod
    def check_breach(timer: SLATimer, now: datetime) -> SLATimer:
        """
        Recompute the breached flag at ``now``.

        A deadline equal to ``now`` has not yet passed.

        Returns:
            A copy of ``timer`` with ``breached`` recomputed
        """
        breached = (
            SLACalculator.is_first_response_breached(timer, now)
            or SLACalculator.is_resolution_breached(timer, now)
        )
        return replace(timer, breached=breached)
