"""
Ticket Status State Machine
===========================

Single owner of the ticket status transition rules.

CLOSED is not terminal: a closed ticket can always be reopened, so nothing
downstream may treat CLOSED as permanent.
"""

from typing import Dict, FrozenSet

from helpdesk.config import TicketStatus, ACTIVE_STATUSES

INITIAL_STATUS = TicketStatus.NEW

STATUS_TRANSITIONS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
    TicketStatus.NEW: frozenset({TicketStatus.OPEN, TicketStatus.CLOSED}),
    TicketStatus.OPEN: frozenset({TicketStatus.PENDING, TicketStatus.RESOLVED, TicketStatus.CLOSED}),
    TicketStatus.PENDING: frozenset({TicketStatus.OPEN, TicketStatus.RESOLVED, TicketStatus.CLOSED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.OPEN, TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset({TicketStatus.OPEN}),
}


def is_valid_transition(from_status: TicketStatus, to_status: TicketStatus) -> bool:
    """Check whether a ticket may move from one status to another."""
    return to_status in STATUS_TRANSITIONS.get(from_status, frozenset())


def is_active(status: TicketStatus) -> bool:
    """SLA clocks are running for tickets in an active status."""
    return status in ACTIVE_STATUSES
