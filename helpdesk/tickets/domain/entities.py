"""
Ticket Domain Entities
======================

Pure Python domain entities for the ticket lifecycle.

Status changes go through ``Ticket.transition_to`` so the transition table is
always enforced and the SLA clocks stop and restart together with the status.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from helpdesk.config import TicketPriority, TicketStatus, UserRole
from helpdesk.core import InvalidStatusTransitionException, ValidationException
from helpdesk.sla.domain import SLACalculator, SLATimer
from helpdesk.tickets.domain.status import INITIAL_STATUS, is_active, is_valid_transition


@dataclass
class Ticket:
    """
    Ticket entity representing a support ticket.

    Encapsulates the status state machine and the SLA timer coupling.
    Contains only domain logic, no infrastructure.
    """

    # Core attributes
    id: Optional[str]
    organization_id: str
    requester_id: str
    priority: TicketPriority
    subject: str
    description: str

    # Timestamps
    created_at: datetime
    updated_at: datetime

    status: TicketStatus = INITIAL_STATUS
    assignee_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    # Set once at creation
    sla_timers: Optional[SLATimer] = None

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.updated_at < self.created_at:
            raise ValidationException("updated_at cannot be before created_at")

    @property
    def is_active(self) -> bool:
        """Check if the ticket's SLA clocks are still running."""
        return is_active(self.status)

    def transition_to(self, new_status: TicketStatus, timestamp: datetime) -> None:
        """
        Move the ticket to a new status.

        Leaving the active set stops the resolution clock; coming back into
        it restarts the clock against the original due date.

        Raises:
            InvalidStatusTransitionException: If the transition is not allowed
        """
        if not is_valid_transition(self.status, new_status):
            raise InvalidStatusTransitionException(self.status, new_status)

        was_active = self.is_active
        self.status = new_status
        self.updated_at = timestamp

        if self.sla_timers is None:
            return

        if was_active and not self.is_active:
            self.sla_timers = SLACalculator.check_breach(
                self.sla_timers.with_resolution(timestamp), timestamp
            )
        elif not was_active and self.is_active:
            self.sla_timers = SLACalculator.check_breach(
                self.sla_timers.reopened(), timestamp
            )

    def assign(self, assignee_id: str, timestamp: datetime) -> None:
        """
        Assign the ticket.

        The first assignment of a NEW ticket also opens it.
        """
        first_assignment = self.assignee_id is None
        self.assignee_id = assignee_id
        self.updated_at = timestamp

        if first_assignment and self.status == TicketStatus.NEW:
            self.transition_to(TicketStatus.OPEN, timestamp)

    def record_first_response(self, timestamp: datetime) -> bool:
        """
        Stamp the first response on the SLA timer.

        Returns:
            True if the timer changed
        """
        if self.sla_timers is None or self.sla_timers.first_response_at is not None:
            return False
        self.sla_timers = SLACalculator.check_breach(
            self.sla_timers.with_first_response(timestamp), timestamp
        )
        return True


@dataclass
class Comment:
    """Comment on a ticket's conversation."""

    id: Optional[str]
    ticket_id: str
    author_id: str
    author_role: UserRole
    body: str
    is_public: bool
    created_at: datetime

    @property
    def counts_as_first_response(self) -> bool:
        """Only public replies from support staff stop the first-response clock."""
        return self.is_public and self.author_role != UserRole.CUSTOMER
