"""
SLA Domain Entities
====================

Pure Python domain entities for SLA management.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from helpdesk.config import TicketPriority, VALID_PRIORITIES
from helpdesk.core import ValidationException


def validate_priority(priority: Any) -> TicketPriority:
    """Coerce a priority value to the enum, raising on anything unknown."""
    try:
        return TicketPriority(priority)
    except ValueError:
        raise ValidationException(
            f"Invalid priority. Must be one of: {', '.join(p.value for p in VALID_PRIORITIES)}",
            {"field": "priority", "value": getattr(priority, "value", priority)}
        ) from None


def validate_minutes(field_name: str, value: Any) -> int:
    """SLA durations are positive whole minutes; bools and floats are rejected."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationException(
            f"{field_name} must be a positive integer",
            {"field": field_name, "value": value}
        )
    return value


@dataclass
class SLARule:
    """
    Per-tenant SLA policy for a single priority.

    There is at most one rule per (organization_id, priority).
    """

    id: Optional[str]
    organization_id: str
    priority: TicketPriority
    first_response_minutes: int
    resolution_minutes: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate rule on initialization."""
        if not self.organization_id:
            raise ValidationException(
                "organization_id is required", {"field": "organization_id"}
            )
        self.priority = validate_priority(self.priority)
        validate_minutes("first_response_minutes", self.first_response_minutes)
        validate_minutes("resolution_minutes", self.resolution_minutes)


@dataclass(frozen=True)
class SLATimer:
    """
    SLA clocks embedded in a ticket.

    Due dates are fixed at ticket creation. ``breached`` is derived from the
    other fields plus the evaluation time and is recomputed by
    ``SLACalculator.check_breach``.
    """

    first_response_due: datetime
    resolution_due: datetime
    first_response_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    breached: bool = False

    def with_first_response(self, timestamp: datetime) -> "SLATimer":
        """Record the first response; later calls keep the original timestamp."""
        if self.first_response_at is not None:
            return self
        return replace(self, first_response_at=timestamp)

    def with_resolution(self, timestamp: datetime) -> "SLATimer":
        """Stop the resolution clock; later calls keep the original timestamp."""
        if self.resolved_at is not None:
            return self
        return replace(self, resolved_at=timestamp)

    def reopened(self) -> "SLATimer":
        """Restart the resolution clock against the original due date."""
        if self.resolved_at is None:
            return self
        return replace(self, resolved_at=None)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "first_response_due": self.first_response_due.isoformat(),
            "resolution_due": self.resolution_due.isoformat(),
            "first_response_at": self.first_response_at.isoformat() if self.first_response_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "breached": self.breached,
        }
