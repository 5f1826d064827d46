"""
SLA Application DTOs
=====================

Data Transfer Objects for the SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, StrictInt

from helpdesk.config import TicketPriority, TicketStatus
from helpdesk.sla.domain import SLARule, SLATimer


# ========== Request DTOs ==========

class SLARuleCreateRequest(BaseModel):
    """Request model for creating an SLA rule."""
    priority: TicketPriority = Field(..., description="Ticket priority the rule applies to")
    first_response_minutes: StrictInt = Field(..., description="Minutes allowed until first response")
    resolution_minutes: StrictInt = Field(..., description="Minutes allowed until resolution")


class SLARuleUpdateRequest(BaseModel):
    """Request model for changing an SLA rule's durations."""
    first_response_minutes: StrictInt = Field(..., description="Minutes allowed until first response")
    resolution_minutes: StrictInt = Field(..., description="Minutes allowed until resolution")


# ========== Response DTOs ==========

class SLARuleResponse(BaseModel):
    """Response model for an SLA rule."""
    id: str
    organization_id: str
    priority: TicketPriority
    first_response_minutes: int
    resolution_minutes: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, rule: SLARule) -> "SLARuleResponse":
        return cls(
            id=rule.id,
            organization_id=rule.organization_id,
            priority=rule.priority,
            first_response_minutes=rule.first_response_minutes,
            resolution_minutes=rule.resolution_minutes,
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )


class SLATimerResponse(BaseModel):
    """Response model for a ticket's SLA timer."""
    first_response_due: datetime = Field(..., description="First response deadline")
    resolution_due: datetime = Field(..., description="Resolution deadline")
    first_response_at: Optional[datetime] = Field(None, description="When the first agent reply was posted")
    resolved_at: Optional[datetime] = Field(None, description="When the resolution clock stopped")
    breached: bool = Field(..., description="Whether any deadline has been missed")

    @classmethod
    def from_domain(cls, timer: SLATimer) -> "SLATimerResponse":
        return cls(
            first_response_due=timer.first_response_due,
            resolution_due=timer.resolution_due,
            first_response_at=timer.first_response_at,
            resolved_at=timer.resolved_at,
            breached=timer.breached,
        )


class TicketSLAResponse(BaseModel):
    """Stored timer of a ticket plus a live evaluation at request time."""
    ticket_id: str
    organization_id: str
    status: TicketStatus
    priority: TicketPriority
    evaluated_at: datetime
    stored: SLATimerResponse = Field(..., description="Timer as last persisted")
    current: SLATimerResponse = Field(..., description="Timer re-evaluated at evaluated_at (not persisted)")
    first_response_breached: bool
    resolution_breached: bool


class SweepSummaryResponse(BaseModel):
    """Response model for a manual monitoring sweep."""
    run_id: str
    total_tickets: int
    breached_count: int
    updated_count: int
    skipped_count: int
    error_count: int
    errors: List[Dict[str, str]] = Field(default_factory=list)
    duration_ms: int
    failed: bool
    timed_out: bool
