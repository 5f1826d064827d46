"""
Tickets Application DTOs
=========================

Pydantic request and response models for the tickets API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from helpdesk.config import TicketPriority, TicketStatus, UserRole
from helpdesk.sla.application.dto import SLATimerResponse
from helpdesk.tickets.domain import Comment, Ticket


# ========== Request DTOs ==========

class TicketCreateRequest(BaseModel):
    """Request model for opening a ticket."""
    organization_id: str = Field(..., min_length=1, description="Owning organization")
    requester_id: str = Field(..., min_length=1, description="Customer who raised the ticket")
    subject: str = Field(..., min_length=1, max_length=200, description="Ticket subject")
    description: str = Field(..., min_length=1, max_length=5000, description="Ticket description")
    priority: TicketPriority = Field(default=TicketPriority.MEDIUM, description="Ticket priority")
    tags: List[str] = Field(default_factory=list, description="Free-form labels")


class TicketUpdateRequest(BaseModel):
    """Request model for a partial ticket update. Omitted fields are left alone."""
    status: Optional[TicketStatus] = None
    assignee_id: Optional[str] = Field(None, min_length=1)
    subject: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    tags: Optional[List[str]] = None


class CommentCreateRequest(BaseModel):
    """Request model for posting a comment."""
    author_id: str = Field(..., min_length=1, description="Who wrote the comment")
    author_role: UserRole = Field(..., description="Role of the author")
    body: str = Field(..., min_length=1, max_length=10000, description="Comment text")
    is_public: Optional[bool] = Field(
        None,
        description="Visibility; customers always post publicly, staff default to private"
    )


# ========== Response DTOs ==========

class TicketResponse(BaseModel):
    """Response model for a ticket."""
    id: str
    organization_id: str
    requester_id: str
    assignee_id: Optional[str] = None
    status: TicketStatus
    priority: TicketPriority
    subject: str
    description: str
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    sla_timers: Optional[SLATimerResponse] = None

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketResponse":
        return cls(
            id=ticket.id,
            organization_id=ticket.organization_id,
            requester_id=ticket.requester_id,
            assignee_id=ticket.assignee_id,
            status=ticket.status,
            priority=ticket.priority,
            subject=ticket.subject,
            description=ticket.description,
            tags=list(ticket.tags),
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            sla_timers=(
                SLATimerResponse.from_domain(ticket.sla_timers)
                if ticket.sla_timers else None
            ),
        )


class CommentResponse(BaseModel):
    """Response model for a comment."""
    id: str
    ticket_id: str
    author_id: str
    author_role: UserRole
    body: str
    is_public: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            ticket_id=comment.ticket_id,
            author_id=comment.author_id,
            author_role=comment.author_role,
            body=comment.body,
            is_public=comment.is_public,
            created_at=comment.created_at,
        )
