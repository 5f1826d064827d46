"""
Tickets Controllers (API Routes)
=================================

FastAPI routes for tickets and their comments.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TicketPriority, TicketStatus
from helpdesk.core import Clock
from helpdesk.infrastructure.database import get_session
from helpdesk.shared.api.dependencies import get_clock, get_event_bus
from helpdesk.shared.infrastructure.events import EventBus
from helpdesk.sla.application import SLARuleService, SLATimerService
from helpdesk.sla.infrastructure import SQLAlchemySLARuleRepository
from helpdesk.tickets.application import (
    CommentCreateRequest,
    CommentResponse,
    TicketCreateRequest,
    TicketResponse,
    TicketService,
    TicketUpdateRequest,
)
from helpdesk.tickets.infrastructure import (
    SQLAlchemyCommentRepository,
    SQLAlchemyTicketRepository,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


# ========== Dependencies ==========

async def get_ticket_service(
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
    event_bus: Optional[EventBus] = Depends(get_event_bus)
) -> TicketService:
    """Get ticket service instance wired to one request session."""
    rule_service = SLARuleService(SQLAlchemySLARuleRepository(session), clock)
    return TicketService(
        SQLAlchemyTicketRepository(session),
        SQLAlchemyCommentRepository(session),
        SLATimerService(rule_service, clock),
        clock=clock,
        event_bus=event_bus
    )


# ========== Tickets ==========

@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a ticket",
    description="""
    Open a ticket in status `new`. SLA due dates are computed from the
    organization's rule for the ticket priority; without a rule the
    request fails with **404 NOT_FOUND** and nothing is stored.
    """,
    responses={404: {"description": "No SLA rule configured for the priority"}}
)
async def create_ticket(
    request: TicketCreateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.create_ticket(
        organization_id=request.organization_id,
        requester_id=request.requester_id,
        subject=request.subject,
        description=request.description,
        priority=request.priority,
        tags=request.tags
    )
    return TicketResponse.from_domain(ticket)


@router.get(
    "",
    response_model=List[TicketResponse],
    summary="List tickets"
)
async def list_tickets(
    organization_id: Optional[str] = Query(None, description="Filter by organization"),
    ticket_status: Optional[TicketStatus] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[TicketPriority] = Query(None, description="Filter by priority"),
    limit: int = Query(100, ge=1, le=1000, description="Results per page"),
    offset: int = Query(0, ge=0, description="Page offset"),
    service: TicketService = Depends(get_ticket_service)
):
    tickets = await service.list_tickets(
        organization_id=organization_id,
        status=ticket_status,
        priority=priority,
        limit=limit,
        offset=offset
    )
    return [TicketResponse.from_domain(ticket) for ticket in tickets]


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Get a ticket",
    responses={404: {"description": "Ticket not found"}}
)
async def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    return TicketResponse.from_domain(await service.get_ticket(ticket_id))


@router.patch(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Update a ticket",
    description="""
    Partial update. Status changes follow the ticket lifecycle:

    | from | allowed to |
    |------|------------|
    | new | open, closed |
    | open | pending, resolved, closed |
    | pending | open, resolved, closed |
    | resolved | open, closed |
    | closed | open |

    Any other change returns **400 VALIDATION_ERROR**. The first assignment
    of a `new` ticket also moves it to `open`, unless a status is given.
    """,
    responses={
        400: {"description": "Invalid status transition or field"},
        404: {"description": "Ticket not found"}
    }
)
async def update_ticket(
    ticket_id: str,
    request: TicketUpdateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.update_ticket(
        ticket_id,
        status=request.status,
        assignee_id=request.assignee_id,
        subject=request.subject,
        description=request.description,
        tags=request.tags
    )
    return TicketResponse.from_domain(ticket)


# ========== Comments ==========

@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
    description="""
    Customer comments are always public; agent and admin comments are
    private unless `is_public` is true. The first public agent or admin
    comment records the ticket's first response.
    """,
    responses={404: {"description": "Ticket not found"}}
)
async def add_comment(
    ticket_id: str,
    request: CommentCreateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    comment = await service.add_comment(
        ticket_id,
        author_id=request.author_id,
        author_role=request.author_role,
        body=request.body,
        is_public=request.is_public
    )
    return CommentResponse.from_domain(comment)


@router.get(
    "/{ticket_id}/comments",
    response_model=List[CommentResponse],
    summary="List a ticket's comments",
    responses={404: {"description": "Ticket not found"}}
)
async def list_comments(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    comments = await service.list_comments(ticket_id)
    return [CommentResponse.from_domain(comment) for comment in comments]


tickets_router = router
