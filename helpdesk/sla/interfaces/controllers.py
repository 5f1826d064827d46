"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA rules, ticket timers and the monitoring sweep.

Controllers are thin - they delegate to application services.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TicketPriority, settings
from helpdesk.core import Clock, ResourceNotFoundException
from helpdesk.infrastructure.database import get_session
from helpdesk.shared.api.dependencies import get_clock, get_event_bus
from helpdesk.shared.infrastructure.events import EventBus
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.sla.application import (
    SLAMonitoringJob,
    SLARuleCreateRequest,
    SLARuleResponse,
    SLARuleService,
    SLARuleUpdateRequest,
    SLATimerResponse,
    SweepSummaryResponse,
    TicketSLAResponse,
)
from helpdesk.sla.domain import SLACalculator
from helpdesk.sla.infrastructure import SQLAlchemySLARuleRepository
from helpdesk.tickets.infrastructure import SQLAlchemyTicketRepository, ticket_repository_scope

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA"])


RULE_RESPONSE_EXAMPLE = {
    "id": "3f2b8c1e-4a59-4f0e-9a43-1c8f0e6d2b7a",
    "organization_id": "acme",
    "priority": "urgent",
    "first_response_minutes": 30,
    "resolution_minutes": 240,
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z"
}

SWEEP_RESPONSE_EXAMPLE = {
    "run_id": "run-5c0f7a91d2e4",
    "total_tickets": 3,
    "breached_count": 1,
    "updated_count": 1,
    "skipped_count": 0,
    "error_count": 0,
    "errors": [],
    "duration_ms": 12,
    "failed": False,
    "timed_out": False
}


# ========== Dependencies ==========

async def get_rule_service(
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
) -> SLARuleService:
    """Get SLA rule service instance."""
    return SLARuleService(SQLAlchemySLARuleRepository(session), clock)


# ========== Rules ==========

@router.post(
    "/organizations/{organization_id}/rules",
    response_model=SLARuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an SLA rule",
    description="""
    Create the SLA rule for one priority of an organization.

    An organization has at most one rule per priority; creating a second
    one returns **409 CONFLICT** and leaves the existing rule unchanged.
    Minutes must be positive whole numbers.
    """,
    responses={
        201: {"content": {"application/json": {"example": RULE_RESPONSE_EXAMPLE}}},
        400: {"description": "Invalid priority or minutes"},
        409: {"description": "Rule already exists for this priority"}
    }
)
async def create_rule(
    organization_id: str,
    request: SLARuleCreateRequest,
    service: SLARuleService = Depends(get_rule_service)
):
    rule = await service.create_rule(
        organization_id,
        request.priority,
        request.first_response_minutes,
        request.resolution_minutes
    )
    return SLARuleResponse.from_domain(rule)


@router.get(
    "/organizations/{organization_id}/rules",
    response_model=List[SLARuleResponse],
    summary="List an organization's SLA rules"
)
async def list_rules(
    organization_id: str,
    service: SLARuleService = Depends(get_rule_service)
):
    rules = await service.list_rules(organization_id)
    return [SLARuleResponse.from_domain(rule) for rule in rules]


@router.get(
    "/organizations/{organization_id}/rules/{priority}",
    response_model=SLARuleResponse,
    summary="Get the SLA rule for a priority",
    responses={404: {"description": "No rule configured"}}
)
async def get_rule(
    organization_id: str,
    priority: TicketPriority,
    service: SLARuleService = Depends(get_rule_service)
):
    rule = await service.require(organization_id, priority)
    return SLARuleResponse.from_domain(rule)


@router.put(
    "/organizations/{organization_id}/rules/{priority}",
    response_model=SLARuleResponse,
    summary="Change an SLA rule's durations",
    description="""
    Update the durations of an existing rule.

    Only tickets opened afterwards use the new durations; due dates of
    existing tickets are fixed at creation.
    """,
    responses={404: {"description": "No rule configured"}}
)
async def update_rule(
    organization_id: str,
    priority: TicketPriority,
    request: SLARuleUpdateRequest,
    service: SLARuleService = Depends(get_rule_service)
):
    rule = await service.update_rule(
        organization_id,
        priority,
        request.first_response_minutes,
        request.resolution_minutes
    )
    return SLARuleResponse.from_domain(rule)


# ========== Ticket timers ==========

@router.get(
    "/tickets/{ticket_id}",
    response_model=TicketSLAResponse,
    summary="Get ticket SLA status",
    description="""
    Stored SLA timer of a ticket plus a live breach evaluation at request
    time. The live evaluation is not persisted; the monitoring sweep does
    that.
    """,
    responses={404: {"description": "Ticket not found or has no SLA timer"}}
)
async def get_ticket_sla(
    ticket_id: str,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    ticket = await SQLAlchemyTicketRepository(session).get_by_id(ticket_id)
    if ticket is None:
        raise ResourceNotFoundException("Ticket", ticket_id)
    if ticket.sla_timers is None:
        raise ResourceNotFoundException(
            "SLATimer", ticket_id, message=f"Ticket '{ticket_id}' has no SLA timer"
        )

    now = clock()
    current = SLACalculator.check_breach(ticket.sla_timers, now)

    return TicketSLAResponse(
        ticket_id=ticket.id,
        organization_id=ticket.organization_id,
        status=ticket.status,
        priority=ticket.priority,
        evaluated_at=now,
        stored=SLATimerResponse.from_domain(ticket.sla_timers),
        current=SLATimerResponse.from_domain(current),
        first_response_breached=SLACalculator.is_first_response_breached(current, now),
        resolution_breached=SLACalculator.is_resolution_breached(current, now),
    )


# ========== Monitoring ==========

@router.post(
    "/monitor/run",
    response_model=SweepSummaryResponse,
    summary="Run the SLA monitoring sweep now",
    description="""
    Runs one monitoring sweep synchronously, the same job the scheduler
    runs every `SLA_MONITOR_INTERVAL_SECONDS`. Per-ticket failures are
    reported in `errors`; the request itself does not fail.
    """,
    responses={200: {"content": {"application/json": {"example": SWEEP_RESPONSE_EXAMPLE}}}}
)
async def run_monitoring(
    clock: Clock = Depends(get_clock),
    event_bus: Optional[EventBus] = Depends(get_event_bus)
):
    job = SLAMonitoringJob(
        ticket_repository_scope,
        clock=clock,
        event_bus=event_bus,
        max_error_details=settings.sla_monitor_max_error_details,
        timeout_seconds=settings.sla_monitor_timeout_seconds
    )
    summary = await job.execute()
    return SweepSummaryResponse(**summary.to_dict())


sla_router = router
