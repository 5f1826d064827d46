"""
Tickets Application Services
=============================

Use cases for the ticket lifecycle: opening tickets with SLA timers,
status changes and assignment, and the conversation thread.

Publishes ticket events on the injected EventBus once the change is
persisted.
"""

from typing import Any, Dict, List, Optional

from helpdesk.config import TicketPriority, TicketStatus, UserRole
from helpdesk.core import Clock, ResourceNotFoundException, ValidationException, utc_now
from helpdesk.shared.infrastructure.events import EventBus, EventType
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.sla.application.services import SLATimerService
from helpdesk.tickets.domain import (
    INITIAL_STATUS,
    Comment,
    ICommentRepository,
    ITicketRepository,
    Ticket,
)

logger = get_logger(__name__)

SUBJECT_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
COMMENT_MAX_LENGTH = 10000


def _validate_text(field_name: str, value: Any, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{field_name} is required", {"field": field_name})
    if len(value) > max_length:
        raise ValidationException(
            f"{field_name} must be at most {max_length} characters",
            {"field": field_name, "max_length": max_length}
        )
    return value


class TicketService:
    """
    Service for ticket use cases.

    SLA timers are computed before anything is written, so a ticket whose
    organization has no rule for its priority is never persisted.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        comment_repository: ICommentRepository,
        timer_service: SLATimerService,
        clock: Clock = utc_now,
        event_bus: Optional[EventBus] = None
    ):
        self._ticket_repo = ticket_repository
        self._comment_repo = comment_repository
        self._timer_service = timer_service
        self._clock = clock
        self._event_bus = event_bus

    async def _publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(event_type, payload)

    async def create_ticket(
        self,
        organization_id: str,
        requester_id: str,
        subject: str,
        description: str,
        priority: Any = TicketPriority.MEDIUM,
        tags: Optional[List[str]] = None
    ) -> Ticket:
        """
        Open a new ticket in status NEW with SLA timers attached.

        Raises:
            ValidationException: On missing or oversized fields
            SLARuleNotFoundException: If the organization has no rule for the priority
        """
        if not organization_id:
            raise ValidationException("organization_id is required", {"field": "organization_id"})
        if not requester_id:
            raise ValidationException("requester_id is required", {"field": "requester_id"})
        _validate_text("subject", subject, SUBJECT_MAX_LENGTH)
        _validate_text("description", description, DESCRIPTION_MAX_LENGTH)

        created_at = self._clock()
        sla_timers = await self._timer_service.calculate_timers(
            organization_id, priority, created_at
        )

        ticket = await self._ticket_repo.create(Ticket(
            id=None,
            organization_id=organization_id,
            requester_id=requester_id,
            priority=TicketPriority(priority),
            subject=subject,
            description=description,
            created_at=created_at,
            updated_at=created_at,
            status=INITIAL_STATUS,
            tags=list(tags or []),
            sla_timers=sla_timers,
        ))

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.id,
                "organization_id": organization_id,
                "priority": ticket.priority.value,
                "first_response_due": sla_timers.first_response_due.isoformat(),
                "resolution_due": sla_timers.resolution_due.isoformat(),
            }
        )
        await self._publish(EventType.TICKET_CREATED, {
            "ticket_id": ticket.id,
            "organization_id": organization_id,
            "priority": ticket.priority.value,
            "requester_id": requester_id,
        })
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket:
        """
        Raises:
            ResourceNotFoundException: If the ticket does not exist
        """
        ticket = await self._ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def list_tickets(
        self,
        organization_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Ticket]:
        filters: Dict[str, Any] = {}
        if organization_id:
            filters["organization_id"] = organization_id
        if status:
            filters["status"] = status
        if priority:
            filters["priority"] = priority
        return await self._ticket_repo.list(filters, limit=limit, offset=offset)

    async def update_ticket(
        self,
        ticket_id: str,
        status: Optional[TicketStatus] = None,
        assignee_id: Optional[str] = None,
        subject: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> Ticket:
        """
        Apply a partial update.

        An explicit status is applied before the assignment, so it takes
        precedence over the NEW to OPEN move on first assignment.

        Raises:
            ResourceNotFoundException: If the ticket does not exist
            InvalidStatusTransitionException: If the status change is not allowed
        """
        ticket = await self.get_ticket(ticket_id)
        now = self._clock()
        previous_status = ticket.status
        previous_timers = ticket.sla_timers
        fields: Dict[str, Any] = {}

        if status is not None:
            ticket.transition_to(TicketStatus(status), now)

        if assignee_id is not None and assignee_id != ticket.assignee_id:
            ticket.assign(assignee_id, now)
            fields["assignee_id"] = assignee_id

        if subject is not None:
            ticket.subject = _validate_text("subject", subject, SUBJECT_MAX_LENGTH)
            fields["subject"] = subject

        if description is not None:
            ticket.description = _validate_text("description", description, DESCRIPTION_MAX_LENGTH)
            fields["description"] = description

        if tags is not None:
            ticket.tags = list(tags)
            fields["tags"] = ticket.tags

        if ticket.status != previous_status:
            fields["status"] = ticket.status
        if ticket.sla_timers != previous_timers:
            fields["sla_timers"] = ticket.sla_timers

        if not fields:
            return ticket

        ticket.updated_at = now
        fields["updated_at"] = now
        updated = await self._ticket_repo.update(ticket.id, fields)
        if updated is None:
            raise ResourceNotFoundException("Ticket", ticket_id)

        logger.info(
            "Ticket updated",
            extra={
                "ticket_id": updated.id,
                "organization_id": updated.organization_id,
                "fields": sorted(fields),
                "from_status": previous_status.value,
                "to_status": updated.status.value,
            }
        )
        await self._publish(EventType.TICKET_UPDATED, {
            "ticket_id": updated.id,
            "organization_id": updated.organization_id,
            "changes": sorted(f for f in fields if f != "updated_at"),
            "from_status": previous_status.value,
            "to_status": updated.status.value,
        })
        return updated

    async def add_comment(
        self,
        ticket_id: str,
        author_id: str,
        author_role: Any,
        body: str,
        is_public: Optional[bool] = None
    ) -> Comment:
        """
        Post a comment on a ticket.

        The first public reply from an agent or admin stamps the ticket's
        first response and re-evaluates its breach flag.

        Raises:
            ResourceNotFoundException: If the ticket does not exist
            ValidationException: On an empty or oversized body
        """
        if not author_id:
            raise ValidationException("author_id is required", {"field": "author_id"})
        _validate_text("body", body, COMMENT_MAX_LENGTH)
        try:
            role = UserRole(author_role)
        except ValueError:
            raise ValidationException(
                f"Invalid author role: {author_role}", {"field": "author_role"}
            ) from None

        ticket = await self.get_ticket(ticket_id)

        if role == UserRole.CUSTOMER:
            is_public = True
        elif is_public is None:
            is_public = False

        comment = await self._comment_repo.create(Comment(
            id=None,
            ticket_id=ticket.id,
            author_id=author_id,
            author_role=role,
            body=body,
            is_public=is_public,
            created_at=self._clock(),
        ))

        if comment.counts_as_first_response and ticket.record_first_response(comment.created_at):
            await self._ticket_repo.update(ticket.id, {"sla_timers": ticket.sla_timers})
            logger.info(
                "First response recorded",
                extra={
                    "ticket_id": ticket.id,
                    "organization_id": ticket.organization_id,
                    "first_response_at": comment.created_at.isoformat(),
                    "breached": ticket.sla_timers.breached,
                }
            )

        await self._publish(EventType.COMMENT_ADDED, {
            "comment_id": comment.id,
            "ticket_id": ticket.id,
            "organization_id": ticket.organization_id,
            "author_id": author_id,
            "author_role": role.value,
            "is_public": comment.is_public,
        })
        return comment

    async def list_comments(self, ticket_id: str) -> List[Comment]:
        """
        Raises:
            ResourceNotFoundException: If the ticket does not exist
        """
        ticket = await self.get_ticket(ticket_id)
        return await self._comment_repo.list_by_ticket(ticket.id)
