"""
Tickets Infrastructure Repositories
====================================

Concrete implementations of the ticket and comment repositories using
SQLAlchemy.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TicketPriority, TicketStatus, UserRole
from helpdesk.core import RepositoryException
from helpdesk.infrastructure.database import get_session_context
from helpdesk.sla.domain import SLATimer
from helpdesk.tickets.domain import Comment, ICommentRepository, ITicketRepository, Ticket
from helpdesk.tickets.infrastructure.models import CommentModel, TicketModel

# Ticket attributes that map one-to-one onto a column
_PLAIN_FIELDS = {"assignee_id", "subject", "description", "tags", "updated_at"}
_ENUM_FIELDS = {"status", "priority"}


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _timer_from_model(model: TicketModel) -> Optional[SLATimer]:
    if model.sla_first_response_due is None or model.sla_resolution_due is None:
        return None
    return SLATimer(
        first_response_due=model.sla_first_response_due,
        resolution_due=model.sla_resolution_due,
        first_response_at=model.sla_first_response_at,
        resolved_at=model.sla_resolved_at,
        breached=model.sla_breached,
    )


def _apply_timer(model: TicketModel, timer: Optional[SLATimer]) -> None:
    if timer is None:
        model.sla_first_response_due = None
        model.sla_resolution_due = None
        model.sla_first_response_at = None
        model.sla_resolved_at = None
        model.sla_breached = False
        return
    model.sla_first_response_due = timer.first_response_due
    model.sla_resolution_due = timer.resolution_due
    model.sla_first_response_at = timer.first_response_at
    model.sla_resolved_at = timer.resolved_at
    model.sla_breached = timer.breached


def _ticket_to_domain(model: TicketModel) -> Ticket:
    return Ticket(
        id=str(model.id),
        organization_id=model.organization_id,
        requester_id=model.requester_id,
        priority=TicketPriority(model.priority),
        subject=model.subject,
        description=model.description,
        created_at=model.created_at,
        updated_at=model.updated_at,
        status=TicketStatus(model.status),
        assignee_id=model.assignee_id,
        tags=list(model.tags or []),
        sla_timers=_timer_from_model(model),
    )


def _comment_to_domain(model: CommentModel) -> Comment:
    return Comment(
        id=str(model.id),
        ticket_id=str(model.ticket_id),
        author_id=model.author_id,
        author_role=UserRole(model.author_role),
        body=model.body,
        is_public=model.is_public,
        created_at=model.created_at,
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, ticket_id: str) -> Optional[TicketModel]:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None

        stmt = select(TicketModel).where(TicketModel.id == ticket_uuid)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""
        model = await self._get_model(ticket_id)
        return _ticket_to_domain(model) if model else None

    async def create(self, ticket: Ticket) -> Ticket:
        """Create new ticket."""
        model = TicketModel(
            id=uuid4(),
            organization_id=ticket.organization_id,
            requester_id=ticket.requester_id,
            assignee_id=ticket.assignee_id,
            status=TicketStatus(ticket.status).value,
            priority=TicketPriority(ticket.priority).value,
            subject=ticket.subject,
            description=ticket.description,
            tags=list(ticket.tags),
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )
        _apply_timer(model, ticket.sla_timers)

        self._session.add(model)
        await self._session.flush()

        return _ticket_to_domain(model)

    async def update(self, ticket_id: str, fields: Dict[str, Any]) -> Optional[Ticket]:
        """
        Apply a partial update.

        Raises:
            RepositoryException: If ``fields`` names an attribute that cannot be updated
        """
        unknown = set(fields) - _PLAIN_FIELDS - _ENUM_FIELDS - {"sla_timers"}
        if unknown:
            raise RepositoryException(
                "Unsupported ticket fields in update",
                {"fields": sorted(unknown)}
            )

        model = await self._get_model(ticket_id)
        if not model:
            return None

        for name, value in fields.items():
            if name == "sla_timers":
                _apply_timer(model, value)
            elif name in _ENUM_FIELDS:
                setattr(model, name, getattr(value, "value", value))
            elif name == "tags":
                model.tags = list(value)
            else:
                setattr(model, name, value)

        await self._session.flush()

        return _ticket_to_domain(model)

    async def find_all_by_status(self, status: TicketStatus) -> List[Ticket]:
        """All tickets with the given status, across organizations."""
        return await self.find_all_by_statuses([status])

    async def find_all_by_statuses(self, statuses: Iterable[TicketStatus]) -> List[Ticket]:
        """All tickets whose status is any of ``statuses``, oldest first."""
        values = [TicketStatus(s).value for s in statuses]
        if not values:
            return []

        stmt = (
            select(TicketModel)
            .where(TicketModel.status.in_(values))
            .order_by(TicketModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [_ticket_to_domain(model) for model in result.scalars().all()]

    async def list(
        self,
        filters: Dict[str, Any],
        limit: int = 100,
        offset: int = 0
    ) -> List[Ticket]:
        """List tickets with filters, newest first."""
        stmt = select(TicketModel)

        # Apply filters
        conditions = []
        if filters.get("organization_id"):
            conditions.append(TicketModel.organization_id == filters["organization_id"])

        if filters.get("status"):
            status_filter = filters["status"]
            if isinstance(status_filter, (list, tuple, set)):
                conditions.append(
                    TicketModel.status.in_([TicketStatus(s).value for s in status_filter])
                )
            else:
                conditions.append(TicketModel.status == TicketStatus(status_filter).value)

        if filters.get("priority"):
            conditions.append(TicketModel.priority == TicketPriority(filters["priority"]).value)

        if filters.get("assignee_id"):
            conditions.append(TicketModel.assignee_id == filters["assignee_id"])

        if filters.get("requester_id"):
            conditions.append(TicketModel.requester_id == filters["requester_id"])

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(TicketModel.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return [_ticket_to_domain(model) for model in result.scalars().all()]


class SQLAlchemyCommentRepository(ICommentRepository):
    """SQLAlchemy implementation of comment repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, comment: Comment) -> Comment:
        """Create new comment."""
        ticket_uuid = _parse_uuid(comment.ticket_id)
        if ticket_uuid is None:
            raise RepositoryException(
                "Invalid ticket id for comment", {"ticket_id": comment.ticket_id}
            )

        model = CommentModel(
            id=uuid4(),
            ticket_id=ticket_uuid,
            author_id=comment.author_id,
            author_role=UserRole(comment.author_role).value,
            body=comment.body,
            is_public=comment.is_public,
            created_at=comment.created_at,
        )

        self._session.add(model)
        await self._session.flush()

        return _comment_to_domain(model)

    async def list_by_ticket(self, ticket_id: str) -> List[Comment]:
        """List a ticket's comments, oldest first."""
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return []

        stmt = (
            select(CommentModel)
            .where(CommentModel.ticket_id == ticket_uuid)
            .order_by(CommentModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [_comment_to_domain(model) for model in result.scalars().all()]


@asynccontextmanager
async def ticket_repository_scope() -> AsyncIterator[SQLAlchemyTicketRepository]:
    """Repository on a fresh session, committed when the block exits cleanly."""
    async with get_session_context() as session:
        yield SQLAlchemyTicketRepository(session)
