"""
Test helpers shared across test modules: a settable clock, an in-memory
ticket repository, and builders for tickets with SLA timers.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from helpdesk.config import TicketPriority, TicketStatus
from helpdesk.infrastructure.database import get_session_context
from helpdesk.sla.domain import SLATimer
from helpdesk.tickets.domain import ITicketRepository, Ticket
from helpdesk.tickets.infrastructure.repositories import SQLAlchemyTicketRepository

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; call it to read the current time."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingHandler:
    """Event handler that keeps every event it receives."""

    def __init__(self):
        self.events: List[tuple] = []

    async def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        self.events.append((event_type, payload))


class InMemoryTicketRepository(ITicketRepository):
    """Dict-backed ticket repository; updates to ``failing_ids`` raise."""

    def __init__(self, tickets: Iterable[Ticket] = (), failing_ids: Iterable[str] = ()):
        self.tickets: Dict[str, Ticket] = {t.id: t for t in tickets}
        self.failing_ids = set(failing_ids)
        self.updates: List[str] = []

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        return self.tickets.get(ticket_id)

    async def create(self, ticket: Ticket) -> Ticket:
        self.tickets[ticket.id] = ticket
        return ticket

    async def update(self, ticket_id: str, fields: Dict[str, Any]) -> Optional[Ticket]:
        self.updates.append(ticket_id)
        if ticket_id in self.failing_ids:
            raise RuntimeError(f"write failed for {ticket_id}")
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return None
        for name, value in fields.items():
            setattr(ticket, name, value)
        return ticket

    async def find_all_by_status(self, status: TicketStatus) -> List[Ticket]:
        return await self.find_all_by_statuses([status])

    async def find_all_by_statuses(self, statuses: Iterable[TicketStatus]) -> List[Ticket]:
        wanted = set(statuses)
        return [t for t in self.tickets.values() if t.status in wanted]

    async def list(self, filters: Dict[str, Any], limit: int = 100, offset: int = 0) -> List[Ticket]:
        return list(self.tickets.values())[offset:offset + limit]


def scope_of(repository):
    """Repository scope that hands out the same repository every time."""
    @asynccontextmanager
    async def scope():
        yield repository
    return scope


def make_ticket(
    ticket_id: Optional[str] = None,
    status: TicketStatus = TicketStatus.OPEN,
    created_at: datetime = T0,
    first_response_minutes: int = 60,
    resolution_minutes: int = 480,
    organization_id: str = "org-1",
    priority: TicketPriority = TicketPriority.HIGH,
    with_timers: bool = True,
    **timer_fields: Any
) -> Ticket:
    timers = None
    if with_timers:
        timers = SLATimer(
            first_response_due=created_at + timedelta(minutes=first_response_minutes),
            resolution_due=created_at + timedelta(minutes=resolution_minutes),
            **timer_fields
        )
    return Ticket(
        id=ticket_id,
        organization_id=organization_id,
        requester_id="customer-1",
        priority=priority,
        subject="Cannot log in",
        description="Login page returns an error since this morning.",
        created_at=created_at,
        updated_at=created_at,
        status=status,
        sla_timers=timers,
    )


async def persist_ticket(ticket: Ticket) -> Ticket:
    """Store a ticket in its own committed transaction."""
    async with get_session_context() as session:
        return await SQLAlchemyTicketRepository(session).create(ticket)


async def load_ticket(ticket_id: str) -> Optional[Ticket]:
    async with get_session_context() as session:
        return await SQLAlchemyTicketRepository(session).get_by_id(ticket_id)
