"""
Ticket Repository Interfaces
============================

Abstractions the ticket services and the SLA monitoring sweep depend on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from helpdesk.config import TicketStatus
from helpdesk.tickets.domain.entities import Comment, Ticket


class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""

    @abstractmethod
    async def create(self, ticket: Ticket) -> Ticket:
        """Create new ticket."""

    @abstractmethod
    async def update(self, ticket_id: str, fields: Dict[str, Any]) -> Optional[Ticket]:
        """
        Apply a partial update.

        ``fields`` maps Ticket attribute names to new values. Returns the
        updated ticket, or None if it does not exist.
        """

    @abstractmethod
    async def find_all_by_status(self, status: TicketStatus) -> List[Ticket]:
        """All tickets with the given status, across organizations."""

    @abstractmethod
    async def find_all_by_statuses(self, statuses: Iterable[TicketStatus]) -> List[Ticket]:
        """All tickets whose status is any of ``statuses``, across organizations."""

    @abstractmethod
    async def list(
        self,
        filters: Dict[str, Any],
        limit: int = 100,
        offset: int = 0
    ) -> List[Ticket]:
        """List tickets with filters."""


class ICommentRepository(ABC):
    """Interface for comment data access."""

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        """Create new comment."""

    @abstractmethod
    async def list_by_ticket(self, ticket_id: str) -> List[Comment]:
        """List a ticket's comments, oldest first."""
