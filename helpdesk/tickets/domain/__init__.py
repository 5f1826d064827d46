"""
Tickets Domain Layer
====================

Contains:
- Entities: Ticket, Comment
- Status state machine
- Repository interfaces
"""

from helpdesk.tickets.domain.entities import Ticket, Comment
from helpdesk.tickets.domain.status import (
    INITIAL_STATUS,
    STATUS_TRANSITIONS,
    is_active,
    is_valid_transition,
)
from helpdesk.tickets.domain.repositories import ITicketRepository, ICommentRepository

__all__ = [
    "Ticket",
    "Comment",
    "INITIAL_STATUS",
    "STATUS_TRANSITIONS",
    "is_active",
    "is_valid_transition",
    "ITicketRepository",
    "ICommentRepository",
]
