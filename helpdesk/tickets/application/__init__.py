"""
Tickets Application Layer
==========================

Contains:
- Services: ticket and comment use cases
- DTOs: Data transfer objects for API serialization
"""

from helpdesk.tickets.application.dto import (
    TicketCreateRequest,
    TicketUpdateRequest,
    CommentCreateRequest,
    TicketResponse,
    CommentResponse,
)
from helpdesk.tickets.application.services import TicketService

__all__ = [
    "TicketCreateRequest",
    "TicketUpdateRequest",
    "CommentCreateRequest",
    "TicketResponse",
    "CommentResponse",
    "TicketService",
]
