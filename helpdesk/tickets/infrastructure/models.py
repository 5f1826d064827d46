"""
Tickets Infrastructure Models
==============================

SQLAlchemy ORM models for the tickets module.

The SLA timer is stored inline on the ticket row; a ticket created without
timers has NULL in all ``sla_*`` due columns.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.config import TicketPriority, TicketStatus
from helpdesk.infrastructure.database import Base, UTCDateTime


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table.
    """
    __tablename__ = "tickets"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Ownership
    organization_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    requester_id: Mapped[str] = mapped_column(String(255), nullable=False)
    assignee_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=TicketStatus.NEW.value, index=True)
    priority: Mapped[str] = mapped_column(String(50), nullable=False, default=TicketPriority.MEDIUM.value)

    # Ticket content
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # SLA timer
    sla_first_response_due: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    sla_resolution_due: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    sla_first_response_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    sla_resolved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    sla_breached: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class CommentModel(Base):
    """
    Database model for Comment entity.

    Maps to the 'ticket_comments' table.
    """
    __tablename__ = "ticket_comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    ticket_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    author_id: Mapped[str] = mapped_column(String(255), nullable=False)
    author_role: Mapped[str] = mapped_column(String(50), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
