"""
SLA Infrastructure Models
==========================

SQLAlchemy ORM models for the SLA module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.infrastructure.database import Base, UTCDateTime


class SLARuleModel(Base):
    """
    Database model for SLARule entity.

    Maps to the 'sla_rules' table.
    """
    __tablename__ = "sla_rules"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Rule key
    organization_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    priority: Mapped[str] = mapped_column(String(50), nullable=False)

    # Durations
    first_response_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    resolution_minutes: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "priority", name="uq_sla_rules_org_priority"),
        CheckConstraint("first_response_minutes > 0", name="ck_sla_rules_first_response_positive"),
        CheckConstraint("resolution_minutes > 0", name="ck_sla_rules_resolution_positive"),
    )
