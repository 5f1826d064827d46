"""
SLA Repository Interfaces
==========================

Abstractions the SLA services depend on (Dependency Inversion).
Concrete implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from helpdesk.config import TicketPriority
from helpdesk.sla.domain.entities import SLARule


class ISLARuleRepository(ABC):
    """Interface for SLA rule data access."""

    @abstractmethod
    async def find_by_org_and_priority(
        self,
        organization_id: str,
        priority: TicketPriority
    ) -> Optional[SLARule]:
        """Get the single rule for an organization and priority."""

    @abstractmethod
    async def get_by_id(self, rule_id: str) -> Optional[SLARule]:
        """Get rule by ID."""

    @abstractmethod
    async def create(self, rule: SLARule) -> SLARule:
        """Create new rule. Raises ConflictException on a duplicate pair."""

    @abstractmethod
    async def update(
        self,
        rule_id: str,
        first_response_minutes: int,
        resolution_minutes: int,
        updated_at: datetime
    ) -> Optional[SLARule]:
        """Update rule durations."""

    @abstractmethod
    async def list_by_organization(self, organization_id: str) -> List[SLARule]:
        """List all rules of an organization."""
