"""
SLA Infrastructure Repositories
=================================

Concrete implementations of repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import TicketPriority
from helpdesk.core import ConflictException
from helpdesk.infrastructure.database import get_session_context
from helpdesk.sla.domain import ISLARuleRepository, SLARule
from helpdesk.sla.infrastructure.models import SLARuleModel


def _to_domain(model: SLARuleModel) -> SLARule:
    return SLARule(
        id=str(model.id),
        organization_id=model.organization_id,
        priority=TicketPriority(model.priority),
        first_response_minutes=model.first_response_minutes,
        resolution_minutes=model.resolution_minutes,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemySLARuleRepository(ISLARuleRepository):
    """
    SQLAlchemy implementation of SLA rule repository.

    The (organization_id, priority) unique constraint backs up the service
    level duplicate check against concurrent writers.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, rule_id: str) -> Optional[SLARuleModel]:
        try:
            rule_uuid = UUID(rule_id)
        except ValueError:
            return None

        stmt = select(SLARuleModel).where(SLARuleModel.id == rule_uuid)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_org_and_priority(
        self,
        organization_id: str,
        priority: TicketPriority
    ) -> Optional[SLARule]:
        """Get the single rule for an organization and priority."""
        stmt = select(SLARuleModel).where(
            SLARuleModel.organization_id == organization_id,
            SLARuleModel.priority == TicketPriority(priority).value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model else None

    async def get_by_id(self, rule_id: str) -> Optional[SLARule]:
        """Get rule by ID."""
        model = await self._get_model(rule_id)
        return _to_domain(model) if model else None

    async def create(self, rule: SLARule) -> SLARule:
        """Create new rule."""
        model = SLARuleModel(
            id=uuid4(),
            organization_id=rule.organization_id,
            priority=rule.priority.value,
            first_response_minutes=rule.first_response_minutes,
            resolution_minutes=rule.resolution_minutes,
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ConflictException(
                f"SLA rule already exists for organization '{rule.organization_id}' "
                f"and priority '{rule.priority.value}'",
                {"organization_id": rule.organization_id, "priority": rule.priority.value}
            ) from e

        return _to_domain(model)

    async def update(
        self,
        rule_id: str,
        first_response_minutes: int,
        resolution_minutes: int,
        updated_at: datetime
    ) -> Optional[SLARule]:
        """Update rule durations."""
        model = await self._get_model(rule_id)
        if not model:
            return None

        model.first_response_minutes = first_response_minutes
        model.resolution_minutes = resolution_minutes
        model.updated_at = updated_at
        await self._session.flush()

        return _to_domain(model)

    async def list_by_organization(self, organization_id: str) -> List[SLARule]:
        """List all rules of an organization."""
        stmt = select(SLARuleModel).where(SLARuleModel.organization_id == organization_id)
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]


@asynccontextmanager
async def rule_repository_scope() -> AsyncIterator[SQLAlchemySLARuleRepository]:
    """Repository on a fresh session, committed when the block exits cleanly."""
    async with get_session_context() as session:
        yield SQLAlchemySLARuleRepository(session)
