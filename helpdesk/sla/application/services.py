"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from datetime import datetime
from typing import Any, List, Optional

from helpdesk.config import TicketPriority, VALID_PRIORITIES
from helpdesk.core import (
    Clock,
    ConflictException,
    ResourceNotFoundException,
    SLARuleNotFoundException,
    ValidationException,
    utc_now,
)
from helpdesk.sla.domain import (
    ISLARuleRepository,
    SLACalculator,
    SLARule,
    SLATimer,
    validate_minutes,
    validate_priority,
)
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SLARuleService:
    """
    Service for resolving and managing SLA rules.

    Enforces one rule per (organization, priority) and positive whole-minute
    durations on every write.
    """

    def __init__(self, rule_repository: ISLARuleRepository, clock: Clock = utc_now):
        self._rule_repo = rule_repository
        self._clock = clock

    @staticmethod
    def _validate_key(organization_id: str, priority: Any) -> TicketPriority:
        if not organization_id:
            raise ValidationException(
                "organization_id is required", {"field": "organization_id"}
            )
        if priority is None or priority == "":
            raise ValidationException("priority is required", {"field": "priority"})
        return validate_priority(priority)

    async def resolve(self, organization_id: str, priority: Any) -> Optional[SLARule]:
        """
        Find the rule for an organization and priority.

        Returns:
            The unique matching rule, or None if the organization has none
        """
        priority = self._validate_key(organization_id, priority)
        return await self._rule_repo.find_by_org_and_priority(organization_id, priority)

    async def require(self, organization_id: str, priority: Any) -> SLARule:
        """
        Like ``resolve`` but a missing rule is an error.

        Raises:
            SLARuleNotFoundException: If no rule is configured
        """
        rule = await self.resolve(organization_id, priority)
        if rule is None:
            raise SLARuleNotFoundException(organization_id, priority)
        return rule

    async def list_rules(self, organization_id: str) -> List[SLARule]:
        """List an organization's rules ordered by priority."""
        if not organization_id:
            raise ValidationException(
                "organization_id is required", {"field": "organization_id"}
            )
        rules = await self._rule_repo.list_by_organization(organization_id)
        return sorted(rules, key=lambda r: VALID_PRIORITIES.index(r.priority))

    async def create_rule(
        self,
        organization_id: str,
        priority: Any,
        first_response_minutes: Any,
        resolution_minutes: Any
    ) -> SLARule:
        """
        Create a rule.

        Raises:
            ValidationException: On a bad priority or non-positive minutes
            ConflictException: If the organization already has a rule for the priority
        """
        priority = self._validate_key(organization_id, priority)
        validate_minutes("first_response_minutes", first_response_minutes)
        validate_minutes("resolution_minutes", resolution_minutes)

        existing = await self._rule_repo.find_by_org_and_priority(organization_id, priority)
        if existing is not None:
            raise ConflictException(
                f"SLA rule already exists for organization '{organization_id}' "
                f"and priority '{priority.value}'",
                {
                    "organization_id": organization_id,
                    "priority": priority.value,
                    "sla_rule_id": existing.id,
                }
            )

        now = self._clock()
        rule = await self._rule_repo.create(SLARule(
            id=None,
            organization_id=organization_id,
            priority=priority,
            first_response_minutes=first_response_minutes,
            resolution_minutes=resolution_minutes,
            created_at=now,
            updated_at=now,
        ))

        logger.info(
            "SLA rule created",
            extra={
                "organization_id": organization_id,
                "priority": priority.value,
                "sla_rule_id": rule.id,
            }
        )
        return rule

    async def update_rule(
        self,
        organization_id: str,
        priority: Any,
        first_response_minutes: Any,
        resolution_minutes: Any
    ) -> SLARule:
        """
        Change the durations of an existing rule.

        Only tickets created afterwards are affected; existing timers keep
        the due dates computed at their creation.

        Raises:
            ValidationException: On a bad priority or non-positive minutes
            ResourceNotFoundException: If there is no rule to update
        """
        priority = self._validate_key(organization_id, priority)
        validate_minutes("first_response_minutes", first_response_minutes)
        validate_minutes("resolution_minutes", resolution_minutes)

        existing = await self._rule_repo.find_by_org_and_priority(organization_id, priority)
        if existing is None:
            raise SLARuleNotFoundException(organization_id, priority)

        rule = await self._rule_repo.update(
            existing.id, first_response_minutes, resolution_minutes, self._clock()
        )
        if rule is None:
            raise ResourceNotFoundException("SLARule", existing.id)

        logger.info(
            "SLA rule updated",
            extra={
                "organization_id": organization_id,
                "priority": priority.value,
                "sla_rule_id": rule.id,
            }
        )
        return rule


class SLATimerService:
    """
    Service for computing and evaluating ticket SLA timers.

    Coordinates rule lookup with the pure SLACalculator.
    """

    def __init__(self, rule_service: SLARuleService, clock: Clock = utc_now):
        self._rule_service = rule_service
        self._clock = clock

    async def calculate_timers(
        self,
        organization_id: str,
        priority: Any,
        created_at: datetime
    ) -> SLATimer:
        """
        Calculate the timers for a ticket being created.

        Must be given the ticket's own ``created_at``.

        Raises:
            SLARuleNotFoundException: If the organization has no rule for the priority
        """
        rule = await self._rule_service.require(organization_id, priority)
        return SLACalculator.calculate_timers(rule, created_at)

    def check_breach(self, timer: SLATimer, now: Optional[datetime] = None) -> SLATimer:
        """Re-evaluate a timer at ``now`` (the injected clock by default)."""
        return SLACalculator.check_breach(timer, now or self._clock())
