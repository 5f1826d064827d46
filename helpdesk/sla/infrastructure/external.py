"""
SLA External Service Integrations
==================================

Services around the SLA core that talk to the outside world:
- APScheduler for the periodic monitoring sweep
- YAML seed file for bootstrapping organization rules
"""

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import BaseModel, Field, StrictInt, ValidationError

from helpdesk.config import TicketPriority
from helpdesk.core import Clock, ConfigurationException, utc_now
from helpdesk.shared.infrastructure.logging import get_logger
from helpdesk.sla.application.services import SLARuleService
from helpdesk.sla.domain import ISLARuleRepository

logger = get_logger(__name__)

MONITORING_JOB_ID = "sla_monitoring"

# Yields a rule repository bound to one transaction
RuleRepositoryScope = Callable[[], AbstractAsyncContextManager[ISLARuleRepository]]


class SLAScheduler:
    """
    Wrapper for APScheduler running the SLA monitoring sweep.

    A single job instance at a time; runs that pile up behind a slow
    sweep are coalesced into one.
    """

    def __init__(self, interval_seconds: int = 300, misfire_grace_time: int = 60):
        self.interval_seconds = interval_seconds
        self.misfire_grace_time = misfire_grace_time
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    async def start(self, job_func: Callable[[], Awaitable[object]]) -> None:
        """Start the scheduler with the given job function."""
        if not self.enabled:
            logger.info("SLA scheduler disabled", extra={"interval_seconds": self.interval_seconds})
            return

        if self._running:
            logger.warning("SLA scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()

        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id=MONITORING_JOB_ID,
            name="SLA Monitoring Job",
            misfire_grace_time=self.misfire_grace_time,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "SLA scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the scheduler, waiting for a running sweep to finish."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=True)

        self._scheduler = None
        self._running = False
        logger.info("SLA scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running


# ========== Rule seeding ==========

class SeedRuleEntry(BaseModel):
    """Durations of one rule in the seed file."""
    first_response_minutes: StrictInt = Field(..., description="Minutes allowed until first response")
    resolution_minutes: StrictInt = Field(..., description="Minutes allowed until resolution")


class SeedFile(BaseModel):
    """
    Layout of the seed file::

        organizations:
          acme:
            urgent: {first_response_minutes: 30, resolution_minutes: 240}
            low: {first_response_minutes: 480, resolution_minutes: 2880}
    """
    organizations: Dict[str, Dict[TicketPriority, SeedRuleEntry]] = Field(default_factory=dict)


@dataclass
class SeedResult:
    """Counts from one seeding pass."""
    created: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)


def load_seed_file(path: Path) -> SeedFile:
    """
    Read and validate a seed file.

    Raises:
        ConfigurationException: If the file is missing or malformed
    """
    if not path.exists():
        raise ConfigurationException(
            f"SLA rules seed file not found: {path}", {"path": str(path)}
        )

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return SeedFile.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationException(
            f"Invalid SLA rules seed file: {path}", {"path": str(path), "error": str(e)}
        ) from e


class SLARuleSeeder:
    """
    Creates the rules listed in a seed file.

    Rules that already exist are left untouched, so seeding on every
    startup is safe and never overrides changes made through the API.
    """

    def __init__(self, repository_scope: RuleRepositoryScope, clock: Clock = utc_now):
        self._repository_scope = repository_scope
        self._clock = clock

    async def seed(self, path: Path) -> SeedResult:
        seed = load_seed_file(path)
        result = SeedResult()

        for organization_id, rules in seed.organizations.items():
            for priority, entry in rules.items():
                try:
                    async with self._repository_scope() as repo:
                        service = SLARuleService(repo, self._clock)
                        if await service.resolve(organization_id, priority) is not None:
                            result.skipped += 1
                            continue
                        await service.create_rule(
                            organization_id,
                            priority,
                            entry.first_response_minutes,
                            entry.resolution_minutes
                        )
                        result.created += 1
                except Exception as e:
                    result.errors.append(f"{organization_id}/{priority.value}: {e}")
                    logger.error(
                        "Failed to seed SLA rule",
                        extra={
                            "organization_id": organization_id,
                            "priority": priority.value,
                            "error": str(e),
                        }
                    )

        logger.info(
            "SLA rules seeded",
            extra={
                "path": str(path),
                "rules_created": result.created,
                "rules_skipped": result.skipped,
                "rules_failed": len(result.errors),
            }
        )
        return result
