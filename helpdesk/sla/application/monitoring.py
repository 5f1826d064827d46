"""
SLA Monitoring Sweep
====================

Periodic reconciliation of the ``breached`` flag on every active ticket.

The sweep carries no state between runs: each run re-derives ``breached``
from persisted timer fields plus the current time, so a partially failed run
is repaired by the next one.
"""

import asyncio
import time
import uuid
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from helpdesk.config import ACTIVE_STATUSES
from helpdesk.core import Clock, ResourceNotFoundException, utc_now
from helpdesk.shared.infrastructure.events import EventBus, EventType
from helpdesk.shared.infrastructure.logging import get_logger, log_latency
from helpdesk.sla.domain import SLACalculator
from helpdesk.tickets.domain import ITicketRepository, Ticket

logger = get_logger(__name__)

JOB_NAME = "sla-monitoring"

# Yields a repository bound to one transaction; committed on clean exit
RepositoryScope = Callable[[], AbstractAsyncContextManager[ITicketRepository]]


@dataclass
class SweepSummary:
    """Outcome of one sweep run."""

    run_id: str
    total_tickets: int = 0
    breached_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    duration_ms: int = 0
    failed: bool = False
    timed_out: bool = False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "run_id": self.run_id,
            "total_tickets": self.total_tickets,
            "breached_count": self.breached_count,
            "updated_count": self.updated_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "errors": self.errors,
            "duration_ms": self.duration_ms,
            "failed": self.failed,
            "timed_out": self.timed_out,
        }


class SLAMonitoringJob:
    """
    Evaluates SLA breaches for all active tickets.

    This job:
    1. Fetches every ticket in an active status, across organizations
    2. Re-runs breach detection against the clock
    3. Persists timers whose breached flag changed, one transaction per ticket
    4. Logs newly breached tickets and a run summary

    ``execute`` never raises, so a failed run cannot unschedule later runs.
    """

    def __init__(
        self,
        repository_scope: RepositoryScope,
        clock: Clock = utc_now,
        event_bus: Optional[EventBus] = None,
        max_error_details: int = 10,
        timeout_seconds: Optional[float] = None
    ):
        self._repository_scope = repository_scope
        self._clock = clock
        self._event_bus = event_bus
        self._max_error_details = max_error_details
        self._timeout_seconds = timeout_seconds

    async def execute(self) -> SweepSummary:
        """
        Run one sweep to completion.

        Returns:
            Summary of the run
        """
        summary = SweepSummary(run_id=f"run-{uuid.uuid4().hex[:12]}")
        start_time = time.perf_counter()

        logger.info("Job execution started", extra={"job": JOB_NAME, "run_id": summary.run_id})

        try:
            if self._timeout_seconds:
                await asyncio.wait_for(self._sweep(summary), timeout=self._timeout_seconds)
            else:
                await self._sweep(summary)
        except asyncio.TimeoutError:
            summary.timed_out = True
            logger.error(
                "Job execution timed out",
                extra={
                    "job": JOB_NAME,
                    "run_id": summary.run_id,
                    "timeout_seconds": self._timeout_seconds,
                }
            )
        except Exception as e:
            summary.failed = True
            summary.duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.exception(
                "Job execution failed",
                extra={
                    "job": JOB_NAME,
                    "run_id": summary.run_id,
                    "duration_ms": summary.duration_ms,
                    "error": str(e),
                }
            )
            return summary

        summary.duration_ms = int((time.perf_counter() - start_time) * 1000)
        self._log_summary(summary)
        return summary

    async def _sweep(self, summary: SweepSummary) -> None:
        with log_latency(logger, "sla_sweep_fetch", job=JOB_NAME, run_id=summary.run_id):
            async with self._repository_scope() as repo:
                tickets = await repo.find_all_by_statuses(ACTIVE_STATUSES)

        summary.total_tickets = len(tickets)
        logger.info(
            "Found tickets to check for SLA breaches",
            extra={"job": JOB_NAME, "run_id": summary.run_id, "ticket_count": len(tickets)}
        )

        for ticket in tickets:
            try:
                await self._evaluate_ticket(ticket, summary)
            except Exception as e:
                summary.errors.append({"ticket_id": str(ticket.id), "error": str(e)})
                logger.error(
                    "Error checking SLA for ticket",
                    extra={
                        "job": JOB_NAME,
                        "run_id": summary.run_id,
                        "ticket_id": ticket.id,
                        "organization_id": ticket.organization_id,
                        "error": str(e),
                    }
                )

    async def _evaluate_ticket(self, ticket: Ticket, summary: SweepSummary) -> None:
        """Evaluate a single ticket and persist its timer if the flag flipped."""
        if ticket.sla_timers is None:
            summary.skipped_count += 1
            logger.warning(
                "Ticket has no SLA timers, skipping",
                extra={
                    "job": JOB_NAME,
                    "run_id": summary.run_id,
                    "ticket_id": ticket.id,
                    "organization_id": ticket.organization_id,
                }
            )
            return

        updated_timers = SLACalculator.check_breach(ticket.sla_timers, self._clock())
        if updated_timers.breached == ticket.sla_timers.breached:
            return

        async with self._repository_scope() as repo:
            if await repo.update(ticket.id, {"sla_timers": updated_timers}) is None:
                raise ResourceNotFoundException("Ticket", ticket.id)
        summary.updated_count += 1

        if updated_timers.breached:
            summary.breached_count += 1
            logger.warning(
                "Ticket SLA breached",
                extra={
                    "job": JOB_NAME,
                    "run_id": summary.run_id,
                    "ticket_id": ticket.id,
                    "organization_id": ticket.organization_id,
                    "priority": ticket.priority.value,
                    "subject": ticket.subject,
                }
            )
            if self._event_bus is not None:
                await self._event_bus.publish(EventType.SLA_BREACHED, {
                    "ticket_id": ticket.id,
                    "organization_id": ticket.organization_id,
                    "priority": ticket.priority.value,
                    "sla_timers": updated_timers.to_dict(),
                })

    def _log_summary(self, summary: SweepSummary) -> None:
        logger.info(
            "Job execution completed",
            extra={
                "job": JOB_NAME,
                "run_id": summary.run_id,
                "duration_ms": summary.duration_ms,
                "total_tickets": summary.total_tickets,
                "breached_count": summary.breached_count,
                "updated_count": summary.updated_count,
                "skipped_count": summary.skipped_count,
                "error_count": summary.error_count,
                "timed_out": summary.timed_out,
            }
        )

        if summary.errors:
            logger.warning(
                "Job completed with errors",
                extra={
                    "job": JOB_NAME,
                    "run_id": summary.run_id,
                    "error_count": summary.error_count,
                    "errors": summary.errors[:self._max_error_details],
                }
            )
