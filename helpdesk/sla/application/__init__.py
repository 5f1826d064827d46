"""
SLA Application Layer
======================

Application layer for SLA management.

Contains:
- Services: rule resolution/management and timer calculation
- Monitoring: the periodic breach sweep
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from helpdesk.sla.application.dto import (
    SLARuleCreateRequest,
    SLARuleUpdateRequest,
    SLARuleResponse,
    SLATimerResponse,
    TicketSLAResponse,
    SweepSummaryResponse,
)
from helpdesk.sla.application.services import SLARuleService, SLATimerService
from helpdesk.sla.application.monitoring import (
    SLAMonitoringJob,
    SweepSummary,
    RepositoryScope,
)

__all__ = [
    # DTOs
    "SLARuleCreateRequest",
    "SLARuleUpdateRequest",
    "SLARuleResponse",
    "SLATimerResponse",
    "TicketSLAResponse",
    "SweepSummaryResponse",
    # Services
    "SLARuleService",
    "SLATimerService",
    "SLAMonitoringJob",
    "SweepSummary",
    "RepositoryScope",
]
