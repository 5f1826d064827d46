"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA management:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- External: Scheduler and rule seeding
"""

from helpdesk.sla.infrastructure.models import SLARuleModel
from helpdesk.sla.infrastructure.repositories import (
    SQLAlchemySLARuleRepository,
    rule_repository_scope,
)
from helpdesk.sla.infrastructure.external import (
    SLAScheduler,
    SLARuleSeeder,
    SeedResult,
    load_seed_file,
)

__all__ = [
    "SLARuleModel",
    "SQLAlchemySLARuleRepository",
    "rule_repository_scope",
    "SLAScheduler",
    "SLARuleSeeder",
    "SeedResult",
    "load_seed_file",
]
