"""
SLA Domain Layer
================

Domain layer for SLA management.

Contains:
- Entities: SLARule, SLATimer
- Value Objects: SLACalculator (timer calculation and breach detection)
- Repository interfaces

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from helpdesk.sla.domain.entities import (
    SLARule,
    SLATimer,
    validate_minutes,
    validate_priority,
)
from helpdesk.sla.domain.value_objects import SLACalculator
from helpdesk.sla.domain.repositories import ISLARuleRepository

__all__ = [
    "SLARule",
    "SLATimer",
    "validate_minutes",
    "validate_priority",
    "SLACalculator",
    "ISLARuleRepository",
]
