"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from helpdesk.core.clock import Clock, utc_now, ensure_utc
from helpdesk.core.exceptions import (
    ErrorCode,
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ResourceNotFoundException,
    ConflictException,
    ConfigurationException,
    InvalidStatusTransitionException,
    SLARuleNotFoundException,
)

__all__ = [
    "Clock",
    "utc_now",
    "ensure_utc",
    "ErrorCode",
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ResourceNotFoundException",
    "ConflictException",
    "ConfigurationException",
    "InvalidStatusTransitionException",
    "SLARuleNotFoundException",
]
