"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Every exception carries a
machine-readable ``code`` and the HTTP ``status_code`` the API layer renders.
"""

from typing import Any, Optional


class ErrorCode:
    """Machine-readable error codes returned by the API."""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class ApplicationException(Exception):
    """Base exception for all application errors."""

    code: str = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(DomainException):
    """Exception for validation errors."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None,
        message: Optional[str] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if message is None:
            message = f"{resource_type}"
            if resource_id:
                message += f" with id '{resource_id}'"
            message += " not found"
        super().__init__(message, details)


class ConflictException(DomainException):
    """Exception when a write would violate a uniqueness rule."""

    code = ErrorCode.CONFLICT
    status_code = 409


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class InvalidStatusTransitionException(ValidationException):
    """Exception raised when a ticket status change is not allowed."""

    def __init__(self, from_status: Any, to_status: Any):
        self.from_status = from_status
        self.to_status = to_status
        from_value = getattr(from_status, "value", from_status)
        to_value = getattr(to_status, "value", to_status)
        super().__init__(
            f"Invalid status transition from '{from_value}' to '{to_value}'",
            {"from": from_value, "to": to_value}
        )


class SLARuleNotFoundException(ResourceNotFoundException):
    """Exception raised when an organization has no SLA rule for a priority."""

    def __init__(self, organization_id: str, priority: Any):
        self.organization_id = organization_id
        self.priority = getattr(priority, "value", priority)
        super().__init__(
            "SLARule",
            details={"organization_id": organization_id, "priority": self.priority},
            message=(
                f"No SLA rule configured for organization '{organization_id}' "
                f"and priority '{self.priority}'"
            )
        )
