"""
Shared API Dependencies
========================

FastAPI dependencies used by more than one module's controllers.
"""

from typing import Optional

from fastapi import Request

from helpdesk.core import Clock, utc_now
from helpdesk.shared.infrastructure.events import EventBus


def get_clock() -> Clock:
    """Time source for request handlers; overridden in tests."""
    return utc_now


def get_event_bus(request: Request) -> Optional[EventBus]:
    """Application-wide event bus created at startup."""
    return getattr(request.app.state, "event_bus", None)
