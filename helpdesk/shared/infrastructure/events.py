"""
Event Bus
=========

In-process publish/subscribe used to decouple ticket and SLA changes from
their side effects (notifications, audit, alerting).

The bus is an ordinary object created at startup and injected into the
services that publish; it is not a module-level singleton.
"""

from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List

from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[str, Dict[str, Any]], Awaitable[None]]


class EventType:
    """Names of the events published by the application."""
    TICKET_CREATED = "ticket.created"
    TICKET_UPDATED = "ticket.updated"
    COMMENT_ADDED = "comment.added"
    SLA_BREACHED = "sla.breached"


class EventBus:
    """
    Async event bus.

    Handlers run sequentially in subscription order. A failing handler is
    logged and does not stop the remaining handlers or the publisher.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """Remove a previously registered handler (no-op if absent)."""
        if handler in self._handlers.get(event_type, []):
            self._handlers[event_type].remove(handler)

    async def publish(self, event_type: str, payload: Dict[str, Any]) -> int:
        """
        Deliver an event to every subscribed handler.

        Returns:
            Number of handlers that completed without raising
        """
        delivered = 0
        for handler in list(self._handlers.get(event_type, [])):
            try:
                await handler(event_type, payload)
                delivered += 1
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    extra={
                        "event_type": event_type,
                        "handler": getattr(handler, "__name__", repr(handler)),
                        "error": str(e),
                    },
                )
        return delivered
