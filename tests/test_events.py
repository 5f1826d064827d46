"""
Tests for the in-process event bus.
"""
import pytest

from helpdesk.shared.infrastructure.events import EventBus, EventType

from support import RecordingHandler


@pytest.mark.asyncio
async def test_publish_delivers_to_subscribers_in_order():
    bus = EventBus()
    calls = []

    async def first(event_type, payload):
        calls.append(("first", payload["ticket_id"]))

    async def second(event_type, payload):
        calls.append(("second", payload["ticket_id"]))

    bus.subscribe(EventType.TICKET_CREATED, first)
    bus.subscribe(EventType.TICKET_CREATED, second)

    delivered = await bus.publish(EventType.TICKET_CREATED, {"ticket_id": "t-1"})

    assert delivered == 2
    assert calls == [("first", "t-1"), ("second", "t-1")]


@pytest.mark.asyncio
async def test_failing_handler_does_not_block_others():
    bus = EventBus()
    recorder = RecordingHandler()

    async def broken(event_type, payload):
        raise RuntimeError("smtp down")

    bus.subscribe(EventType.SLA_BREACHED, broken)
    bus.subscribe(EventType.SLA_BREACHED, recorder)

    delivered = await bus.publish(EventType.SLA_BREACHED, {"ticket_id": "t-1"})

    assert delivered == 1
    assert recorder.events == [(EventType.SLA_BREACHED, {"ticket_id": "t-1"})]


@pytest.mark.asyncio
async def test_unsubscribe_and_unknown_events():
    bus = EventBus()
    recorder = RecordingHandler()
    bus.subscribe(EventType.COMMENT_ADDED, recorder)
    bus.unsubscribe(EventType.COMMENT_ADDED, recorder)
    bus.unsubscribe(EventType.TICKET_UPDATED, recorder)

    assert await bus.publish(EventType.COMMENT_ADDED, {}) == 0
    assert recorder.events == []
