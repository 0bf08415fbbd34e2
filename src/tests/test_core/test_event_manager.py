import asyncio
import pytest
from unittest.mock import AsyncMock
from rfx_gateway.core.event_manager import EventManager, SIGNAL_BROADCAST


@pytest.mark.asyncio
async def test_events_reach_all_subscribers_in_order():
    event_manager = EventManager()
    received = []

    async def first(data):
        received.append(("first", data["n"]))

    async def second(data):
        received.append(("second", data["n"]))

    await event_manager.subscribe(SIGNAL_BROADCAST, first)
    await event_manager.subscribe(SIGNAL_BROADCAST, second)

    processor = asyncio.create_task(event_manager.process_events())
    await event_manager.publish(SIGNAL_BROADCAST, {"n": 1})
    await event_manager.publish(SIGNAL_BROADCAST, {"n": 2})
    await asyncio.wait_for(event_manager.event_queue.join(), timeout=1)
    processor.cancel()

    assert received == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_affect_others():
    event_manager = EventManager()
    healthy = AsyncMock()
    await event_manager.subscribe(SIGNAL_BROADCAST, AsyncMock(side_effect=RuntimeError("boom")))
    await event_manager.subscribe(SIGNAL_BROADCAST, healthy)

    await event_manager.dispatch(SIGNAL_BROADCAST, {"deviceId": "Lighting2/AC-0x01"})

    healthy.assert_awaited_once_with({"deviceId": "Lighting2/AC-0x01"})
