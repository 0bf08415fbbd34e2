# Central event handling system, carries generic signals between the gateway,
# the MQTT bridge and the HTTP API
import asyncio
import traceback
from typing import Any, Awaitable, Callable, Dict, List
from ..utils.logging import get_logger

logger = get_logger(__name__)

SIGNAL_OUTBOUND = "signal.outbound"    # bus -> hardware
SIGNAL_BROADCAST = "signal.broadcast"  # hardware/gateway -> bus

Subscriber = Callable[[Dict[str, Any]], Awaitable[None]]


class EventManager:
    def __init__(self):
        # Stores callbacks for each event type
        self.subscribers: Dict[str, List[Subscriber]] = {}
        # Queue for async event processing
        self.event_queue: asyncio.Queue = asyncio.Queue()

    async def publish(self, event_type: str, data: Dict[str, Any]) -> None:
        await self.event_queue.put((event_type, data))

    async def subscribe(self, event_type: str, callback: Subscriber) -> None:
        self.subscribers.setdefault(event_type, []).append(callback)

    async def dispatch(self, event_type: str, data: Dict[str, Any]) -> None:
        """Deliver one event to its subscribers; a failing subscriber does not affect the others"""
        for callback in self.subscribers.get(event_type, []):
            try:
                await callback(data)
            except Exception:
                logger.error(f"Error in subscriber for {event_type}: {traceback.format_exc()}")

    async def process_events(self) -> None:
        while True:
            event_type, data = await self.event_queue.get()
            await self.dispatch(event_type, data)
            self.event_queue.task_done()
