# adapters/loopback.py
import asyncio
import traceback
from typing import Any, Dict, List, Optional, Sequence
from .base import EventHandler, ProtocolFlag, TransceiverDriver
from ..utils.exceptions import TransceiverError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class LoopbackTransceiver(TransceiverDriver):
    """
    In-process transceiver without radio hardware.
    Answers the handshake with a status event, acknowledges every command and
    lets callers inject received events with ``emit``. Used for development
    and tests.
    """
    def __init__(self, port: str = "loopback", debug: bool = False,
                 enabled_protocols: Optional[Sequence[str]] = None):
        super().__init__(port, debug)
        self.enabled_protocols: List[str] = list(enabled_protocols or [])
        self.listeners: Dict[str, List[EventHandler]] = {}
        self.sent_commands: List[Dict[str, Any]] = []
        self.enabled_flags: List[List[ProtocolFlag]] = []
        self.is_connected = False

    async def initialise(self) -> None:
        self.is_connected = True
        logger.info(f"Loopback transceiver ready on {self.port}")
        await self.emit("status", {
            "subtype": 0,
            "receiverType": "433.92MHz",
            "firmwareVersion": 0,
            "enabledProtocols": list(self.enabled_protocols),
        })

    def on(self, event_name: str, handler: EventHandler) -> None:
        self.listeners.setdefault(event_name, []).append(handler)

    async def emit(self, event_name: str, data: Dict[str, Any]) -> None:
        """Deliver an event to every listener; one failing listener does not stop the rest"""
        for handler in list(self.listeners.get(event_name, [])):
            try:
                await handler(data)
            except Exception:
                logger.error(f"Error in '{event_name}' listener: {traceback.format_exc()}")

    async def enable_protocols(self, flags: List[ProtocolFlag]) -> None:
        if not self.is_connected:
            raise TransceiverError("Transceiver not initialised")
        self.enabled_flags.append(list(flags))
        await asyncio.sleep(0)

    async def send_command(self, family: str, subtype: int, address: str,
                           command: str) -> Dict[str, Any]:
        if not self.is_connected:
            raise TransceiverError("Transceiver not initialised")
        self.sent_commands.append({
            "family": family,
            "subtype": subtype,
            "address": address,
            "command": command
        })
        seqnbr = len(self.sent_commands) - 1
        await asyncio.sleep(0)
        await self.emit("response", {"seqnbr": seqnbr, "message": "ACK - transmit OK"})
        return {"seqnbr": seqnbr, "status": "ACK"}

    async def close(self) -> None:
        self.is_connected = False
        logger.info(f"Loopback transceiver on {self.port} closed")
