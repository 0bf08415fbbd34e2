# Abstract base classes for the bus adapter and the RF transceiver driver.
# Byte-level framing lives in the concrete driver; the gateway only sees
# named events, protocol flags and protocol commands.

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class ProtocolFlag(NamedTuple):
    """Bit in one of the transceiver's set-mode message bytes"""
    message: int
    bit: int


# Protocol Adapters
class CommunicationAdapter(ABC):
    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def read_data(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def write_data(self, data: Dict[str, Any]) -> None:
        pass


class TransceiverDriver(ABC):
    """
    Interface of an RFXtrx-style transceiver driver.

    Events are delivered to handlers registered with ``on``; the 'status'
    event carries ``enabledProtocols`` after the handshake.
    """
    def __init__(self, port: str, debug: bool = False):
        self.port = port
        self.debug = debug

    @abstractmethod
    async def initialise(self) -> None:
        """Open the port and complete the handshake"""
        pass

    @abstractmethod
    def on(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe a handler to a named hardware event"""
        pass

    @abstractmethod
    async def enable_protocols(self, flags: List[ProtocolFlag]) -> None:
        """Program the receiver protocol set; returns when the firmware has accepted it"""
        pass

    @abstractmethod
    async def send_command(self, family: str, subtype: int, address: str,
                           command: str) -> Dict[str, Any]:
        """Transmit one protocol command and return the driver's response"""
        pass

    async def close(self) -> None:
        """Release the port. Override if needed."""
        pass
