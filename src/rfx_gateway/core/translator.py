# Outbound direction: generic bus signal -> protocol handler call
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

from ..adapters.base import TransceiverDriver
from ..models.device import DeviceIdentifier, Signal, SignalSender
from ..protocols.handlers import ProtocolHandler
from ..protocols.registry import VERB_METHODS, get_descriptor
from ..utils.exceptions import TransceiverError, UnsupportedCommandError
from ..utils.logging import get_logger, pretty
from .identity import decode_device_id

logger = get_logger(__name__)

Broadcast = Callable[[Signal], Awaitable[None]]


@dataclass
class PendingCommand:
    """A translated command, ready to be sent to the transceiver"""
    signal: Signal
    identifier: DeviceIdentifier
    handler: ProtocolHandler
    method: str
    broadcast: Broadcast

    async def execute(self) -> Dict[str, Any]:
        """Send the command, then echo the requested state back onto the bus"""
        address = self.identifier.address
        logger.debug("Sending command:\n" + pretty({"id": address, "command": self.method}))

        try:
            response = await getattr(self.handler, self.method)(address)
        except OSError as e:
            raise TransceiverError(f"Sending {self.method} to {address} failed: {e}") from e

        # Optimistic echo: the firmware response carries no device state
        await self.broadcast(Signal(
            device_id=self.signal.device_id,
            data={"state": self.signal.state},
            sender=SignalSender.BUS
        ))
        return response


class CommandTranslator:
    def __init__(self, transceiver: TransceiverDriver, broadcast: Broadcast):
        self.transceiver = transceiver
        self.broadcast = broadcast

    def translate(self, signal: Signal) -> PendingCommand:
        """
        Resolve a bus signal to a protocol handler call.

        Nothing is sent to the hardware here; all failures are raised before
        the returned command is executed.

        Raises:
            MalformedIdentifierError: device id cannot be decoded
            UnknownProtocolError: protocol family or subtype has no handler
            UnsupportedCommandError: state is not a verb the protocol understands
        """
        identifier = decode_device_id(signal.device_id)
        descriptor = get_descriptor(identifier.protocol_family)
        subtype = descriptor.subtype_code(identifier.protocol_subtype)

        verb = signal.state
        method = VERB_METHODS.get(verb) if isinstance(verb, str) else None
        if method is None:
            raise UnsupportedCommandError(f"Unsupported command {verb!r} for {signal.device_id}")
        if verb not in descriptor.verbs:
            raise UnsupportedCommandError(
                f"Protocol {descriptor.family.value} does not support {verb!r}"
            )

        handler = descriptor.handler_class(self.transceiver, subtype)
        return PendingCommand(
            signal=signal,
            identifier=identifier,
            handler=handler,
            method=method,
            broadcast=self.broadcast
        )
