from typing import Any, Dict
from ..adapters.base import TransceiverDriver
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ProtocolHandler:
    """
    Command object for one protocol family and subtype, bound to a transceiver.
    Subclasses expose only the commands their family supports.
    """
    family: str = ""

    def __init__(self, transceiver: TransceiverDriver, subtype: int):
        self.transceiver = transceiver
        self.subtype = subtype

    async def _send(self, address: str, command: str) -> Dict[str, Any]:
        logger.debug(f"{self.family}[{self.subtype}] {command} -> {address}")
        return await self.transceiver.send_command(
            self.family, self.subtype, address, command
        )


class SwitchMixin:
    async def switch_on(self, address: str) -> Dict[str, Any]:
        return await self._send(address, "on")

    async def switch_off(self, address: str) -> Dict[str, Any]:
        return await self._send(address, "off")

    async def chime(self, address: str) -> Dict[str, Any]:
        return await self._send(address, "chime")


class Lighting1(SwitchMixin, ProtocolHandler):
    """X10, ARC, ELRO and other house-code/unit-code switches"""
    family = "Lighting1"


class Lighting2(SwitchMixin, ProtocolHandler):
    """AC, HomeEasy EU, ANSLUT, Kambrook"""
    family = "Lighting2"


class Lighting3(SwitchMixin, ProtocolHandler):
    family = "Lighting3"


class Lighting4(ProtocolHandler):
    """PT2262 raw code transmitter; none of the generic verbs apply"""
    family = "Lighting4"


class Lighting5(SwitchMixin, ProtocolHandler):
    family = "Lighting5"


class Lighting6(SwitchMixin, ProtocolHandler):
    family = "Lighting6"


class Chime1(ProtocolHandler):
    """Byron and Select Plus doorbells"""
    family = "Chime1"

    async def chime(self, address: str) -> Dict[str, Any]:
        return await self._send(address, "chime")
