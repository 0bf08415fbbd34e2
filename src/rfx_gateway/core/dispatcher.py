# Inbound direction: hardware events -> generic bus signals
import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from ..adapters.base import EventHandler, TransceiverDriver
from ..models.device import DeviceConfig, DeviceRole, DeviceType, InboundEvent, Signal, SignalSender
from ..protocols.catalog import subtype_description
from ..protocols.registry import HARDWARE_EVENTS, PROTOCOLS, ProtocolFamily
from ..utils.exceptions import UnknownProtocolError
from ..utils.logging import get_logger, pretty
from .device_registry import DeviceRegistry

logger = get_logger(__name__)

Broadcast = Callable[[Signal], Awaitable[None]]


@dataclass(frozen=True)
class ListenerRegistration:
    event_name: str
    listener_key: str
    handler: EventHandler


class EventDispatcher:
    """
    Subscribes one handler per listener key on the transceiver and turns the
    resulting hardware events into bus signals for every matching device.
    """

    def __init__(self, plugin_id: str, transceiver: TransceiverDriver,
                 registry: DeviceRegistry, broadcast: Broadcast):
        self.plugin_id = plugin_id
        self.transceiver = transceiver
        self.registry = registry
        self.broadcast = broadcast
        self.registrations: Dict[str, ListenerRegistration] = {}
        self.attached_devices: List[DeviceConfig] = []
        self._attached_by_address: Dict[str, List[DeviceConfig]] = {}

    def _resolve_listener(self, device: DeviceConfig) -> Optional[Tuple[str, str, EventHandler]]:
        identifier = self.registry.identifier_for(device)
        event_name = identifier.protocol_family.lower()

        if device.role == DeviceRole.INPUT.value and device.type == DeviceType.TEMPERATURE.value:
            return event_name, f"{self.plugin_id}:{device.role}:{device.type}", self.on_input_temperature

        if device.role == DeviceRole.OUTPUT.value and device.type == DeviceType.SWITCH.value:
            return event_name, f"{self.plugin_id}:{event_name}", self.on_output_switch

        return None

    def bind(self) -> None:
        """Subscribe handlers for every enabled configured device, once per listener key"""
        for device in self.registry.devices:
            if not device.enabled:
                continue

            listener = self._resolve_listener(device)
            if listener is None:
                logger.debug(f"No hardware listener for {device.id} ({device.role}/{device.type})")
                continue

            event_name, listener_key, handler = listener
            if listener_key not in self.registrations:
                self.transceiver.on(event_name, handler)
                self.registrations[listener_key] = ListenerRegistration(event_name, listener_key, handler)
                logger.info(f"Listening for '{event_name}' events ({listener_key})")

            self.attached_devices.append(device)
            address = self.registry.identifier_for(device).address
            self._attached_by_address.setdefault(address, []).append(device)

    def attached_at(self, address: str, role: DeviceRole, device_type: DeviceType) -> List[DeviceConfig]:
        """Attached devices of the given role and type at a hardware address, in configuration order"""
        return [
            device for device in self._attached_by_address.get(address, [])
            if device.role == role.value and device.type == device_type.value
        ]

    async def on_output_switch(self, received: Dict[str, Any]) -> None:
        """Triggered when a hardware switch or remote transmits"""
        logger.debug("Hardware switch event detected:\n" + pretty(received))

        address = received["id"]
        if received.get("unitCode") is not None:
            address = f"{address}/{received['unitCode']}"

        command = received.get("command")
        state = command.lower() if command else "trigger"

        for device in self.attached_at(address, DeviceRole.OUTPUT, DeviceType.SWITCH):
            await self.broadcast(Signal(
                device_id=device.plugin.device_id,
                data={"state": state},
                sender=SignalSender.HARDWARE_ECHO
            ))

    async def on_input_temperature(self, sensor_data: Dict[str, Any]) -> None:
        logger.debug("Sensor event:\n" + pretty(sensor_data))

        for device in self.attached_at(sensor_data["id"], DeviceRole.INPUT, DeviceType.TEMPERATURE):
            family = self.registry.identifier_for(device).protocol_family.lower()
            type_string = subtype_description(f"{family}-{sensor_data.get('subtype')}")

            await self.broadcast(Signal(
                device_id=device.plugin.device_id,
                data={
                    "deviceTypeString": type_string,
                    "temperature": sensor_data.get("temperature"),
                    "humidity": sensor_data.get("humidity"),
                    # 0: dry, 1: comfort, 2: normal, 3: wet
                    "humidityStatus": sensor_data.get("humidityStatus"),
                    "batteryLevel": sensor_data.get("batteryLevel"),
                    "rssi": sensor_data.get("rssi"),
                },
                sender=SignalSender.HARDWARE_ECHO
            ))

    def listen_all(self) -> None:
        """Listen-only mode: log every hardware event without resolving devices"""
        for event_name in HARDWARE_EVENTS:
            handler = functools.partial(self._tag_event, event_name)
            self.transceiver.on(event_name, handler)
            self.registrations[f"{self.plugin_id}:{event_name}"] = ListenerRegistration(
                event_name, f"{self.plugin_id}:{event_name}", handler
            )

    async def _tag_event(self, family: str, payload: Dict[str, Any]) -> None:
        await self.handle_raw_event(InboundEvent(family=family, payload=payload))

    def suggested_device_id(self, event: InboundEvent) -> Optional[str]:
        """Device id, in configuration syntax, that would address the sender of a raw event"""
        payload = event.payload
        if "id" not in payload:
            return None

        try:
            family = ProtocolFamily.resolve(event.family)
        except UnknownProtocolError:
            family_name, subtype_name = event.family.capitalize(), None
        else:
            family_name = family.value
            descriptor = PROTOCOLS.get(family)
            subtype_name = descriptor.subtype_name(payload.get("subtype", 0)) if descriptor else None

        if subtype_name is None:
            subtype_name = str(payload.get("subtype", 0))

        device_id = f"{family_name}/{subtype_name}-{payload['id']}"
        if payload.get("unitCode") is not None:
            device_id += f"/{payload['unitCode']}"
        return device_id

    async def handle_raw_event(self, event: InboundEvent) -> None:
        logger.info(f"Received data for {event.family}:\n" + pretty(event.payload))
        device_id = self.suggested_device_id(event)
        if device_id is not None:
            logger.info(
                "Device configuration:\n"
                f"  plugin:\n"
                f"    id: {self.plugin_id}\n"
                f"    deviceId: {device_id}"
            )
