from typing import Dict, List, Sequence
from ..models.device import DeviceConfig, DeviceIdentifier
from ..utils.exceptions import MalformedIdentifierError
from ..utils.logging import get_logger
from .identity import decode_device_id

logger = get_logger(__name__)


class DeviceRegistry:
    """Configured devices of one plugin instance, with their decoded identifiers"""

    def __init__(self, plugin_id: str, devices: Sequence[DeviceConfig]):
        self.plugin_id = plugin_id
        self.devices: List[DeviceConfig] = []
        self.identifiers: Dict[str, DeviceIdentifier] = {}

        for device in devices:
            if device.plugin.id != plugin_id:
                continue
            try:
                identifier = decode_device_id(device.plugin.device_id)
            except MalformedIdentifierError as e:
                logger.error(f"Skipping device {device.id}: {e}")
                continue
            self.devices.append(device)
            self.identifiers[device.id] = identifier

    def identifier_for(self, device: DeviceConfig) -> DeviceIdentifier:
        return self.identifiers[device.id]

