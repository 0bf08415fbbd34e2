from typing import Any, Dict, Type
from .base import TransceiverDriver
from .loopback import LoopbackTransceiver
from ..utils.exceptions import ConfigurationError

class TransceiverFactory:
    """Factory for creating transceiver driver instances"""
    _driver_types: Dict[str, Type[TransceiverDriver]] = {
        "loopback": LoopbackTransceiver,
    }

    @classmethod
    def register_driver(cls, name: str, driver_class: Type[TransceiverDriver]) -> None:
        """Register a new driver type"""
        cls._driver_types[name] = driver_class

    @classmethod
    def create_driver(cls, name: str, port: str, **kwargs: Any) -> TransceiverDriver:
        """Create a driver instance based on its registered name"""
        if name not in cls._driver_types:
            raise ConfigurationError(f"Unknown transceiver driver: {name}")

        driver_class = cls._driver_types[name]
        return driver_class(port, **kwargs)
