from typing import Any, Dict, Optional
import asyncio
from ..adapters.mqtt import MQTTAdapter
from ..utils.logging import get_logger
from ..utils.exceptions import CommunicationError
from .event_manager import EventManager, SIGNAL_BROADCAST, SIGNAL_OUTBOUND

logger = get_logger(__name__)

class CommunicationService:
    """
    Bridges the in-process signal bus to MQTT.

    ``<prefix>/command`` messages ({"deviceId": ..., "data": {...}}) become
    outbound signals; every broadcast signal is published on ``<prefix>/signal``.
    """
    def __init__(self, config: Dict[str, Any], event_manager: EventManager):
        self.communication_config = config.get('communication', {})
        self.event_manager = event_manager
        self.mqtt: Optional[MQTTAdapter] = None
        mqtt_config = self.communication_config.get('mqtt', {})
        self._mqtt_connection_timeout = mqtt_config.get('connection_timeout', 90)  # seconds

    async def _wait_for_mqtt_connection(self) -> None:
        try:
            await asyncio.wait_for(
                self.mqtt.connected.wait(),
                timeout=self._mqtt_connection_timeout
            )
        except asyncio.TimeoutError:
            raise CommunicationError(
                f"MQTT connection timeout after {self._mqtt_connection_timeout} seconds"
            )

    async def initialize(self) -> None:
        logger.info("Initializing Communication Service")
        mqtt_config = self.communication_config.get('mqtt')
        if not mqtt_config or not mqtt_config.get('enabled', False):
            logger.info("MQTT disabled, signals stay in-process")
            return

        try:
            self.mqtt = MQTTAdapter({k: v for k, v in mqtt_config.items()
                                     if k not in ('enabled', 'connection_timeout')})
            prefix = self.mqtt.config.topic_prefix
            await self.mqtt.subscribe(f"{prefix}/command", self.command_handler)
            await self.event_manager.subscribe(SIGNAL_BROADCAST, self.signal_handler)
            await self.mqtt.connect()
            await self._wait_for_mqtt_connection()
            logger.info("MQTT service fully initialized")
        except Exception as e:
            logger.error(f"Failed to initialize MQTT service: {str(e)}")
            if self.mqtt:
                await self.mqtt.disconnect()
            raise CommunicationError(f"MQTT initialization failed: {str(e)}")

    async def command_handler(self, topic: str, payload: Any) -> None:
        """Forward bus commands to the gateway"""
        if not isinstance(payload, dict) or 'deviceId' not in payload:
            logger.error(f"Invalid command payload on {topic}: {payload}")
            return
        await self.event_manager.publish(SIGNAL_OUTBOUND, {
            "deviceId": payload['deviceId'],
            "data": payload.get('data', {}),
        })

    async def signal_handler(self, payload: Dict[str, Any]) -> None:
        await self.mqtt.publish({
            "topic": f"{self.mqtt.config.topic_prefix}/signal",
            "payload": payload,
            "qos": self.mqtt.config.publish_qos,
        })

    async def shutdown(self) -> None:
        logger.info("Shutting down communication services")
        if self.mqtt:
            await self.mqtt.disconnect()
