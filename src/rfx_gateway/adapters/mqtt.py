import asyncio
import json
import random
import traceback
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import aiomqtt as mqtt
from aiomqtt import Will
from pydantic import BaseModel, Field

from ..adapters.base import CommunicationAdapter
from ..utils.exceptions import CommunicationError
from ..utils.logging import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[str, Any], Awaitable[None]]


class MQTTConfig(BaseModel):
    """MQTT configuration model"""
    host: str = Field(..., description="MQTT broker hostname")
    port: int = Field(1883, description="MQTT broker port")
    username: Optional[str] = Field(None, description="MQTT username")
    password: Optional[str] = Field(None, description="MQTT password")
    keepalive: int = Field(60, description="Connection keepalive in seconds")
    client_id: str = Field("rfx_gateway", description="MQTT client ID")
    topic_prefix: str = Field("rfxcom", description="Prefix for command and signal topics")
    reconnect_interval: float = Field(5.0, description="Reconnection interval in seconds")
    max_reconnect_attempts: int = Field(5, description="Maximum reconnection attempts")
    message_queue_size: int = Field(1000, description="Maximum size of message queue")
    subscribe_qos: int = Field(0, description="qos for subscribe topics")
    publish_qos: int = Field(0, description="qos for publish message")


class MQTTMessage(BaseModel):
    """MQTT message model"""
    topic: str
    payload: Union[dict, str, bytes]
    qos: int = Field(0, ge=0, le=2)
    retain: bool = False


class MQTTAdapter(CommunicationAdapter):
    def __init__(self, config: Dict[str, Any]):
        try:
            self.config = MQTTConfig(**config)
        except Exception as e:
            raise CommunicationError(f"Invalid MQTT configuration: {str(e)}")

        self.client: Optional[mqtt.Client] = None
        self.message_handlers: Dict[str, List[MessageHandler]] = {}
        self.connected = asyncio.Event()
        self._stop_flag = asyncio.Event()
        self._tasks: List[asyncio.Task] = []
        self._message_queue: asyncio.Queue = asyncio.Queue(maxsize=self.config.message_queue_size)
        self._publish_queue: asyncio.Queue = asyncio.Queue(maxsize=self.config.message_queue_size)

    def _backoff(self, attempt: int) -> float:
        return min(self.config.reconnect_interval * (2 ** (attempt - 1)), 60)

    def _on_message(self, message: mqtt.Message) -> None:
        payload = message.payload.decode() if isinstance(message.payload, bytes) else message.payload
        try:
            payload = json.loads(payload)
        except (TypeError, json.JSONDecodeError):
            pass  # Keep payload as string if not JSON
        try:
            self._message_queue.put_nowait((str(message.topic), payload))
        except asyncio.QueueFull:
            logger.warning("Message queue full, dropping message")

    async def _run_client(self) -> None:
        """Connection loop with exponential backoff between failed attempts"""
        attempt = 0
        while not self._stop_flag.is_set():
            try:
                will = Will(
                    topic=f"{self.config.topic_prefix}/status",
                    payload="Offline",
                    qos=1,
                    retain=True
                )
                async with mqtt.Client(
                    hostname=self.config.host,
                    port=self.config.port,
                    username=self.config.username,
                    password=self.config.password,
                    keepalive=self.config.keepalive,
                    identifier=f"{self.config.client_id}_{random.randint(1000, 9999)}",
                    will=will
                ) as client:
                    attempt = 0
                    self.client = client
                    self.connected.set()
                    await client.publish(f"{self.config.topic_prefix}/status", payload="Online", qos=1, retain=True)
                    for topic in self.message_handlers:
                        await client.subscribe(topic, qos=self.config.subscribe_qos)
                    logger.info(f"Connected to MQTT broker {self.config.host}:{self.config.port}")

                    async for message in client.messages:
                        self._on_message(message)

            except mqtt.MqttError:
                attempt += 1
                logger.error(f"MQTT connection attempt {attempt} failed: {traceback.format_exc()}")
                if attempt >= self.config.max_reconnect_attempts:
                    logger.error(f"Failed to connect to MQTT broker after {attempt} attempts")
                    break
                wait_time = self._backoff(attempt)
                logger.info(f"MQTT retry will happen after {wait_time} seconds")
                await asyncio.sleep(wait_time)
            finally:
                if self.connected.is_set():
                    logger.info("Disconnected from MQTT broker")
                self.connected.clear()
                self.client = None

    async def _handle_messages(self) -> None:
        while not self._stop_flag.is_set():
            try:
                topic, payload = await self._message_queue.get()
            except asyncio.CancelledError:
                break
            for handler in self.message_handlers.get(topic, []):
                try:
                    await handler(topic, payload)
                except Exception:
                    logger.error(f"Error in message handler for topic {topic}: {traceback.format_exc()}")
            self._message_queue.task_done()

    async def _publish_worker(self) -> None:
        while not self._stop_flag.is_set():
            try:
                message = await self._publish_queue.get()
            except asyncio.CancelledError:
                break
            attempt = 0
            while not self._stop_flag.is_set():
                try:
                    if not self.client or not self.connected.is_set():
                        raise CommunicationError("Not connected to MQTT broker")
                    await self.client.publish(message.topic, payload=message.payload,
                                              qos=message.qos, retain=message.retain)
                    logger.debug(f"Published to {message.topic}")
                    break
                except (CommunicationError, mqtt.MqttError) as e:
                    attempt += 1
                    if attempt >= self.config.max_reconnect_attempts:
                        logger.error(f"Failed to publish message after {attempt} attempts: {e}")
                        break
                    await asyncio.sleep(self._backoff(attempt))
            self._publish_queue.task_done()

    async def connect(self) -> None:
        """Start the connection loop and the message workers"""
        self._stop_flag.clear()
        self._tasks = [
            asyncio.create_task(self._run_client()),
            asyncio.create_task(self._handle_messages()),
            asyncio.create_task(self._publish_worker()),
        ]

    async def disconnect(self) -> None:
        self._stop_flag.set()
        for task in self._tasks:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._tasks = []
        self.connected.clear()
        logger.info("MQTT adapter stopped")

    async def subscribe(self, topic: str, handler: MessageHandler) -> None:
        try:
            if topic not in self.message_handlers:
                self.message_handlers[topic] = []
                if self.client and self.connected.is_set():
                    await self.client.subscribe(topic, qos=self.config.subscribe_qos)
            self.message_handlers[topic].append(handler)
            logger.info(f"Subscribed to topic: {topic}")
        except mqtt.MqttError as e:
            raise CommunicationError(f"Failed to subscribe to topic {topic}: {str(e)}")

    async def publish(self, message: Union[MQTTMessage, Dict[str, Any]]) -> None:
        """Queue message for publishing"""
        if isinstance(message, dict):
            message = MQTTMessage(**message)

        payload = message.payload
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        if isinstance(payload, str):
            payload = payload.encode()

        try:
            self._publish_queue.put_nowait(message.model_copy(update={"payload": payload}))
        except asyncio.QueueFull:
            raise CommunicationError("Publish queue full")

    async def write_data(self, data: Dict[str, Any]) -> None:
        """Write data to MQTT (alias for publish)"""
        await self.publish(data)

    async def read_data(self) -> Dict[str, Any]:
        """Not used for MQTT, messages arrive through subscribed handlers"""
        raise NotImplementedError("MQTTAdapter delivers messages to subscribed handlers")
