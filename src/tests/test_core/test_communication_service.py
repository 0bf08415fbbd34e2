import pytest
from unittest.mock import AsyncMock
from rfx_gateway.adapters.mqtt import MQTTConfig
from rfx_gateway.core.communication_service import CommunicationService
from rfx_gateway.core.event_manager import EventManager, SIGNAL_OUTBOUND


@pytest.fixture
def service():
    service = CommunicationService({"communication": {"mqtt": {"enabled": False}}}, EventManager())
    service.mqtt = AsyncMock()
    service.mqtt.config = MQTTConfig(host="localhost", topic_prefix="home/rfx")
    return service


@pytest.mark.asyncio
async def test_disabled_mqtt_is_skipped():
    service = CommunicationService({"communication": {}}, EventManager())
    await service.initialize()
    assert service.mqtt is None


@pytest.mark.asyncio
async def test_command_becomes_outbound_signal(service):
    await service.command_handler("home/rfx/command", {
        "deviceId": "Lighting2/AC-0x01",
        "data": {"state": "on"}
    })

    assert service.event_manager.event_queue.get_nowait() == (SIGNAL_OUTBOUND, {
        "deviceId": "Lighting2/AC-0x01",
        "data": {"state": "on"}
    })


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["on", {"data": {"state": "on"}}])
async def test_invalid_command_is_ignored(service, payload):
    await service.command_handler("home/rfx/command", payload)
    assert service.event_manager.event_queue.empty()


@pytest.mark.asyncio
async def test_signal_is_published(service):
    payload = {"deviceId": "Lighting2/AC-0x01", "data": {"state": "on"}, "sender": "bus"}
    await service.signal_handler(payload)

    service.mqtt.publish.assert_awaited_once_with({
        "topic": "home/rfx/signal",
        "payload": payload,
        "qos": 0,
    })
