import pytest
from unittest.mock import AsyncMock
from rfx_gateway.adapters.loopback import LoopbackTransceiver
from rfx_gateway.core.device_registry import DeviceRegistry
from rfx_gateway.core.dispatcher import EventDispatcher
from rfx_gateway.core.identity import decode_device_id
from rfx_gateway.models.device import InboundEvent, Signal, SignalSender
from rfx_gateway.protocols.registry import HARDWARE_EVENTS
from conftest import make_device


@pytest.fixture
def transceiver():
    return LoopbackTransceiver()


@pytest.fixture
def broadcast():
    return AsyncMock()


@pytest.fixture
def dispatcher(transceiver, devices, broadcast):
    dispatcher = EventDispatcher("RFXCOM", transceiver, DeviceRegistry("RFXCOM", devices), broadcast)
    dispatcher.bind()
    return dispatcher


def sent_signals(broadcast):
    return [call.args[0] for call in broadcast.await_args_list]


def test_one_subscription_per_protocol_family(dispatcher, transceiver):
    assert len(transceiver.listeners["lighting2"]) == 1
    assert len(transceiver.listeners["lighting1"]) == 1
    assert len(transceiver.listeners["temperaturehumidity1"]) == 1
    assert set(transceiver.listeners) == {"lighting1", "lighting2", "temperaturehumidity1"}


def test_listener_keys(dispatcher):
    assert list(dispatcher.registrations) == [
        "RFXCOM:lighting2",
        "RFXCOM:lighting1",
        "RFXCOM:input:temperature",
    ]


def test_attached_devices(dispatcher):
    assert [device.id for device in dispatcher.attached_devices] == [
        "light1", "light2", "light2_mirror", "doorbell", "temp1"
    ]


def test_temperature_listener_is_shared_across_families(transceiver, broadcast):
    devices = [
        make_device("TemperatureHumidity1/THGN122-0x6801", "temp1", role="input", type="temperature"),
        make_device("Temperature1/THR128-0x1001", "temp2", role="input", type="temperature"),
    ]
    dispatcher = EventDispatcher("RFXCOM", transceiver, DeviceRegistry("RFXCOM", devices), broadcast)
    dispatcher.bind()

    assert list(transceiver.listeners) == ["temperaturehumidity1"]
    assert len(dispatcher.attached_devices) == 2


@pytest.mark.asyncio
async def test_switch_echo_without_command(dispatcher, transceiver, broadcast):
    await transceiver.emit("lighting2", {"id": "0x01", "command": None})

    assert sent_signals(broadcast) == [Signal(
        device_id="Lighting2/AC-0x01",
        data={"state": "trigger"},
        sender=SignalSender.HARDWARE_ECHO
    )]


@pytest.mark.asyncio
async def test_switch_echo_with_unit_code(dispatcher, transceiver, broadcast):
    await transceiver.emit("lighting2", {"id": "0x02", "unitCode": "3", "command": "On"})

    signals = sent_signals(broadcast)
    assert [s.device_id for s in signals] == ["Lighting2/AC-0x02/3", "Lighting2/AC-0x02/3"]
    assert all(s.data == {"state": "on"} for s in signals)
    assert all(s.sender == SignalSender.HARDWARE_ECHO for s in signals)


@pytest.mark.asyncio
async def test_switch_echo_numeric_unit_code(dispatcher, broadcast):
    await dispatcher.on_output_switch({"id": "0x02", "unitCode": 3, "command": "Off"})
    assert [s.data["state"] for s in sent_signals(broadcast)] == ["off", "off"]


@pytest.mark.asyncio
async def test_switch_echo_unknown_address(dispatcher, broadcast):
    await dispatcher.on_output_switch({"id": "0x99", "command": "On"})
    broadcast.assert_not_awaited()


@pytest.mark.asyncio
async def test_temperature_event(dispatcher, transceiver, broadcast):
    await transceiver.emit("temperaturehumidity1", {
        "id": "0x6801",
        "subtype": 1,
        "temperature": 21.5,
        "humidity": 45,
        "humidityStatus": 1,
        "batteryLevel": 9,
        "rssi": 6
    })

    assert sent_signals(broadcast) == [Signal(
        device_id="TemperatureHumidity1/THGN122-0x6801",
        data={
            "deviceTypeString": "THGN122/123, THGN132, THGR122/228/238/268",
            "temperature": 21.5,
            "humidity": 45,
            "humidityStatus": 1,
            "batteryLevel": 9,
            "rssi": 6
        },
        sender=SignalSender.HARDWARE_ECHO
    )]


@pytest.mark.asyncio
async def test_temperature_event_unknown_subtype(dispatcher, broadcast):
    await dispatcher.on_input_temperature({"id": "0x6801", "subtype": 99, "humidityStatus": 7})

    signal = sent_signals(broadcast)[0]
    assert signal.data["deviceTypeString"] == "Unknown device"
    assert signal.data["humidityStatus"] == 7


@pytest.mark.asyncio
async def test_no_phantom_signals(dispatcher, transceiver, broadcast):
    await transceiver.emit("temperaturehumidity1", {"id": "0xDEAD", "subtype": 1, "temperature": 20})
    broadcast.assert_not_awaited()


@pytest.mark.asyncio
async def test_listen_all(transceiver, devices, broadcast):
    dispatcher = EventDispatcher("RFXCOM", transceiver, DeviceRegistry("RFXCOM", devices), broadcast)
    dispatcher.handle_raw_event = AsyncMock()
    dispatcher.listen_all()

    assert set(transceiver.listeners) == set(HARDWARE_EVENTS)
    assert all(len(handlers) == 1 for handlers in transceiver.listeners.values())

    await transceiver.emit("lighting2", {"id": "0x01", "command": "On"})

    event = dispatcher.handle_raw_event.await_args.args[0]
    assert event.family == "lighting2"
    assert event.payload == {"id": "0x01", "command": "On"}
    broadcast.assert_not_awaited()


@pytest.fixture
def shared_address_devices():
    return [
        make_device("Lighting2/AC-0x01", "hall"),
        make_device("Lighting2/AC-0x01", "hall_old", enabled=False),
        make_device("Lighting1/ARC-0x01", "porch_sensor", role="input", type="temperature"),
    ]


@pytest.mark.asyncio
async def test_switch_echo_skips_disabled_and_other_kinds(transceiver, broadcast, shared_address_devices):
    dispatcher = EventDispatcher(
        "RFXCOM", transceiver, DeviceRegistry("RFXCOM", shared_address_devices), broadcast
    )
    dispatcher.bind()

    await transceiver.emit("lighting2", {"id": "0x01", "command": "On"})

    assert sent_signals(broadcast) == [Signal(
        device_id="Lighting2/AC-0x01",
        data={"state": "on"},
        sender=SignalSender.HARDWARE_ECHO
    )]


@pytest.mark.asyncio
async def test_temperature_event_skips_switches(transceiver, broadcast, shared_address_devices):
    dispatcher = EventDispatcher(
        "RFXCOM", transceiver, DeviceRegistry("RFXCOM", shared_address_devices), broadcast
    )
    dispatcher.bind()

    await dispatcher.on_input_temperature({"id": "0x01", "subtype": 1, "temperature": 18.0})

    assert [s.device_id for s in sent_signals(broadcast)] == ["Lighting1/ARC-0x01"]


@pytest.mark.parametrize("family, payload, expected", [
    ("lighting2", {"id": "0x01", "subtype": 0, "unitCode": 3}, "Lighting2/AC-0x01/3"),
    ("lighting2", {"id": "0x02", "subtype": 1}, "Lighting2/HOMEEASY_EU-0x02"),
    ("chime1", {"id": "0x12", "subtype": 0}, "Chime1/BYRON_SX-0x12"),
    ("temperaturehumidity1", {"id": "0x6801", "subtype": 1}, "Temperaturehumidity1/1-0x6801"),
])
def test_suggested_device_id_is_decodable(dispatcher, family, payload, expected):
    device_id = dispatcher.suggested_device_id(InboundEvent(family=family, payload=payload))

    assert device_id == expected
    assert decode_device_id(device_id).hardware_address == payload["id"]


def test_no_suggestion_without_id(dispatcher):
    assert dispatcher.suggested_device_id(InboundEvent(family="response", payload={"status": "ACK"})) is None
