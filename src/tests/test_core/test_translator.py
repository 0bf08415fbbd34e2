import pytest
from unittest.mock import AsyncMock, patch
from rfx_gateway.adapters.loopback import LoopbackTransceiver
from rfx_gateway.core.translator import CommandTranslator
from rfx_gateway.models.device import Signal, SignalSender
from rfx_gateway.protocols import handlers
from rfx_gateway.utils.exceptions import (
    MalformedIdentifierError,
    TransceiverError,
    UnknownProtocolError,
    UnsupportedCommandError,
)


@pytest.fixture
def transceiver():
    transceiver = LoopbackTransceiver()
    transceiver.is_connected = True
    return transceiver


@pytest.fixture
def broadcast():
    return AsyncMock()


@pytest.fixture
def translator(transceiver, broadcast):
    return CommandTranslator(transceiver, broadcast)


def signal(device_id, state):
    return Signal(device_id=device_id, data={"state": state})


@pytest.mark.asyncio
@pytest.mark.parametrize("state, method", [
    ("on", "switch_on"),
    ("off", "switch_off"),
])
async def test_switch_verbs(translator, state, method):
    with patch.object(handlers.Lighting2, method, AsyncMock(return_value={})) as mocked:
        command = translator.translate(signal("Lighting2/AC-0x01", state))
        await command.execute()

    mocked.assert_awaited_once_with("0x01")


@pytest.mark.asyncio
async def test_trigger_invokes_chime(translator):
    with patch.object(handlers.Lighting1, "chime", AsyncMock(return_value={})) as mocked:
        command = translator.translate(signal("Lighting1/ARC-A1", "trigger"))
        await command.execute()

    mocked.assert_awaited_once_with("A1")


@pytest.mark.asyncio
async def test_trigger_on_switch_family_invokes_chime(translator):
    with patch.object(handlers.Lighting2, "chime", AsyncMock(return_value={})) as mocked:
        command = translator.translate(signal("Lighting2/AC-0x01", "trigger"))
        assert command.method == "chime"
        await command.execute()

    mocked.assert_awaited_once_with("0x01")


@pytest.mark.asyncio
async def test_transmit_failure_is_a_transceiver_error(translator, transceiver, broadcast):
    transceiver.send_command = AsyncMock(side_effect=OSError("write failed"))
    command = translator.translate(signal("Lighting2/AC-0x01", "on"))

    with pytest.raises(TransceiverError):
        await command.execute()
    broadcast.assert_not_awaited()


@pytest.mark.asyncio
async def test_command_reaches_transceiver(translator, transceiver):
    command = translator.translate(signal("Lighting2/HOMEEASY_EU-0x02/3", "off"))
    await command.execute()

    assert transceiver.sent_commands == [{
        "family": "Lighting2",
        "subtype": 0x01,
        "address": "0x02/3",
        "command": "off"
    }]


@pytest.mark.asyncio
async def test_confirmation_echoes_requested_state(translator, broadcast):
    command = translator.translate(signal("Chime1/BYRON_SX-0x12", "trigger"))
    broadcast.assert_not_awaited()

    await command.execute()

    broadcast.assert_awaited_once_with(Signal(
        device_id="Chime1/BYRON_SX-0x12",
        data={"state": "trigger"},
        sender=SignalSender.BUS
    ))


def test_unsupported_verb(translator, transceiver, broadcast):
    with pytest.raises(UnsupportedCommandError):
        translator.translate(signal("Lighting2/AC-0x01", "dim"))
    assert transceiver.sent_commands == []
    broadcast.assert_not_awaited()


def test_missing_state(translator):
    with pytest.raises(UnsupportedCommandError):
        translator.translate(Signal(device_id="Lighting2/AC-0x01", data={}))


@pytest.mark.parametrize("device_id, state", [
    ("Chime1/BYRON_SX-0x12", "on"),
    ("Lighting4/PT2262-0x01", "on"),
])
def test_verb_outside_protocol_vocabulary(translator, device_id, state):
    with pytest.raises(UnsupportedCommandError):
        translator.translate(signal(device_id, state))


@pytest.mark.parametrize("device_id", [
    "Blinds9/T0-0x01",
    "Lighting2/NOPE-0x01",
])
def test_unknown_protocol(translator, device_id):
    with pytest.raises(UnknownProtocolError):
        translator.translate(signal(device_id, "on"))


def test_family_is_case_insensitive(translator):
    command = translator.translate(signal("lighting2/ac-0x01", "on"))
    assert isinstance(command.handler, handlers.Lighting2)
    assert command.handler.subtype == 0


def test_malformed_device_id(translator):
    with pytest.raises(MalformedIdentifierError):
        translator.translate(signal("Lighting2", "on"))
