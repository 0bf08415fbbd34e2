import pytest
from rfx_gateway.models.device import DeviceConfig


def make_device(device_id: str, device_key: str, role: str = "output", type: str = "switch",
                enabled: bool = True, plugin_id: str = "RFXCOM") -> DeviceConfig:
    return DeviceConfig(
        id=device_key,
        role=role,
        type=type,
        enabled=enabled,
        plugin={"id": plugin_id, "deviceId": device_id}
    )


@pytest.fixture
def devices():
    return [
        make_device("Lighting2/AC-0x01", "light1"),
        make_device("Lighting2/AC-0x02/3", "light2"),
        make_device("Lighting2/AC-0x02/3", "light2_mirror"),
        make_device("Lighting1/ARC-A1", "doorbell"),
        make_device("TemperatureHumidity1/THGN122-0x6801", "temp1", role="input", type="temperature"),
        make_device("Lighting5/LIGHTWAVERF-0x0F/1", "disabled_light", enabled=False),
        make_device("Lighting6/BLYSS-0x77", "other_plugin_light", plugin_id="OTHER"),
        make_device("Lighting3/KOPPLA-0x03", "dimmer", type="dimmer"),
    ]
