from rfx_gateway.protocols.catalog import UNKNOWN_DEVICE, subtype_description


def test_known_subtypes():
    assert subtype_description("temp1") == "THR128/138, THC138"
    assert subtype_description("temperaturehumidity1-1") == "THGN122/123, THGN132, THGR122/228/238/268"
    assert subtype_description("temperaturehumidity1-b2") == "BTHR918N, BTHR968"


def test_temperature1_events_use_temp_descriptions():
    assert subtype_description("temperature1-3") == subtype_description("temp3") == "THWR800"


def test_unknown_subtype():
    assert subtype_description("lighting2-0") == UNKNOWN_DEVICE == "Unknown device"
    assert subtype_description("") == "Unknown device"


def test_descriptions_are_trimmed():
    assert subtype_description("temp10") == "TFA 30.3133"
    assert subtype_description("temp11") == "WT0122"
    assert subtype_description("temperature1-10") == "TFA 30.3133"
