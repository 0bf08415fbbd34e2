"""
Static protocol tables.

PROTOCOLS maps each outbound protocol family to its handler class, its
subtype table and the generic verbs it understands. PROTOCOL_FLAGS maps the
receiver protocol names used in configuration to the set-mode bits of the
transceiver firmware.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Type

from ..adapters.base import ProtocolFlag
from ..utils.exceptions import UnknownProtocolError
from . import handlers


class ProtocolFamily(str, Enum):
    LIGHTING1 = "Lighting1"
    LIGHTING2 = "Lighting2"
    LIGHTING3 = "Lighting3"
    LIGHTING4 = "Lighting4"
    LIGHTING5 = "Lighting5"
    LIGHTING6 = "Lighting6"
    CHIME1 = "Chime1"

    @classmethod
    def resolve(cls, name: str) -> "ProtocolFamily":
        for family in cls:
            if family.value.lower() == name.lower():
                return family
        raise UnknownProtocolError(f"Unknown protocol family: {name}")

    @property
    def event_name(self) -> str:
        return self.value.lower()


# Generic bus verb -> protocol handler method
VERB_METHODS: Mapping[str, str] = MappingProxyType({
    "on": "switch_on",
    "off": "switch_off",
    "trigger": "chime",
})


@dataclass(frozen=True)
class ProtocolDescriptor:
    family: ProtocolFamily
    handler_class: Type[handlers.ProtocolHandler]
    subtypes: Mapping[str, int]
    verbs: FrozenSet[str] = field(default_factory=frozenset)

    def subtype_code(self, name: str) -> int:
        try:
            return self.subtypes[name.upper()]
        except KeyError:
            raise UnknownProtocolError(
                f"Unknown subtype {name!r} for protocol {self.family.value}"
            ) from None

    def subtype_name(self, code: int) -> Optional[str]:
        for name, value in self.subtypes.items():
            if value == code:
                return name
        return None


def _descriptor(family: ProtocolFamily, handler_class, subtypes: Dict[str, int],
                verbs: Tuple[str, ...]) -> ProtocolDescriptor:
    return ProtocolDescriptor(family, handler_class, MappingProxyType(subtypes), frozenset(verbs))


PROTOCOLS: Mapping[ProtocolFamily, ProtocolDescriptor] = MappingProxyType({
    ProtocolFamily.LIGHTING1: _descriptor(ProtocolFamily.LIGHTING1, handlers.Lighting1, {
        "X10": 0x00, "ARC": 0x01, "ELRO": 0x02, "WAVEMAN": 0x03, "CHACON": 0x04,
        "IMPULS": 0x05, "RISING_SUN": 0x06, "PHILIPS_SBC": 0x07,
        "ENERGENIE_ENER010": 0x08, "ENERGENIE_5_GANG": 0x09, "COCO": 0x0a,
        "HQ_COCO20": 0x0b,
    }, ("on", "off", "trigger")),
    ProtocolFamily.LIGHTING2: _descriptor(ProtocolFamily.LIGHTING2, handlers.Lighting2, {
        "AC": 0x00, "HOMEEASY_EU": 0x01, "ANSLUT": 0x02, "KAMBROOK": 0x03,
    }, ("on", "off", "trigger")),
    ProtocolFamily.LIGHTING3: _descriptor(ProtocolFamily.LIGHTING3, handlers.Lighting3, {
        "KOPPLA": 0x00,
    }, ("on", "off", "trigger")),
    ProtocolFamily.LIGHTING4: _descriptor(ProtocolFamily.LIGHTING4, handlers.Lighting4, {
        "PT2262": 0x00,
    }, ()),
    ProtocolFamily.LIGHTING5: _descriptor(ProtocolFamily.LIGHTING5, handlers.Lighting5, {
        "LIGHTWAVERF": 0x00, "EMW100": 0x01, "BBSB": 0x02, "MDREMOTE": 0x03,
        "CONRAD": 0x04, "LIVOLO": 0x05, "TRC02": 0x06, "AOKE": 0x07,
        "TRC02_2": 0x08, "EURODOMEST": 0x09, "LIVOLO_APPLIANCE": 0x0a,
        "RGB432W": 0x0b, "MDREMOTE107": 0x0c, "LEGRAND": 0x0d, "AVANTEK": 0x0e,
        "IT": 0x0f, "MDREMOTE108": 0x10, "KANGTAI": 0x11,
    }, ("on", "off", "trigger")),
    ProtocolFamily.LIGHTING6: _descriptor(ProtocolFamily.LIGHTING6, handlers.Lighting6, {
        "BLYSS": 0x00, "CUVEO": 0x01,
    }, ("on", "off", "trigger")),
    ProtocolFamily.CHIME1: _descriptor(ProtocolFamily.CHIME1, handlers.Chime1, {
        "BYRON_SX": 0x00, "BYRON_MP001": 0x01, "SELECT_PLUS": 0x02,
        "SELECT_PLUS3": 0x03, "ENVIVO": 0x04,
    }, ("trigger",)),
})


def get_descriptor(family_name: str) -> ProtocolDescriptor:
    return PROTOCOLS[ProtocolFamily.resolve(family_name)]


# Receiver protocol name -> (set-mode message byte, bit)
PROTOCOL_FLAGS: Mapping[str, ProtocolFlag] = MappingProxyType({
    "AE": ProtocolFlag(3, 0x01),
    "RUBICSON": ProtocolFlag(3, 0x02),
    "FINEOFFSET": ProtocolFlag(3, 0x04),
    "LIGHTING4": ProtocolFlag(3, 0x08),
    "RSL": ProtocolFlag(3, 0x10),
    "BYRONSX": ProtocolFlag(3, 0x20),
    "IMAGINTRONIX": ProtocolFlag(3, 0x40),
    "UNDECODED": ProtocolFlag(3, 0x80),
    "MERTIK": ProtocolFlag(4, 0x01),
    "AD": ProtocolFlag(4, 0x02),
    "HID": ProtocolFlag(4, 0x04),
    "LACROSSE": ProtocolFlag(4, 0x08),
    "FS20": ProtocolFlag(4, 0x10),
    "PROGUARD": ProtocolFlag(4, 0x20),
    "BLINDST0": ProtocolFlag(4, 0x40),
    "BLINDST1": ProtocolFlag(4, 0x80),
    "X10": ProtocolFlag(5, 0x01),
    "ARC": ProtocolFlag(5, 0x02),
    "AC": ProtocolFlag(5, 0x04),
    "HOMEEASY": ProtocolFlag(5, 0x08),
    "MEIANTECH": ProtocolFlag(5, 0x10),
    "OREGON": ProtocolFlag(5, 0x20),
    "ATI": ProtocolFlag(5, 0x40),
    "VISONIC": ProtocolFlag(5, 0x80),
    "KEELOQ": ProtocolFlag(6, 0x01),
    "HOMECONFORT": ProtocolFlag(6, 0x02),
})


# Every event name the driver can emit
HARDWARE_EVENTS: Tuple[str, ...] = (
    "response",
    "lighting1", "lighting2", "lighting3", "lighting4", "lighting5", "lighting6",
    "chime1", "blinds1", "security1", "camera1", "remote",
    "thermostat1", "thermostat3",
    "bbq1", "temperaturerain1", "temperature1", "humidity1",
    "temperaturehumidity1", "temphumbaro1",
    "rain1", "wind1", "uv1", "datetime",
    "elec1", "elec23", "elec4", "elec5", "weight1",
    "cartelectronic", "rfxsensor", "rfxmeter",
)
