from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional, Tuple
from enum import Enum


class DeviceRole(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class DeviceType(str, Enum):
    TEMPERATURE = "temperature"
    SWITCH = "switch"


class SignalSender(str, Enum):
    BUS = "bus"
    HARDWARE_ECHO = "hardware_echo"


class DeviceIdentifier(BaseModel):
    """Composite address of one device on the RF network"""
    model_config = ConfigDict(frozen=True)

    protocol_family: str
    protocol_subtype: str
    hardware_address: str
    unit_code: Optional[str] = None

    @field_validator('protocol_family', 'protocol_subtype', 'hardware_address')
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError("Identifier parts must not be empty")
        return v

    @field_validator('protocol_family')
    def validate_family(cls, v):
        if '/' in v:
            raise ValueError(f"Protocol family {v!r} must not contain '/'")
        return v

    @field_validator('hardware_address', 'unit_code')
    def validate_address(cls, v):
        if v is not None and ('-' in v or '/' in v):
            raise ValueError(f"Address part {v!r} must not contain '-' or '/'")
        if v == "":
            raise ValueError("Unit code must not be empty")
        return v

    @property
    def address(self) -> str:
        """Hardware address as reported by switch events, including the unit code"""
        if self.unit_code:
            return f"{self.hardware_address}/{self.unit_code}"
        return self.hardware_address


class Signal(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_id: str = Field(..., alias="deviceId")
    data: Dict[str, Any] = Field(default_factory=dict)
    sender: SignalSender = SignalSender.BUS

    @property
    def state(self) -> Optional[str]:
        return self.data.get("state")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PluginReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    device_id: str = Field(..., alias="deviceId")


class DeviceConfig(BaseModel):
    """Configured device record; role and type are free strings since other plugins share the list"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    role: str
    type: str
    enabled: bool = True
    plugin: PluginReference


class InboundEvent(BaseModel):
    """Raw hardware event tagged with the driver event name it arrived on"""
    family: str
    payload: Dict[str, Any]


class GatewayState(BaseModel):
    """Result of the transceiver handshake, fixed once bootstrap completes"""
    model_config = ConfigDict(frozen=True)

    listen_only: bool
    configured: Tuple[str, ...] = ()
    reported: Optional[Tuple[str, ...]] = None
    restart_required: bool = False
