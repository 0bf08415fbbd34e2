from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional
from .device import DeviceConfig
from ..protocols.registry import PROTOCOL_FLAGS


class PluginSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    port: str = Field(..., description="Serial port of the transceiver")
    listen_only: bool = Field(False, alias="listenOnly", description="Only log received events")
    enabled_protocols: List[str] = Field(..., alias="enabledProtocols",
                                         description="Receiver protocols to enable on the firmware")

    @field_validator('enabled_protocols')
    def validate_protocols(cls, v):
        unknown = [name for name in v if name not in PROTOCOL_FLAGS]
        if unknown:
            raise ValueError(f"Unknown receiver protocols: {', '.join(unknown)}")
        return v


class PluginConfig(BaseModel):
    id: str = Field("RFXCOM", description="Plugin id referenced by device records")
    enabled: bool = True
    driver: str = Field("loopback", description="Registered transceiver driver name")
    debug: bool = False
    driver_options: Dict[str, Any] = Field(default_factory=dict, description="Extra driver constructor arguments")
    settings: PluginSettings


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000


class GatewayConfig(BaseModel):
    """Validated view of the YAML configuration file"""
    api: APIConfig
    communication: Dict[str, Any]
    rfxcom: PluginConfig
    devices: List[DeviceConfig]
    logging: Optional[Dict[str, Any]] = None
