from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Any, Dict
from ..dependencies import GatewayDependency
from ...models.device import Signal
from ...utils.exceptions import (
    GatewayNotReadyError,
    MalformedIdentifierError,
    UnknownProtocolError,
    UnsupportedCommandError,
)
from ...utils.logging import get_logger

logger = get_logger(__name__)

device_router = APIRouter()


'''
# Switch a device
response = await client.post("/api/v1/devices/Lighting2/AC-0x01/signal", json={"state": "on"})
'''

class SignalRequest(BaseModel):
    state: str


@device_router.get("/status")
async def get_status(gateway: GatewayDependency) -> Dict[str, Any]:
    return {
        "plugin": gateway.plugin_config.id,
        "ready": gateway.ready,
        "state": gateway.state.model_dump() if gateway.state else None
    }


@device_router.get("/devices")
async def list_devices(gateway: GatewayDependency) -> Dict[str, Any]:
    return {
        "devices": [device.model_dump(by_alias=True) for device in gateway.dispatcher.attached_devices],
        "listeners": sorted(gateway.dispatcher.registrations)
    }


@device_router.post("/devices/{device_id:path}/signal", status_code=202)
async def send_signal(device_id: str, request: SignalRequest, gateway: GatewayDependency) -> Dict[str, str]:
    signal = Signal(device_id=device_id, data={"state": request.state})
    try:
        command = gateway.submit_signal(signal)
    except GatewayNotReadyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except UnknownProtocolError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (MalformedIdentifierError, UnsupportedCommandError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    if command is None:
        return {"status": "ignored", "message": "Listen mode active"}

    logger.info(f"Command {command.method} accepted for {device_id}")
    return {"status": "accepted", "command": command.method}
