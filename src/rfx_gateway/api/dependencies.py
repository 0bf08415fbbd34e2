# src/rfx_gateway/api/dependencies.py
from fastapi import Depends, HTTPException, Request
from typing import Annotated
from ..core.gateway import RfxGateway

async def get_gateway(request: Request) -> RfxGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Gateway not available")
    return gateway

GatewayDependency = Annotated[RfxGateway, Depends(get_gateway)]
