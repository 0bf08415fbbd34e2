# src/rfx_gateway/api/routes.py
from fastapi import FastAPI
from ..core.gateway import RfxGateway
from .endpoints.devices import device_router

def create_app(gateway: RfxGateway) -> FastAPI:
    app = FastAPI(
        title="RFXcom Gateway API",
        description="Sends generic device signals to an RFXcom transceiver",
        version="1.0.0"
    )
    app.state.gateway = gateway
    app.include_router(device_router, prefix="/api/v1")
    return app
