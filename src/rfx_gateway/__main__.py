# src/rfx_gateway/__main__.py
import asyncio
import signal
import sys
import traceback
import yaml
from pathlib import Path
from typing import Optional
from fastapi import FastAPI
from hypercorn.asyncio import serve
from hypercorn.config import Config as HyperConfig
from pydantic import ValidationError

from rfx_gateway.adapters.factory import TransceiverFactory
from rfx_gateway.api.routes import create_app
from rfx_gateway.core.communication_service import CommunicationService
from rfx_gateway.core.event_manager import EventManager
from rfx_gateway.core.gateway import RfxGateway
from rfx_gateway.models.config import GatewayConfig
from rfx_gateway.utils.exceptions import ConfigurationError, InitializationError, RfxGatewayError
from rfx_gateway.utils.logging import setup_logging, get_logger

DEFAULT_CONFIG_PATH = Path("config/default.yml")

class ConfigManager:
    """Manages configuration loading and validation"""

    required_sections = ['api', 'communication', 'rfxcom', 'devices', 'logging']

    @classmethod
    def load_config(cls, config_path: str) -> GatewayConfig:
        """Load and validate configuration from YAML file"""
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError:
            raise ConfigurationError(f"Error parsing configuration file: {traceback.format_exc()}")
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file is empty or incorrectly formatted")

        missing_sections = [section for section in cls.required_sections if section not in config]
        if missing_sections:
            raise ConfigurationError(f"Missing required configuration sections: {', '.join(missing_sections)}")

        try:
            return GatewayConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

class APIServer:
    """Handles API server initialization and management"""

    def __init__(self, config: GatewayConfig, shutdown_event: asyncio.Event, app: FastAPI):
        self.config = config
        self.shutdown_event = shutdown_event
        self.app = app
        self.logger = get_logger("API Server")

    async def start(self):
        hypercorn_config = HyperConfig()
        host = self.config.api.host
        port = self.config.api.port
        hypercorn_config.bind = [f"{host}:{port}"]

        async def shutdown_trigger():
            await self.shutdown_event.wait()

        self.logger.info(f"Starting API server on {host}:{port}")
        await serve(self.app, hypercorn_config, shutdown_trigger=shutdown_trigger)

class RfxGatewayApp:
    """Main application: signal bus, MQTT bridge, transceiver gateway and API"""

    def __init__(self, config_path: str):
        self.logger = get_logger("Main App")
        try:
            self.config = ConfigManager.load_config(config_path)
            setup_logging(self.config.logging or {})
        except ConfigurationError:
            self.logger.error(f"Configuration error: {traceback.format_exc()}")
            sys.exit(1)

        self.shutdown_event = asyncio.Event()
        self.event_manager = EventManager()
        self.communication_service: Optional[CommunicationService] = None
        self.gateway: Optional[RfxGateway] = None
        self.api_server: Optional[APIServer] = None

    def create_gateway(self) -> RfxGateway:
        plugin = self.config.rfxcom
        transceiver = TransceiverFactory.create_driver(
            plugin.driver,
            plugin.settings.port,
            debug=plugin.debug,
            **plugin.driver_options
        )
        return RfxGateway(plugin, self.config.devices, transceiver, self.event_manager)

    async def initialize_components(self):
        asyncio.create_task(self.event_manager.process_events())

        self.communication_service = CommunicationService(
            self.config.model_dump(), self.event_manager
        )
        await self.communication_service.initialize()

        self.gateway = self.create_gateway()
        self.api_server = APIServer(self.config, self.shutdown_event, create_app(self.gateway))

    async def start_gateway(self):
        """Run the transceiver handshake; a failure disables only the gateway"""
        if not self.config.rfxcom.enabled:
            self.logger.warning(f"{self.config.rfxcom.id} plugin disabled in configuration")
            return
        try:
            await self.gateway.initialize()
        except InitializationError:
            self.logger.error(f"{self.config.rfxcom.id} plugin is not functional: {traceback.format_exc()}")

    async def shutdown(self):
        """Gracefully shutdown all components"""
        self.logger.info("Initiating shutdown sequence")
        try:
            if self.gateway:
                await self.gateway.shutdown()
            if self.communication_service:
                await self.communication_service.shutdown()
            self.logger.info("Shutdown completed successfully")
        except RfxGatewayError:
            self.logger.error(f"Error during shutdown: {traceback.format_exc()}")
        finally:
            self.shutdown_event.set()

    def handle_signals(self):
        """Set up signal handlers for graceful shutdown"""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(self._on_signal(s)))

    async def _on_signal(self, signum):
        self.logger.info(f"Received signal {signum}")
        await self.shutdown()

    async def run(self):
        """Main application entry point"""
        try:
            self.handle_signals()
            await self.initialize_components()
            await asyncio.gather(
                self.start_gateway(),
                self.api_server.start()
            )
        except RfxGatewayError:
            self.logger.error(f"Startup error: {traceback.format_exc()}")
            await self.shutdown()
            sys.exit(1)

def create_default_config(config_path: Path):
    """Create default configuration file if it doesn't exist"""
    if not config_path.exists():
        example_config = """
api:
  host: "0.0.0.0"
  port: 8000

communication:
  mqtt:
    enabled: false
    host: "localhost"
    port: 1883
    topic_prefix: "rfxcom"

rfxcom:
  id: "RFXCOM"
  driver: "loopback"
  driver_options:
    enabled_protocols: ["AC", "ARC", "OREGON"]
  settings:
    port: "/dev/ttyUSB0"
    listenOnly: false
    enabledProtocols: ["AC", "ARC", "OREGON"]

devices:
  - id: "light1"
    name: "Living room light"
    role: "output"
    type: "switch"
    plugin:
      id: "RFXCOM"
      deviceId: "Lighting2/AC-0x01"
  - id: "temp1"
    name: "Living room temperature"
    role: "input"
    type: "temperature"
    plugin:
      id: "RFXCOM"
      deviceId: "TemperatureHumidity1/THGN122-0x6801"

logging:
  level: "INFO"
  file: "logs/rfx_gateway.log"
  max_size: 10
  backup_count: 5
  format: "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"
"""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(example_config)
        print(f"Created default config at {config_path}")

def main():
    """Application entry point"""
    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    create_default_config(config_path)

    app = RfxGatewayApp(str(config_path))
    asyncio.run(app.run())

if __name__ == "__main__":
    main()
