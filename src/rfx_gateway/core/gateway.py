# RFXcom gateway: bootstrap and outbound signal handling for one transceiver
import asyncio
import traceback
from typing import Any, Dict, Optional, Sequence, Set

from pydantic import ValidationError

from ..adapters.base import TransceiverDriver
from ..models.config import PluginConfig
from ..models.device import DeviceConfig, GatewayState, Signal, SignalSender
from ..utils.exceptions import (
    ConfigurationError,
    GatewayNotReadyError,
    InitializationError,
    ReconciliationMismatch,
    RfxGatewayError,
    TransceiverError,
)
from ..utils.logging import get_logger, pretty
from .device_registry import DeviceRegistry
from .dispatcher import EventDispatcher
from .event_manager import SIGNAL_BROADCAST, SIGNAL_OUTBOUND, EventManager
from .reconciler import ProtocolReconciler
from .translator import CommandTranslator, PendingCommand

logger = get_logger(__name__)


class RfxGateway:
    """
    Bridges the generic signal bus and one RF transceiver.

    ``initialize`` waits for the transceiver handshake and then either enters
    listen-only mode or reconciles protocols, binds listeners and starts
    accepting outbound signals. Until it returns the gateway is not ready.
    """

    def __init__(self, plugin_config: PluginConfig, devices: Sequence[DeviceConfig],
                 transceiver: TransceiverDriver, event_manager: EventManager):
        self.plugin_config = plugin_config
        self.settings = plugin_config.settings
        self.transceiver = transceiver
        self.event_manager = event_manager
        self.registry = DeviceRegistry(plugin_config.id, devices)
        self.dispatcher = EventDispatcher(plugin_config.id, transceiver, self.registry, self.broadcast)
        self.translator = CommandTranslator(transceiver, self.broadcast)
        self.reconciler = ProtocolReconciler(transceiver)
        self.state: Optional[GatewayState] = None
        self._status: Optional[asyncio.Future] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def ready(self) -> bool:
        return self.state is not None

    async def _on_status(self, status: Dict[str, Any]) -> None:
        logger.debug("Transceiver status:\n" + pretty(status))
        # First status event wins; later ones are only logged
        if self._status is not None and not self._status.done():
            self._status.set_result(tuple(status.get("enabledProtocols") or ()))

    async def initialize(self) -> GatewayState:
        logger.info(f"Initializing {self.plugin_config.id} on {self.settings.port}")
        self._status = asyncio.get_running_loop().create_future()
        self.transceiver.on("status", self._on_status)

        try:
            await self.transceiver.initialise()
        except Exception as e:
            logger.error(f"Initialisation of {self.plugin_config.id} failed: {traceback.format_exc()}")
            raise InitializationError(f"Transceiver handshake on {self.settings.port} failed: {e}") from e

        configured = tuple(self.settings.enabled_protocols)
        if self.settings.listen_only:
            self.dispatcher.listen_all()
            logger.warning("Listen mode active")
            state = GatewayState(listen_only=True, configured=configured)
        else:
            reported = await self._status
            restart_required = False
            try:
                await self.reconciler.reconcile(configured, reported)
            except ReconciliationMismatch as e:
                logger.warning(str(e))
                restart_required = True
            except (ConfigurationError, TransceiverError) as e:
                logger.error(f"Protocol setup of {self.plugin_config.id} failed: {e}")
                raise InitializationError(f"Protocol setup on {self.settings.port} failed: {e}") from e

            self.dispatcher.bind()
            await self.event_manager.subscribe(SIGNAL_OUTBOUND, self.on_signal_received)
            state = GatewayState(
                listen_only=False,
                configured=configured,
                reported=reported,
                restart_required=restart_required
            )

        self.state = state
        logger.info(f"{self.plugin_config.id} plugin ready for sending / receiving data")
        return state

    async def broadcast(self, signal: Signal) -> None:
        await self.event_manager.publish(SIGNAL_BROADCAST, signal.to_payload())

    def _translate(self, signal: Signal) -> Optional[PendingCommand]:
        if not self.ready:
            raise GatewayNotReadyError(f"{self.plugin_config.id} is not initialised")
        if self.state.listen_only:
            logger.debug(f"Listen mode active, ignoring signal for {signal.device_id}")
            return None
        if signal.sender == SignalSender.HARDWARE_ECHO:
            # Originated from the hardware; sending it back would loop
            return None
        return self.translator.translate(signal)

    async def on_signal_received(self, payload: Dict[str, Any]) -> None:
        """Bus handler for outbound signals; failures are logged and dropped"""
        try:
            signal = Signal.model_validate(payload)
            command = self._translate(signal)
            if command is not None:
                await command.execute()
        except ValidationError as e:
            logger.error(f"Invalid signal payload {payload}: {e}")
        except RfxGatewayError as e:
            logger.error(f"Dropping signal {payload}: {e}")

    def submit_signal(self, signal: Signal) -> Optional[PendingCommand]:
        """
        Translate a signal and send it in the background.

        Translation errors are raised to the caller; the hardware call and the
        confirmation echo run as a task.
        """
        command = self._translate(signal)
        if command is None:
            return None
        task = asyncio.create_task(self._execute(command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return command

    async def _execute(self, command: PendingCommand) -> None:
        try:
            await command.execute()
        except Exception:
            logger.error(f"Command for {command.signal.device_id} failed: {traceback.format_exc()}")

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.transceiver.close()
