from typing import List, Sequence
from ..adapters.base import ProtocolFlag, TransceiverDriver
from ..protocols.registry import PROTOCOL_FLAGS
from ..utils.exceptions import ConfigurationError, ReconciliationMismatch, TransceiverError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ProtocolReconciler:
    """Keeps the receiver protocol set on the transceiver equal to the configured one"""

    def __init__(self, transceiver: TransceiverDriver):
        self.transceiver = transceiver

    @staticmethod
    def protocol_flags(names: Sequence[str]) -> List[ProtocolFlag]:
        try:
            return [PROTOCOL_FLAGS[name] for name in names]
        except KeyError as e:
            raise ConfigurationError(f"Unknown receiver protocol: {e.args[0]}") from None

    async def reconcile(self, configured: Sequence[str], reported: Sequence[str]) -> None:
        """
        Compare configured and hardware-reported protocols, ignoring order.

        On a difference the firmware is reprogrammed once with the configured
        set. The firmware only applies it after a restart, so
        ReconciliationMismatch is raised once the command has completed.
        """
        configured_sorted = sorted(configured)
        reported_sorted = sorted(reported)

        logger.info("Checking enabled protocols on RFXcom device")

        if configured_sorted == reported_sorted:
            logger.info("Enabled protocols in config are the same as on hardware. Skipping setting protocols")
            return

        logger.warning("Enabled protocols in config are NOT the same as on hardware")
        logger.info("Enabling protocols in RFXcom device according to config...")

        flags = self.protocol_flags(configured_sorted)
        try:
            await self.transceiver.enable_protocols(flags)
        except OSError as e:
            raise TransceiverError(f"Enabling protocols failed: {e}") from e
        logger.error("Enabling protocols finished, please restart the gateway")
        raise ReconciliationMismatch(configured_sorted, reported_sorted)
