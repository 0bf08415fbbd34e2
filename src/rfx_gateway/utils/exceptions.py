# src/rfx_gateway/utils/exceptions.py
from typing import List, Sequence

class RfxGatewayError(Exception):
    """Base exception class for the RFXcom gateway"""
    pass

class ConfigurationError(RfxGatewayError):
    """Raised when there are issues with configuration"""
    pass

class InitializationError(RfxGatewayError):
    """Raised when the transceiver handshake or component startup fails"""
    pass

class CommunicationError(RfxGatewayError):
    """Raised when communication with external services fails"""
    pass

class TransceiverError(RfxGatewayError):
    """Raised when the transceiver driver rejects an operation"""
    pass

class GatewayNotReadyError(RfxGatewayError):
    """Raised when a signal is submitted before bootstrap has finished"""
    pass

class MalformedIdentifierError(RfxGatewayError):
    """Raised when a device id string lacks its required delimiters"""
    pass

class UnknownProtocolError(RfxGatewayError):
    """Raised when a device id names a protocol family or subtype without a handler"""
    pass

class UnsupportedCommandError(RfxGatewayError):
    """Raised when a generic verb has no protocol command"""
    pass

class ReconciliationMismatch(RfxGatewayError):
    """Raised after the transceiver was reprogrammed; a restart is required"""
    def __init__(self, configured: Sequence[str], reported: Sequence[str]):
        self.configured: List[str] = list(configured)
        self.reported: List[str] = list(reported)
        super().__init__(
            f"Enabled protocols {self.reported} on hardware differ from configured "
            f"{self.configured}; restart required"
        )
