"""
Centralised exception definitions for the BACnet sensor gateway.
All custom exceptions should inherit from GatewayError.
"""

class GatewayError(Exception):
    """Base class for every custom exception thrown by this project."""

class ConfigurationError(GatewayError):
    """Raised when catalog rows, transport settings or environment variables are invalid."""

class ProtocolError(GatewayError):
    """Failure inside the protocol stack (device bring-up, teardown, broadcast)."""

class RegistrationError(GatewayError):
    """Raised when a sensor object cannot be created, adopted or added to the device."""

class ProviderError(GatewayError):
    """Raised when a value provider cannot produce a reading."""

class SchedulerError(GatewayError):
    """Raised on an invalid scheduler lifecycle operation (e.g. restart after stop)."""
