# sensor_gateway/core/__init__.py
"""Core infrastructure components for the BACnet sensor gateway."""

# Import order: most fundamental to most specific

from .exceptions import (
    GatewayError,
    ConfigurationError,
    ProtocolError,
    RegistrationError,
    ProviderError,
    SchedulerError,
)

from .patterns.state_machine import StateMachine, SchedulerState


__all__ = [
    "StateMachine",
    "SchedulerState",
    "GatewayError",        # make available at package root
    "ConfigurationError",
    "ProtocolError",
    "RegistrationError",
    "ProviderError",
    "SchedulerError",
]
