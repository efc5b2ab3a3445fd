"""Protocol stack implementations."""

from .base_stack import (
    BACNET_PORT,
    DeviceHandle,
    PropertyId,
    ProtocolObjectHandle,
    ProtocolStack,
    StackType,
    TransportConfig
)

from .bacnet_stack import BACnetDevice, BACnetIPStack, BACnetObjectHandle
from .loopback_stack import LoopbackDevice, LoopbackObject, LoopbackStack
from .protocol_factory import ProtocolFactory

__all__ = [
    # Base classes
    'BACNET_PORT',
    'DeviceHandle',
    'PropertyId',
    'ProtocolObjectHandle',
    'ProtocolStack',
    'StackType',
    'TransportConfig',

    # Implementations
    'BACnetDevice',
    'BACnetIPStack',
    'BACnetObjectHandle',
    'LoopbackDevice',
    'LoopbackObject',
    'LoopbackStack',

    # Factory
    'ProtocolFactory'
]
