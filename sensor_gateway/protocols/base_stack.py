"""
Protocol Stack Framework
Base abstract classes for the protocol stack that serves sensor objects
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import asyncio
import ipaddress
import logging
from enum import Enum

from sensor_gateway.core.exceptions import ConfigurationError, ProtocolError
from sensor_gateway.models.sensor_models import ObjectId, Reading, SensorKind

BACNET_PORT = 0xBAC0   # 47808


class StackType(Enum):
    """Enumeration of supported protocol stacks."""
    BACNET_IP = "bacnet_ip"
    LOOPBACK = "loopback"


class PropertyId(Enum):
    """Object properties the gateway writes."""
    PRESENT_VALUE = "presentValue"
    OUT_OF_SERVICE = "outOfService"


class TransportConfig:
    """Network parameters for bringing up the local device."""

    def __init__(self,
                 bind_address: str,
                 subnet_prefix: int = 24,
                 port: int = BACNET_PORT,
                 max_retries: int = 3,
                 retry_delay: float = 1.0,
                 max_retry_delay: float = 30.0):
        self.bind_address = bind_address
        self.subnet_prefix = subnet_prefix
        self.port = port
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay

    @property
    def address_spec(self) -> str:
        """Address in the ``host/prefix:port`` form the BACnet/IP stack accepts."""
        return f"{self.bind_address}/{self.subnet_prefix}:{self.port}"

    def validate(self):
        """Raise ConfigurationError for malformed network settings."""
        try:
            ipaddress.IPv4Address(self.bind_address)
        except (ipaddress.AddressValueError, ValueError) as e:
            raise ConfigurationError(f"Invalid bind address {self.bind_address!r}: {e}") from e
        if not isinstance(self.subnet_prefix, int) or not 0 <= self.subnet_prefix <= 32:
            raise ConfigurationError(f"Invalid subnet prefix: {self.subnet_prefix!r}")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port!r}")
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")

    def __repr__(self):
        return f"TransportConfig({self.address_spec})"


class ProtocolObjectHandle(ABC):
    """
    Reference to a protocol object registered on a device.

    The handle is tagged with the sensor kind it serves; values cross this
    boundary as plain Python readings (float for analog, bool for binary).
    """

    def __init__(self, object_id: ObjectId, kind: Optional[SensorKind]):
        self.object_id = object_id
        self.kind = kind
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def current_value(self) -> Reading:
        pass

    @property
    @abstractmethod
    def out_of_service(self) -> bool:
        pass

    @abstractmethod
    def _store(self, property_id: PropertyId, value: Any):
        """Write a validated value into the underlying object."""
        pass

    def write_property(self, property_id: PropertyId, value: Any) -> bool:
        """Write one property; returns False when the stack rejects the write."""
        try:
            self._check(property_id, value)
            self._store(property_id, value)
            return True
        except Exception as e:
            self.logger.error(f"Write of {property_id.value} on {self.object_id} rejected: {e}")
            return False

    def _check(self, property_id: PropertyId, value: Any):
        if self.kind is None:
            raise TypeError(f"{self.object_id} is not a sensor input")
        if property_id is PropertyId.PRESENT_VALUE and not self.kind.accepts(value):
            raise TypeError(f"{type(value).__name__} is not a valid {self.kind.value} present value")
        if property_id is PropertyId.OUT_OF_SERVICE and not isinstance(value, bool):
            raise TypeError("outOfService must be a bool")

    def __repr__(self):
        return f"{self.__class__.__name__}({self.object_id}, name={self.name!r})"


class DeviceHandle(ABC):
    """The local device that owns and serves protocol objects."""

    def __init__(self, device_id: int, device_name: str):
        self.device_id = device_id
        self.device_name = device_name
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_object(self, object_id: ObjectId) -> Optional[ProtocolObjectHandle]:
        """Return the object registered under *object_id*, if any."""
        pass

    @abstractmethod
    def create_object(self, object_id: ObjectId, name: str,
                      initial_value: Reading, units: Optional[str] = None) -> ProtocolObjectHandle:
        """Construct (but do not register) a new object of the kind implied by *object_id*."""
        pass

    @abstractmethod
    def add_object(self, handle: ProtocolObjectHandle) -> bool:
        """Register an object with the device; False when the device refuses it."""
        pass

    @abstractmethod
    def broadcast_discovery_announcement(self):
        """Announce the device on the network (I-Am)."""
        pass


class ProtocolStack(ABC):
    """
    Abstract base class for protocol stacks.

    Implements the Template Method pattern: bring-up validation and retry
    are common, the actual device creation is stack specific.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.retry_count = 0

    async def bring_up_device(self, device_id: int, device_name: str,
                              transport: TransportConfig) -> DeviceHandle:
        """Validate the transport and bring up the local device, retrying with backoff."""
        transport.validate()
        self.retry_count = 0

        while True:
            try:
                self.logger.info(f"Bringing up device {device_id} ({device_name}) on {transport.address_spec}")
                device = await self._bring_up(device_id, device_name, transport)
                self.logger.info(f"Device {device_id} is up")
                return device

            except ConfigurationError:
                raise
            except Exception as e:
                self.retry_count += 1

                if self.retry_count >= transport.max_retries:
                    raise ProtocolError(
                        f"Failed to bring up device {device_id} after {transport.max_retries} attempts: {e}"
                    ) from e

                # Exponential backoff
                delay = min(
                    transport.retry_delay * (2 ** (self.retry_count - 1)),
                    transport.max_retry_delay
                )

                self.logger.warning(f"Bring-up attempt {self.retry_count} failed: {e}. Retrying in {delay:.2f}s...")
                await asyncio.sleep(delay)

    async def terminate(self, device: DeviceHandle):
        """Release the device and its transport."""
        try:
            await self._terminate(device)
        except Exception as e:
            raise ProtocolError(f"Failed to terminate device {device.device_id}: {e}") from e
        self.logger.info(f"Device {device.device_id} terminated")

    @abstractmethod
    async def _bring_up(self, device_id: int, device_name: str,
                        transport: TransportConfig) -> DeviceHandle:
        pass

    @abstractmethod
    async def _terminate(self, device: DeviceHandle):
        pass

    def get_stats(self) -> Dict[str, Any]:
        return {
            "stack": self.__class__.__name__,
            "retry_count": self.retry_count,
        }
