"""Shared fixtures: an in-memory device and the default sensor catalog."""

import pytest

from sensor_gateway.models.sensor_models import SensorDefinition, SensorKind
from sensor_gateway.protocols.base_stack import TransportConfig
from sensor_gateway.protocols.loopback_stack import LoopbackDevice
from sensor_gateway.services.catalog_service import SensorCatalog
from sensor_gateway.services.object_registry import ObjectRegistry


@pytest.fixture
def catalog():
    """Catalog with the three default sensors."""
    return SensorCatalog()


@pytest.fixture
def device():
    """Loopback device with an empty object table."""
    return LoopbackDevice(1234, "Test Gateway")


@pytest.fixture
def registry(device):
    return ObjectRegistry(device)


@pytest.fixture
def transport():
    """Transport that retries quickly."""
    return TransportConfig("127.0.0.1", 24, 47808, max_retries=3, retry_delay=0.001)


@pytest.fixture
def temp_sensor():
    return SensorDefinition(1001, "Room 101 Temp", SensorKind.ANALOG, "degreesCelsius")


@pytest.fixture
def motion_sensor():
    return SensorDefinition(1003, "Room 103 Motion", SensorKind.BINARY)
