"""Tests for value providers and their factory."""

import asyncio

import pytest

from sensor_gateway.core.exceptions import ConfigurationError
from sensor_gateway.models.sensor_models import SensorKind
from sensor_gateway.providers import (
    FixedValueProvider,
    MockValueProvider,
    ValueProvider,
    ValueProviderFactory,
)


def read_many(provider, sensor_id, n=500, kind=None):
    async def go():
        return [await provider.read(sensor_id, kind) for _ in range(n)]
    return asyncio.run(go())


class TestMockValueProvider:

    def test_temperature_range(self):
        values = read_many(MockValueProvider(), 1001)
        assert all(isinstance(v, float) for v in values)
        assert all(20.0 <= v < 25.0 for v in values)

    def test_co2_range(self):
        values = read_many(MockValueProvider(), 1002)
        assert all(400.0 <= v < 800.0 for v in values)

    def test_motion_is_boolean(self):
        values = read_many(MockValueProvider({"seed": 3}), 1003)
        assert all(isinstance(v, bool) for v in values)
        assert set(values) == {True, False}

    def test_unknown_id_defaults(self):
        provider = MockValueProvider()
        assert asyncio.run(provider.read(9999)) == 0.0
        assert asyncio.run(provider.read(9999, SensorKind.ANALOG)) == 0.0
        assert asyncio.run(provider.read(9999, SensorKind.BINARY)) is False

    def test_seed_is_deterministic(self):
        a = read_many(MockValueProvider({"seed": 11}), 1001, n=10)
        b = read_many(MockValueProvider({"seed": 11}), 1001, n=10)
        assert a == b

    def test_configured_ranges(self):
        provider = MockValueProvider({"ranges": {"5": [1.0, 2.0], "6": "binary"}})
        assert all(1.0 <= v < 2.0 for v in read_many(provider, 5, n=50))
        assert all(isinstance(v, bool) for v in read_many(provider, 6, n=10))
        # defaults are replaced, not merged
        assert asyncio.run(provider.read(1001)) == 0.0

    def test_empty_range_rejected(self):
        with pytest.raises(ValueError):
            MockValueProvider({"ranges": {"5": [2.0, 2.0]}})


class TestFixedValueProvider:

    def test_configured_values(self):
        provider = FixedValueProvider({"values": {"1001": 21.0, "1003": True}})
        assert asyncio.run(provider.read(1001)) == 21.0
        assert asyncio.run(provider.read(1003)) is True

    def test_unknown_id_defaults(self):
        provider = FixedValueProvider()
        assert asyncio.run(provider.read(1, SensorKind.BINARY)) is False
        assert asyncio.run(provider.read(1)) == 0.0


class TestValueProviderFactory:

    def test_create_by_name(self):
        assert isinstance(ValueProviderFactory.create("mock"), MockValueProvider)
        assert isinstance(ValueProviderFactory.create(" Fixed ", {"values": {}}), FixedValueProvider)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="available"):
            ValueProviderFactory.create("modbus")

    def test_register_provider(self):
        class ConstantProvider(ValueProvider):
            async def read(self, sensor_id, kind=None):
                return 1.5

        ValueProviderFactory.register_provider("Constant", ConstantProvider)
        try:
            assert "constant" in ValueProviderFactory.get_available_providers()
            provider = ValueProviderFactory.create("CONSTANT")
            assert asyncio.run(provider.read(1)) == 1.5
        finally:
            ValueProviderFactory._provider_registry.pop("constant")

    def test_metadata(self):
        meta = ValueProviderFactory.create("mock", {"seed": 1}).get_metadata()
        assert meta["provider_type"] == "MockValueProvider"
        assert meta["config"] == {"seed": 1}

    def test_bad_config_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="provider config"):
            ValueProviderFactory.create("mock", {"ranges": {"5": [3.0, 1.0]}})
