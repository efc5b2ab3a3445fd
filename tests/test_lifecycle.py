"""Tests for GatewayLifecycle on the loopback stack."""

import asyncio

import pytest

from sensor_gateway.core.exceptions import ConfigurationError, ProtocolError
from sensor_gateway.core.patterns.state_machine import SchedulerState
from sensor_gateway.orchestration import GatewayLifecycle, LifecycleState, LifecycleStateMachine
from sensor_gateway.protocols.base_stack import TransportConfig
from sensor_gateway.protocols.loopback_stack import LoopbackStack
from sensor_gateway.providers import FixedValueProvider, MockValueProvider
from sensor_gateway.services.catalog_service import SensorCatalog


class RecordingStack(LoopbackStack):
    """Records the scheduler state seen when the device is terminated."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.lifecycle = None
        self.scheduler_state_at_terminate = None

    async def _terminate(self, device):
        scheduler = self.lifecycle.scheduler if self.lifecycle else None
        self.scheduler_state_at_terminate = scheduler.state if scheduler else None
        await super()._terminate(device)


class BrokenTeardownStack(LoopbackStack):
    async def _terminate(self, device):
        raise OSError("socket already closed")


def make_lifecycle(stack=None, transport=None, provider=None, catalog=None, interval=60.0):
    lifecycle = GatewayLifecycle(
        stack=stack if stack is not None else RecordingStack(),
        catalog=catalog if catalog is not None else SensorCatalog(),
        provider=provider if provider is not None else MockValueProvider(),
        transport=transport if transport is not None else TransportConfig("127.0.0.1", retry_delay=0.001),
        device_id=1234,
        device_name="Test Gateway",
        interval_seconds=interval,
        provider_timeout=1.0,
    )
    if isinstance(lifecycle.context["stack"], RecordingStack):
        lifecycle.context["stack"].lifecycle = lifecycle
    return lifecycle


class TestStartup:

    def test_full_startup(self):
        lifecycle = make_lifecycle()

        async def go():
            assert await lifecycle.startup() is True
            await asyncio.sleep(0.01)
            try:
                assert lifecycle.state_machine.current_state is LifecycleState.OPERATIONAL
                assert lifecycle.device.online
                assert lifecycle.device.announcements == 1
                assert len(lifecycle.registry) == 3
                assert lifecycle.scheduler.state is SchedulerState.RUNNING
                assert lifecycle.scheduler.tick_count == 1
            finally:
                await lifecycle.shutdown()

        asyncio.run(go())

    def test_every_sensor_written_after_first_tick(self):
        provider = FixedValueProvider({"values": {1001: 21.5, 1002: 612.0, 1003: True}})
        lifecycle = make_lifecycle(provider=provider)

        async def go():
            await lifecycle.startup()
            await asyncio.sleep(0.01)
            values = {i: lifecycle.registry.get(i).current_value for i in (1001, 1002, 1003)}
            await lifecycle.shutdown()
            return values

        assert asyncio.run(go()) == {1001: 21.5, 1002: 612.0, 1003: True}

    def test_bring_up_failure_is_fatal(self):
        stack = RecordingStack(fail_bring_up=10)
        lifecycle = make_lifecycle(stack=stack)

        async def go():
            ok = await lifecycle.startup()
            await lifecycle.shutdown()
            return ok

        assert asyncio.run(go()) is False
        assert lifecycle.device is None
        assert lifecycle.scheduler is None
        assert lifecycle.state_machine.current_state is LifecycleState.SHUTDOWN

    def test_bring_up_retries(self):
        stack = RecordingStack(fail_bring_up=2)
        lifecycle = make_lifecycle(stack=stack)

        async def go():
            ok = await lifecycle.startup()
            await lifecycle.shutdown()
            return ok

        assert asyncio.run(go()) is True
        assert stack.retry_count == 2

    def test_invalid_transport_is_fatal(self):
        lifecycle = make_lifecycle(transport=TransportConfig("10.0.0.300"))
        assert asyncio.run(lifecycle.startup()) is False
        assert lifecycle.context["stack"].devices == {}

    def test_partial_registration_still_starts(self):
        catalog = SensorCatalog([
            {"id": 1, "name": "Dup", "type": "AI"},
            {"id": 2, "name": "Dup", "type": "AI"},
            {"id": 3, "name": "Ok", "type": "BI"},
            {"id": 4, "name": "Bad", "type": "ZZ"},
        ])
        lifecycle = make_lifecycle(catalog=catalog)

        async def go():
            ok = await lifecycle.startup()
            await asyncio.sleep(0.01)
            report = lifecycle.scheduler.last_report
            await lifecycle.shutdown()
            return ok, report

        ok, report = asyncio.run(go())
        assert ok is True
        assert lifecycle.registry is None          # released on shutdown
        assert (report.written, report.skipped) == (2, 1)

    def test_empty_catalog_is_kept(self):
        lifecycle = make_lifecycle(catalog=SensorCatalog([]))

        async def go():
            ok = await lifecycle.startup()
            count = len(lifecycle.registry)
            await lifecycle.shutdown()
            return ok, count

        assert asyncio.run(go()) == (True, 0)

    def test_failed_registration_releases_device(self, monkeypatch):
        catalog = SensorCatalog()

        def unavailable():
            raise RuntimeError("catalog store unavailable")
        monkeypatch.setattr(catalog, "list", unavailable)
        lifecycle = make_lifecycle(catalog=catalog)

        assert asyncio.run(lifecycle.startup()) is False
        assert lifecycle.context["stack"].terminated == [1234]
        assert lifecycle.device is None

    def test_failed_startup_reports_teardown_failure(self, monkeypatch):
        catalog = SensorCatalog()

        def unavailable():
            raise RuntimeError("catalog store unavailable")
        monkeypatch.setattr(catalog, "list", unavailable)
        lifecycle = make_lifecycle(stack=BrokenTeardownStack(), catalog=catalog)

        with pytest.raises(ProtocolError, match="Teardown failed"):
            asyncio.run(lifecycle.startup())
        assert lifecycle.state_machine.current_state is LifecycleState.ERROR_RECOVERY

    def test_announcement_failure_is_not_fatal(self, monkeypatch):
        stack = RecordingStack()
        lifecycle = make_lifecycle(stack=stack)

        async def go():
            real_bring_up = stack._bring_up

            async def bring_up(*args):
                device = await real_bring_up(*args)

                def broken():
                    raise OSError("broadcast not permitted")
                device.broadcast_discovery_announcement = broken
                return device

            monkeypatch.setattr(stack, "_bring_up", bring_up)
            ok = await lifecycle.startup()
            announced = lifecycle.context.get("announced")
            await lifecycle.shutdown()
            return ok, announced

        assert asyncio.run(go()) == (True, False)


class TestShutdown:

    def test_scheduler_stopped_before_device_terminated(self):
        lifecycle = make_lifecycle()
        stack = lifecycle.context["stack"]

        async def go():
            await lifecycle.startup()
            await lifecycle.shutdown()

        asyncio.run(go())
        assert stack.scheduler_state_at_terminate is SchedulerState.STOPPED
        assert stack.terminated == [1234]

    def test_shutdown_is_idempotent(self):
        lifecycle = make_lifecycle()

        async def go():
            await lifecycle.startup()
            await lifecycle.shutdown()
            await lifecycle.shutdown()

        asyncio.run(go())
        assert lifecycle.context["stack"].terminated == [1234]

    def test_teardown_failure_propagates(self):
        lifecycle = make_lifecycle(stack=BrokenTeardownStack())

        async def go():
            await lifecycle.startup()
            await lifecycle.shutdown()

        with pytest.raises(ProtocolError):
            asyncio.run(go())
        assert lifecycle.scheduler.state is SchedulerState.STOPPED

    def test_restart_adopts_objects_from_persistent_device(self):
        stack = RecordingStack()

        async def run_once():
            lifecycle = make_lifecycle(stack=stack)
            await lifecycle.startup()
            await lifecycle.shutdown()

        async def go():
            await run_once()
            await run_once()

        asyncio.run(go())
        assert len(stack.devices[1234].objects) == 3
        assert stack.terminated == [1234, 1234]


class TestRunUntilStopped:

    def test_request_stop(self):
        lifecycle = make_lifecycle(interval=0.01)

        async def go():
            await lifecycle.startup()
            asyncio.get_running_loop().call_later(0.05, lifecycle.request_stop)
            await lifecycle.run_until_stopped()
            await lifecycle.shutdown()

        asyncio.run(go())
        assert lifecycle.failure is None
        assert lifecycle.context["scheduler"].tick_count >= 2

    def test_scheduler_failure_ends_run(self):
        class BrokenAfterSetup(SensorCatalog):
            calls = 0

            def list(self):
                self.calls += 1
                if self.calls > 1:
                    raise RuntimeError("catalog store unavailable")
                return super().list()

        lifecycle = make_lifecycle(catalog=BrokenAfterSetup())

        async def go():
            assert await lifecycle.startup() is True
            await asyncio.wait_for(lifecycle.run_until_stopped(), timeout=1.0)
            await lifecycle.shutdown()

        asyncio.run(go())
        assert isinstance(lifecycle.failure, RuntimeError)
        assert lifecycle.context["stack"].terminated == [1234]


class TestFromSettings:

    def test_builds_components(self, tmp_path):
        catalog_file = tmp_path / "sensors.json"
        catalog_file.write_text('[{"id": 5, "name": "Lab Temp", "type": "AI"}]')

        class settings:
            DEVICE_ID = 77
            DEVICE_NAME = "Lab Gateway"
            BACNET_ADDRESS = "192.168.1.10"
            BACNET_SUBNET_PREFIX = 24
            BACNET_PORT = 47808
            BRING_UP_RETRIES = 2
            PROTOCOL_STACK = "loopback"
            VALUE_PROVIDER = "fixed"
            SENSOR_CATALOG_FILE = str(catalog_file)
            POLL_INTERVAL_SECONDS = 30.0
            PROVIDER_TIMEOUT_SECONDS = 5.0

            @classmethod
            def provider_config(cls):
                return {"values": {"5": 19.0}}

        lifecycle = GatewayLifecycle.from_settings(settings)
        assert isinstance(lifecycle.context["stack"], LoopbackStack)
        assert isinstance(lifecycle.context["provider"], FixedValueProvider)
        assert [s.id for s in lifecycle.context["catalog"].list()] == [5]
        assert lifecycle.context["transport"].address_spec == "192.168.1.10/24:47808"
        assert lifecycle.context["interval_seconds"] == 30.0

    def test_unknown_provider(self):
        class settings:
            PROTOCOL_STACK = "loopback"
            VALUE_PROVIDER = "nope"
            SENSOR_CATALOG_FILE = None

            @classmethod
            def provider_config(cls):
                return {}

        with pytest.raises(ConfigurationError):
            GatewayLifecycle.from_settings(settings)

    def test_provider_config_json(self, monkeypatch):
        from config.app_config import settings

        monkeypatch.setattr(settings, "VALUE_PROVIDER_CONFIG", '{"seed": 3}')
        assert settings.provider_config() == {"seed": 3}

        monkeypatch.setattr(settings, "VALUE_PROVIDER_CONFIG", "{seed")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            settings.provider_config()


class TestLifecycleStateMachine:

    def test_invalid_transition(self):
        sm = LifecycleStateMachine()
        assert sm.transition_to(LifecycleState.OPERATIONAL) is False
        assert sm.current_state is LifecycleState.INITIALIZING

    def test_shutdown_is_terminal(self):
        sm = LifecycleStateMachine()
        assert sm.transition_to(LifecycleState.SHUTDOWN)
        assert not sm.can_transition_to(LifecycleState.DEVICE_BRING_UP)
