from typing import Any, Dict, List, Optional
import asyncio
import logging
import signal

from sensor_gateway.core.exceptions import ProtocolError
from sensor_gateway.protocols.base_stack import ProtocolStack, TransportConfig
from sensor_gateway.protocols.protocol_factory import ProtocolFactory
from sensor_gateway.providers.base_provider import ValueProvider
from sensor_gateway.providers.provider_factory import ValueProviderFactory
from sensor_gateway.services.catalog_service import SensorCatalog
from .state_machine import LifecycleStateMachine, LifecycleState
from .commands import (
    LifecycleCommand,
    DeviceBringUpCommand,
    ObjectRegistrationCommand,
    SchedulerStartupCommand,
    PresenceAnnouncementCommand
)

class GatewayLifecycle:
    """Startup sequencing and graceful shutdown using command pattern and state machine"""

    def __init__(self,
                 stack: ProtocolStack,
                 catalog: SensorCatalog,
                 provider: ValueProvider,
                 transport: TransportConfig,
                 device_id: int = 1234,
                 device_name: str = "BACnet IoT Gateway",
                 interval_seconds: float = 120.0,
                 provider_timeout: Optional[float] = 10.0):
        self.state_machine = LifecycleStateMachine()
        self.context: Dict[str, Any] = {
            "stack": stack,
            "catalog": catalog,
            "provider": provider,
            "transport": transport,
            "device_id": device_id,
            "device_name": device_name,
            "interval_seconds": interval_seconds,
            "provider_timeout": provider_timeout,
        }
        self.executed_commands: List[LifecycleCommand] = []
        self.failure: Optional[BaseException] = None
        self._stop_event = asyncio.Event()
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(cls, settings) -> "GatewayLifecycle":
        """Build the lifecycle from the application settings object"""
        if settings.SENSOR_CATALOG_FILE:
            catalog = SensorCatalog.from_file(settings.SENSOR_CATALOG_FILE)
        else:
            catalog = SensorCatalog()

        return cls(
            stack=ProtocolFactory.create(settings.PROTOCOL_STACK),
            catalog=catalog,
            provider=ValueProviderFactory.create(settings.VALUE_PROVIDER, settings.provider_config()),
            transport=TransportConfig(
                bind_address=settings.BACNET_ADDRESS,
                subnet_prefix=settings.BACNET_SUBNET_PREFIX,
                port=settings.BACNET_PORT,
                max_retries=settings.BRING_UP_RETRIES,
            ),
            device_id=settings.DEVICE_ID,
            device_name=settings.DEVICE_NAME,
            interval_seconds=settings.POLL_INTERVAL_SECONDS,
            provider_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )

    # convenience accessors
    @property
    def device(self):
        return self.context.get("device")

    @property
    def registry(self):
        return self.context.get("registry")

    @property
    def scheduler(self):
        return self.context.get("scheduler")

    async def startup(self) -> bool:
        """Execute startup sequence using command pattern; raises ProtocolError if the rollback fails"""
        command_sequence = [
            (DeviceBringUpCommand, LifecycleState.DEVICE_BRING_UP),
            (ObjectRegistrationCommand, LifecycleState.OBJECT_REGISTRATION),
            (SchedulerStartupCommand, LifecycleState.SCHEDULER_STARTUP),
            (PresenceAnnouncementCommand, LifecycleState.ANNOUNCEMENT),
        ]

        try:
            completed = await self._run_commands(command_sequence)
        except Exception as e:
            self.logger.error(f"Gateway startup failed: {e}")
            completed = False

        if not completed:
            await self._abort_startup()
            return False

        self.state_machine.transition_to(LifecycleState.OPERATIONAL)
        self.logger.info("Gateway running")
        return True

    async def _run_commands(self, command_sequence) -> bool:
        for command_class, target_state in command_sequence:
            # Transition state
            if not self.state_machine.transition_to(target_state):
                raise RuntimeError(f"Failed to transition to {target_state}")

            # Execute command
            command = command_class(self.context)
            result = await command.execute()

            if not result.get("success", False):
                self.logger.error(f"Startup aborted at {target_state.name}: {result.get('error')}")
                return False

            # Update context with command results
            self.context.update(result)
            self.executed_commands.append(command)
        return True

    def request_stop(self):
        """Ask run_until_stopped() to return; safe to call from a signal handler"""
        if not self._stop_event.is_set():
            self.logger.info("Stop requested")
            self._stop_event.set()

    def install_signal_handlers(self):
        """Route SIGINT/SIGTERM to request_stop()"""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self.request_stop)
            except NotImplementedError:
                # event loops without signal support (Windows)
                signal.signal(signum, lambda s, f: loop.call_soon_threadsafe(self.request_stop))

    async def run_until_stopped(self):
        """Wait for a stop request or an unrecoverable scheduler failure"""
        stop_wait = asyncio.ensure_future(self._stop_event.wait())
        waiters = {stop_wait}
        scheduler_task = self.scheduler.task if self.scheduler else None
        if scheduler_task is not None:
            waiters.add(scheduler_task)

        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_wait.cancel()

        if scheduler_task in done and not scheduler_task.cancelled() and scheduler_task.exception():
            self.failure = scheduler_task.exception()
            self.logger.critical(f"Scheduler terminated: {self.failure}")

    async def shutdown(self):
        """Stop the scheduler, then release the device; raises ProtocolError if teardown fails"""
        if self.state_machine.current_state is LifecycleState.SHUTDOWN:
            return
        if not self.state_machine.can_transition_to(LifecycleState.SHUTDOWN):
            self.state_machine.transition_to(LifecycleState.ERROR_RECOVERY)
        self.state_machine.transition_to(LifecycleState.SHUTDOWN)

        errors = await self._rollback_commands()
        self.logger.info("Gateway shutdown completed")
        self._raise_teardown_errors(errors)

    async def _abort_startup(self):
        """Roll back a partial startup; raises ProtocolError if teardown fails"""
        self.state_machine.transition_to(LifecycleState.ERROR_RECOVERY)
        self._raise_teardown_errors(await self._rollback_commands())

    @staticmethod
    def _raise_teardown_errors(errors: List[Exception]):
        if errors:
            raise ProtocolError(f"Teardown failed: {errors[0]}") from errors[0]

    async def _rollback_commands(self) -> List[Exception]:
        """Rollback executed commands in reverse order"""
        errors: List[Exception] = []
        for command in reversed(self.executed_commands):
            try:
                await command.rollback()
            except Exception as e:
                self.logger.error(f"Error during rollback of {command.__class__.__name__}: {e}")
                errors.append(e)

        self.executed_commands.clear()
        return errors
