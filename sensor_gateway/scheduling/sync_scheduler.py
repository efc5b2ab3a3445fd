"""Periodic present-value synchronization: catalog -> provider -> registry."""
from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from sensor_gateway.core.exceptions import ProviderError, SchedulerError
from sensor_gateway.core.patterns.state_machine import SchedulerState, StateMachine
from sensor_gateway.providers.base_provider import ValueProvider
from sensor_gateway.scheduling.fixed_rate import FixedRateSchedule
from sensor_gateway.services.catalog_service import SensorCatalog
from sensor_gateway.services.object_registry import ObjectRegistry

DEFAULT_INTERVAL = 120.0          # seconds
DEFAULT_PROVIDER_TIMEOUT = 10.0   # seconds


@dataclass
class TickReport:
    tick: int
    written: int = 0
    skipped: int = 0
    failed: int = 0
    duration: float = 0.0


class SyncScheduler:
    """
    Single background task that refreshes every registered sensor's present value.

    Ticks run sequentially and never overlap; a sensor whose read or write
    fails is counted and logged and the tick moves on. Anything failing
    outside the per-sensor step stops the scheduler and is raised from its
    task. Lifecycle: IDLE -> RUNNING -> STOPPED, no restart.
    """

    def __init__(self,
                 catalog: SensorCatalog,
                 registry: ObjectRegistry,
                 provider: ValueProvider,
                 interval_seconds: float = DEFAULT_INTERVAL,
                 provider_timeout: Optional[float] = DEFAULT_PROVIDER_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic):
        self.catalog  = catalog
        self.registry = registry
        self.provider = provider
        self.provider_timeout = provider_timeout
        self.clock    = clock
        self.schedule = FixedRateSchedule(interval_seconds, initial_delay=0.0, clock=clock)
        self.log      = logging.getLogger(self.__class__.__name__)
        self.tick_count = 0
        self.last_report: Optional[TickReport] = None
        self._machine = StateMachine(SchedulerState.IDLE)
        self._tick_lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # --------------------------------------------------------------------- #
    #  Public API
    # --------------------------------------------------------------------- #
    @property
    def state(self) -> SchedulerState:
        return self._machine.state

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    async def start(self):
        if not self._transition(SchedulerState.RUNNING):
            raise SchedulerError(f"cannot start scheduler in state {self.state.name}")
        self.schedule.start()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="sync-scheduler")
        self.log.info("scheduler started (every %.1fs)", self.schedule.interval_seconds)

    async def stop(self):
        """Prevent further ticks and wait for an in-flight tick to finish."""
        if self.state is SchedulerState.STOPPED:
            return
        self._transition(SchedulerState.STOPPED)
        self._stop_event.set()
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        self.log.info("scheduler stopped after %d ticks", self.tick_count)

    async def tick(self) -> TickReport:
        """Synchronize every catalog sensor once."""
        async with self._tick_lock:
            self.tick_count += 1
            report = TickReport(tick=self.tick_count)
            started = self.clock()

            for definition in self.catalog.list():
                if self.registry.get(definition.id) is None:
                    self.log.debug("sensor %d has no registered object, skipping", definition.id)
                    report.skipped += 1
                    continue
                if await self._sync_one(definition):
                    report.written += 1
                else:
                    report.failed += 1

            report.duration = self.clock() - started
            self.last_report = report
            self.log.info("tick %d: %d written, %d failed, %d skipped (%.3fs)",
                          report.tick, report.written, report.failed, report.skipped, report.duration)
            return report

    def get_stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.name,
            "tick_count": self.tick_count,
            "last_report": self.last_report,
            "schedule": self.schedule.get_metadata(),
        }

    # --------------------------------------------------------------------- #
    #  Private helpers
    # --------------------------------------------------------------------- #
    async def _sync_one(self, definition) -> bool:
        try:
            reading = await asyncio.wait_for(
                self.provider.read(definition.id, definition.kind),
                timeout=self.provider_timeout,
            )
        except asyncio.TimeoutError:
            self.log.error("%s", ProviderError(
                f"no reading for sensor {definition.id} within {self.provider_timeout}s"))
            return False
        except Exception as e:
            self.log.error("%s", ProviderError(f"reading sensor {definition.id} failed: {e}"))
            return False

        try:
            return await self.registry.write_value(definition.id, reading)
        except Exception as e:
            self.log.error("write failed for sensor %d: %s", definition.id, e)
            return False

    async def _run(self):
        try:
            while self.state is SchedulerState.RUNNING:
                delay = self.schedule.seconds_until_due()
                if delay > 0 and await self._stop_requested_within(delay):
                    break
                if self.state is not SchedulerState.RUNNING:
                    break

                await self.tick()

                skipped = self.schedule.advance()
                if skipped:
                    self.log.warning("tick %d overran its period, skipped %d slot(s)",
                                     self.tick_count, skipped)
        except Exception as e:
            self.log.critical("scheduler failed: %s", e, exc_info=True)
            self._transition(SchedulerState.STOPPED)
            raise

    async def _stop_requested_within(self, delay: float) -> bool:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    def _transition(self, nxt: SchedulerState) -> bool:
        prev = self.state
        if self._machine.transition(nxt):
            self.log.debug("state %s -> %s", prev.name, nxt.name)
            return True
        return False
