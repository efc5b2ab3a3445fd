"""Fixed-rate scheduling of present-value synchronization."""

from .fixed_rate import FixedRateSchedule
from .sync_scheduler import SyncScheduler, TickReport, DEFAULT_INTERVAL, DEFAULT_PROVIDER_TIMEOUT

__all__ = [
    'FixedRateSchedule',
    'SyncScheduler',
    'TickReport',
    'DEFAULT_INTERVAL',
    'DEFAULT_PROVIDER_TIMEOUT'
]
