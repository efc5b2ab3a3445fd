# sensor_gateway/orchestration/__init__.py
"""Gateway lifecycle with command pattern and state management."""

from .lifecycle import GatewayLifecycle
from .state_machine import LifecycleStateMachine, LifecycleState
from .commands import (
    LifecycleCommand,
    DeviceBringUpCommand,
    ObjectRegistrationCommand,
    SchedulerStartupCommand,
    PresenceAnnouncementCommand
)

__all__ = [
    'GatewayLifecycle',
    'LifecycleStateMachine',
    'LifecycleState',
    'LifecycleCommand',
    'DeviceBringUpCommand',
    'ObjectRegistrationCommand',
    'SchedulerStartupCommand',
    'PresenceAnnouncementCommand'
]
