from enum import Enum, auto
from typing import Dict, Set
import logging

class LifecycleState(Enum):
    INITIALIZING = auto()
    DEVICE_BRING_UP = auto()
    OBJECT_REGISTRATION = auto()
    SCHEDULER_STARTUP = auto()
    ANNOUNCEMENT = auto()
    OPERATIONAL = auto()
    ERROR_RECOVERY = auto()
    SHUTDOWN = auto()

class LifecycleStateMachine:
    """Manages the gateway's startup and shutdown state transitions"""

    def __init__(self):
        self.current_state = LifecycleState.INITIALIZING
        self.logger = logging.getLogger(self.__class__.__name__)
        self.valid_transitions: Dict[LifecycleState, Set[LifecycleState]] = {
            LifecycleState.INITIALIZING: {LifecycleState.DEVICE_BRING_UP, LifecycleState.SHUTDOWN},
            LifecycleState.DEVICE_BRING_UP: {LifecycleState.OBJECT_REGISTRATION, LifecycleState.ERROR_RECOVERY},
            LifecycleState.OBJECT_REGISTRATION: {LifecycleState.SCHEDULER_STARTUP, LifecycleState.ERROR_RECOVERY},
            LifecycleState.SCHEDULER_STARTUP: {LifecycleState.ANNOUNCEMENT, LifecycleState.ERROR_RECOVERY},
            LifecycleState.ANNOUNCEMENT: {LifecycleState.OPERATIONAL, LifecycleState.ERROR_RECOVERY},
            LifecycleState.OPERATIONAL: {LifecycleState.ERROR_RECOVERY, LifecycleState.SHUTDOWN},
            LifecycleState.ERROR_RECOVERY: {LifecycleState.SHUTDOWN},
            LifecycleState.SHUTDOWN: set()
        }

    def can_transition_to(self, new_state: LifecycleState) -> bool:
        return new_state in self.valid_transitions.get(self.current_state, set())

    def transition_to(self, new_state: LifecycleState) -> bool:
        if self.can_transition_to(new_state):
            self.logger.info(f"State transition: {self.current_state.name} -> {new_state.name}")
            self.current_state = new_state
            return True
        else:
            self.logger.error(f"Invalid state transition: {self.current_state.name} -> {new_state.name}")
            return False
