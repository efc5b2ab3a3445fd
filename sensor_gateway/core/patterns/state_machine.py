from enum import Enum, auto
from typing import Dict, List

class SchedulerState(Enum):
    IDLE     = auto()
    RUNNING  = auto()
    STOPPED  = auto()

class StateMachine:
    def __init__(self, initial: SchedulerState = SchedulerState.IDLE):
        self._state = initial
        self._trans: Dict[SchedulerState, List[SchedulerState]] = {
            SchedulerState.IDLE:    [SchedulerState.RUNNING, SchedulerState.STOPPED],
            SchedulerState.RUNNING: [SchedulerState.STOPPED],
            SchedulerState.STOPPED: [],
        }

    @property
    def state(self) -> SchedulerState: return self._state

    def can(self, nxt: SchedulerState) -> bool: return nxt in self._trans[self._state]

    def transition(self, nxt: SchedulerState) -> bool:
        if self.can(nxt):
            self._state = nxt
            return True
        return False
