from .state_machine import StateMachine, SchedulerState

__all__ = ["StateMachine", "SchedulerState"]
