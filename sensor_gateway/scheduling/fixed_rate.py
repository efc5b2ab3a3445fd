import time
from typing import Any, Callable, Dict, Optional

class FixedRateSchedule:
    """Fixed-rate deadlines that never queue missed runs.

    Deadlines advance by ``interval_seconds`` from the start. When a run
    overruns its slot the next run is due immediately, once, and the
    schedule is re-anchored on it; the skipped slots are reported.
    """

    def __init__(self, interval_seconds: float, initial_delay: float = 0.0,
                 clock: Callable[[], float] = time.monotonic):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.initial_delay = initial_delay
        self.clock = clock
        self.next_deadline: Optional[float] = None
        self.skipped_total = 0

    def start(self) -> None:
        self.next_deadline = self.clock() + self.initial_delay

    def seconds_until_due(self) -> float:
        if self.next_deadline is None:
            return 0.0
        return max(0.0, self.next_deadline - self.clock())

    def advance(self) -> int:
        """Move to the next slot after a run; returns the number of slots skipped."""
        if self.next_deadline is None:
            self.start()
        self.next_deadline += self.interval_seconds
        now = self.clock()
        if now <= self.next_deadline:
            return 0
        skipped = int((now - self.next_deadline) // self.interval_seconds)
        self.next_deadline = now
        self.skipped_total += skipped
        return skipped

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "interval_seconds": self.interval_seconds,
            "next_deadline": self.next_deadline,
            "skipped_total": self.skipped_total,
        }
