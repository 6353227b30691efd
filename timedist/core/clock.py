"""
Time sources for decaying summaries.

All decay computations read the current time through a zero-argument callable
returning seconds as a float. Production code uses a monotonic clock; tests
drive time explicitly with ManualClock.
"""

import math
import time
from typing import Callable

Clock = Callable[[], float]

system_clock: Clock = time.monotonic


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        """
        Move the clock forward.

        Args:
            seconds: Amount of time to advance, finite and not negative.

        Raises:
            ValueError: If seconds is negative or not finite.
        """
        if not math.isfinite(seconds):
            raise ValueError(f"Clock advance must be finite, got {seconds}")
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        self._now += seconds

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now:.6g})"
