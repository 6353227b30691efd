"""
Core functionality for timedist.
"""

from timedist.core.base import DecayingSummary, check_alpha, check_value
from timedist.core.clock import Clock, ManualClock, system_clock
from timedist.core.units import TimeUnit

__all__ = [
    # Base classes
    "DecayingSummary",
    # Validation
    "check_alpha",
    "check_value",
    # Time
    "Clock",
    "ManualClock",
    "system_clock",
    "TimeUnit",
]
