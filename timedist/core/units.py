"""
Time units for reporting distribution statistics.

Values fed into a distribution are always nanoseconds. A TimeUnit only
decides how they are scaled when read back.
"""

import enum
import math
from typing import Optional, Union

_ABBREVIATIONS = {
    "ns": "NANOSECONDS",
    "us": "MICROSECONDS",
    "ms": "MILLISECONDS",
    "s": "SECONDS",
    "m": "MINUTES",
    "h": "HOURS",
    "d": "DAYS",
}


class TimeUnit(enum.Enum):
    """A display unit, valued as the number of nanoseconds it spans."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 3_600 * 1_000_000_000
    DAYS = 86_400 * 1_000_000_000

    @property
    def nanos(self) -> int:
        """Number of nanoseconds in one of this unit."""
        return self.value

    def to_nanos(self, amount: float) -> float:
        """Express an amount of this unit in nanoseconds."""
        return amount * self.value

    def convert(self, nanos: Optional[float]) -> float:
        """
        Scale a nanosecond value into this unit.

        Missing or NaN values stay NaN so an empty distribution never reports
        a misleading number.
        """
        if nanos is None or math.isnan(nanos):
            return float("nan")
        return nanos / float(self.value)

    @classmethod
    def parse(cls, value: Union["TimeUnit", str, None]) -> "TimeUnit":
        """
        Resolve a unit given as an enum member, a name or an abbreviation.

        Args:
            value: A TimeUnit, a member name in any case ("seconds"), or one
                of the abbreviations ns, us, ms, s, m, h, d.

        Returns:
            The matching TimeUnit.

        Raises:
            ValueError: If value is None or names no known unit.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("unit is required")
        if not isinstance(value, str):
            raise ValueError(f"Invalid time unit: {value!r}")

        text = value.strip()
        name = _ABBREVIATIONS.get(text, text.upper())
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown time unit: {value!r}") from None
