"""
Exponentially decaying counter.

DecayCounter keeps a running sum of added values together with the number of
additions, both discounted by age. With alpha = 0 it is an exact cumulative
sum and count.

The ExponentialDecay helpers produce alpha values for common time horizons.
An alpha of 1/N gives observations a mean lifetime of N seconds.
"""

import math
from typing import Any, Dict, Optional

from timedist.core.base import DecayingSummary, check_value
from timedist.core.clock import Clock


class ExponentialDecay:
    """Factory for decay rates."""

    @staticmethod
    def one_minute() -> float:
        return ExponentialDecay.seconds(60)

    @staticmethod
    def five_minutes() -> float:
        return ExponentialDecay.seconds(5 * 60)

    @staticmethod
    def fifteen_minutes() -> float:
        return ExponentialDecay.seconds(15 * 60)

    @staticmethod
    def seconds(seconds: float) -> float:
        """
        Decay rate giving observations a mean lifetime of `seconds`.

        Raises:
            ValueError: If seconds is not positive.
        """
        if not seconds > 0:
            raise ValueError(f"seconds must be > 0, got {seconds}")
        return 1.0 / seconds

    @staticmethod
    def compute_alpha(target_weight: float, target_age_seconds: float) -> float:
        """
        Decay rate at which an observation aged `target_age_seconds` still
        carries `target_weight` of its original weight.

        Args:
            target_weight: Remaining weight, strictly between 0 and 1.
            target_age_seconds: Age at which that weight is reached, > 0.

        Returns:
            The decay rate alpha.

        Raises:
            ValueError: If either argument is out of range.
        """
        if not 0.0 < target_weight < 1.0:
            raise ValueError("target_weight must be in range (0, 1)")
        if not target_age_seconds > 0:
            raise ValueError("target_age_seconds must be > 0")
        return -math.log(target_weight) / target_age_seconds


class DecayCounter(DecayingSummary):
    """
    Decayed running total of added values.

    get_count() returns the decayed *sum* of the added values, not the number
    of additions. The decayed number of additions is available through
    get_sample_count().
    """

    def __init__(self, alpha: float = DecayingSummary.DEFAULT_ALPHA, clock: Optional[Clock] = None):
        super().__init__(alpha, clock)
        self._sum = 0.0
        self._samples = 0.0

    def add(self, value: float) -> None:
        """
        Add a value to the decayed sum and one sample to the decayed count.

        Args:
            value: Any finite number, negative values included.

        Raises:
            TypeError: If value is not a number.
            ValueError: If value is NaN or infinite.
        """
        value = check_value(value)
        super().add(value)

        weight = self._forward_weight(self._clock())
        self._sum += value * weight
        self._samples += weight

    def _stored_count(self) -> float:
        return self._sum

    def _rescale(self, factor: float) -> None:
        self._sum *= factor
        self._samples *= factor

    def get_count(self, now: Optional[float] = None) -> float:
        """Decayed sum of all added values."""
        return self._sum * self._decay_factor(self._now(now))

    def get_sample_count(self, now: Optional[float] = None) -> float:
        """Decayed number of additions."""
        return self._samples * self._decay_factor(self._now(now))

    def get_rate(self, now: Optional[float] = None) -> float:
        """Decayed sum expressed as a per-second rate. 0 when alpha is 0."""
        return self.get_count(now) * self._alpha

    def reset(self) -> None:
        """Clear the sum and sample count and restart decay from now."""
        self._sum = 0.0
        self._samples = 0.0
        self._landmark = self._clock()
        self._items_processed = 0

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats["sample_count"] = self.get_sample_count()
        stats["rate"] = self.get_rate()
        return stats

    def __repr__(self) -> str:
        return f"DecayCounter(alpha={self._alpha:.4g}, count={self.get_count():.4g})"
