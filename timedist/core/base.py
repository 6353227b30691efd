"""
Base classes and interfaces for timedist decaying summaries.

Every summary in this package weights its observations by age: an
observation made t seconds ago counts exp(-alpha * t) times as much as one
made now. Decay is applied lazily, only when a summary is touched, so there
are no background timers.

Internally this uses forward decay. Each observation is stored with weight
exp(alpha * (t - landmark)) and readers divide by exp(alpha * (now - landmark)).
That is the same as multiplying all existing state by exp(-alpha * dt) on
every update, but costs O(1). When the forward exponent grows past
RESCALE_THRESHOLD the stored state is scaled down and the landmark moved to
the present, which keeps the numbers finite.
"""

import abc
import logging
import math
from typing import Any, Dict, Optional

from timedist.core.clock import Clock, system_clock

logger = logging.getLogger(__name__)


def check_alpha(alpha: float) -> float:
    """
    Validate a decay rate.

    Args:
        alpha: Decay rate per second. 0 disables decay.

    Returns:
        The decay rate as a float.

    Raises:
        TypeError: If alpha is not a real number.
        ValueError: If alpha is negative or not finite.
    """
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)):
        raise TypeError(f"alpha must be a number, got {type(alpha).__name__}")
    if not math.isfinite(alpha) or alpha < 0:
        raise ValueError(f"alpha must be a finite number >= 0, got {alpha}")
    return float(alpha)


def check_value(value: float) -> float:
    """
    Validate an observation before it touches any state.

    Raises:
        TypeError: If value is not a real number.
        ValueError: If value is NaN or infinite.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Value must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"Value must be finite, got {value}")
    return float(value)


class DecayingSummary(abc.ABC):
    """
    Abstract base class for exponentially decaying stream summaries.

    Subclasses store their weights in forward-decayed units and implement
    _rescale() so the base class can fold accumulated decay back into them.
    """

    DEFAULT_ALPHA: float = 0.0
    RESCALE_THRESHOLD: float = 32.0

    def __init__(self, alpha: float = DEFAULT_ALPHA, clock: Optional[Clock] = None):
        """
        Initialize a decaying summary.

        Args:
            alpha: Decay rate per second, >= 0. 0 means plain accumulation.
            clock: Zero-argument callable returning the current time in
                seconds. Defaults to a monotonic system clock.

        Raises:
            TypeError: If alpha is not a number.
            ValueError: If alpha is negative or not finite.
        """
        self._alpha = check_alpha(alpha)
        self._clock: Clock = clock if clock is not None else system_clock
        self._landmark: float = self._clock()
        self._items_processed = 0

    @abc.abstractmethod
    def add(self, value: float) -> None:
        """
        Add an observation to the summary.

        Args:
            value: A finite number.
        """
        self._items_processed += 1

    @abc.abstractmethod
    def get_count(self, now: Optional[float] = None) -> float:
        """
        Get the decayed total tracked by this summary.

        Args:
            now: Instant to evaluate decay at. Defaults to the clock's time.
        """
        pass

    @abc.abstractmethod
    def _stored_count(self) -> float:
        """Total in stored forward-decayed units, relative to the landmark."""
        pass

    @abc.abstractmethod
    def _rescale(self, factor: float) -> None:
        """Multiply every stored weight by factor."""
        pass

    def _now(self, now: Optional[float] = None) -> float:
        return self._clock() if now is None else now

    def _forward_weight(self, now: float) -> float:
        """
        Weight of an observation made at `now`, in stored units.

        Rescales stored state first if the exponent would otherwise grow
        past RESCALE_THRESHOLD.
        """
        if self._alpha == 0.0:
            return 1.0

        exponent = self._alpha * (now - self._landmark)
        if exponent > self.RESCALE_THRESHOLD:
            factor = math.exp(-exponent)
            self._rescale(factor)
            logger.debug(
                "Rescaled %s by %.3g, landmark moved %.3fs forward",
                self.__class__.__name__,
                factor,
                now - self._landmark,
            )
            self._landmark = now
            exponent = 0.0
        return math.exp(exponent)

    def count_ratio(self, other: "DecayingSummary") -> float:
        """
        get_count() / other.get_count(), evaluated at any common instant.

        Both summaries must share the same alpha. The decay factor cancels out
        of the quotient, so the ratio stays defined after an idle period long
        enough for both counts to underflow to 0.

        Returns:
            The ratio, or NaN if other holds no weight.
        """
        denominator = other._stored_count()
        if denominator == 0:
            return float("nan")
        ratio = self._stored_count() / denominator
        if self._alpha != 0.0 and self._landmark != other._landmark:
            ratio *= math.exp(self._alpha * (self._landmark - other._landmark))
        return ratio

    def _decay_factor(self, now: float) -> float:
        """Factor converting stored weights into weights as seen at `now`."""
        if self._alpha == 0.0:
            return 1.0
        return math.exp(-self._alpha * (now - self._landmark))

    @property
    def alpha(self) -> float:
        """Decay rate per second."""
        return self._alpha

    @property
    def items_processed(self) -> int:
        """Number of observations added, without decay."""
        return self._items_processed

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the current state of the summary.

        Derived classes extend this with their own fields.
        """
        return {
            "type": self.__class__.__name__,
            "alpha": self._alpha,
            "items_processed": self._items_processed,
            "count": self.get_count(),
        }
