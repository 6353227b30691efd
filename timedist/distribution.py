"""
Decaying time distribution.

TimeDistribution tracks latencies (or any other nanosecond magnitude) under
concurrent writers. It pairs a DecayTDigest for quantiles with a DecayCounter
for the running total behind the average, and guards both with one lock so
every multi-field read sees the two in the same state.

Example:
    >>> dist = TimeDistribution(alpha=ExponentialDecay.one_minute(), unit="ms")
    >>> dist.add(1_500_000)  # 1.5ms
    >>> snapshot = dist.snapshot()
    >>> snapshot.p99
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Union

from timedist.algorithms.decay import DecayCounter
from timedist.algorithms.quantile_sketch import DecayTDigest
from timedist.core.base import DecayingSummary, check_alpha, check_value
from timedist.core.clock import Clock, system_clock
from timedist.core.units import TimeUnit

logger = logging.getLogger(__name__)

SNAPSHOT_QUANTILES = (0.5, 0.75, 0.9, 0.95, 0.99)
PERCENTILES = tuple(i / 100.0 for i in range(100))


@dataclass(frozen=True)
class TimeDistributionSnapshot:
    """
    Point-in-time statistics of a TimeDistribution.

    All values are already expressed in `unit`. Statistics of an empty
    distribution are NaN, except count which is 0.
    """

    count: float
    p50: float
    p75: float
    p90: float
    p95: float
    p99: float
    min: float
    max: float
    avg: float
    unit: TimeUnit

    def to_dict(self) -> Dict[str, Any]:
        """Flat record with the unit given by name."""
        data = asdict(self)
        data["unit"] = self.unit.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeDistributionSnapshot":
        """
        Rebuild a snapshot from to_dict() output.

        Raises:
            ValueError: If data is not a dict, a field is missing or not a
                number, or the unit is unknown.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid format for {cls.__name__}: expected a dict, got {type(data).__name__}"
            )

        names = [f.name for f in fields(cls)]
        missing = set(names) - data.keys()
        if missing:
            raise ValueError(
                f"Invalid dictionary format for {cls.__name__}. Missing keys: {sorted(missing)}"
            )

        try:
            values = {name: float(data[name]) for name in names if name != "unit"}
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid dictionary format for {cls.__name__}: {e}") from e
        return cls(unit=TimeUnit.parse(data["unit"]), **values)

    def serialize(self) -> str:
        """JSON text of to_dict(). NaN is written as the bare token NaN."""
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, data: Union[str, bytes]) -> "TimeDistributionSnapshot":
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return cls.from_dict(json.loads(data))


class TimeDistribution:
    """
    Thread-safe, exponentially decaying distribution of nanosecond values.

    Mutations and every read of the digest or counter run under a single
    exclusive lock. Reads that need several statistics should use snapshot(),
    which takes the lock once; calling several getters in a row gives no
    consistency across them.

    Unit conversion and result construction happen after the lock is released.
    """

    DEFAULT_ALPHA: float = DecayingSummary.DEFAULT_ALPHA
    DEFAULT_UNIT: TimeUnit = TimeUnit.SECONDS
    DEFAULT_COMPRESSION: int = DecayTDigest.DEFAULT_COMPRESSION

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        unit: Union[TimeUnit, str] = DEFAULT_UNIT,
        compression: int = DEFAULT_COMPRESSION,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize a TimeDistribution.

        Args:
            alpha: Decay rate per second, >= 0. 0 keeps every value with
                equal weight forever.
            unit: Unit statistics are reported in, as a TimeUnit, a unit
                name ("milliseconds") or an abbreviation ("ms").
            compression: Digest accuracy/size budget, a positive integer.
            clock: Time source in seconds, shared by the digest and counter.

        Raises:
            ValueError: If unit, alpha or compression is invalid.
            TypeError: If alpha is not a number.
        """
        self._unit = TimeUnit.parse(unit)
        self._alpha = check_alpha(alpha)
        self._compression = compression
        self._clock: Clock = clock if clock is not None else system_clock

        self._lock = threading.Lock()
        self._digest = self._new_digest()
        self._total = DecayCounter(self._alpha, self._clock)

        logger.debug(
            "Created TimeDistribution(alpha=%s, unit=%s, compression=%d)",
            self._alpha,
            self._unit.name,
            self._compression,
        )

    def _new_digest(self) -> DecayTDigest:
        return DecayTDigest(self._compression, self._alpha, self._clock)

    def add(self, value: float) -> None:
        """
        Record one observation.

        Args:
            value: Magnitude in nanoseconds. Any finite number.

        Raises:
            TypeError: If value is not a number.
            ValueError: If value is NaN or infinite.
        """
        value = check_value(value)
        with self._lock:
            self._digest.add(value)
            self._total.add(value)

    def get_count(self) -> float:
        """Decayed number of observations."""
        with self._lock:
            return self._digest.get_count()

    def _value_at(self, quantile: float) -> float:
        with self._lock:
            value = self._digest.value_at(quantile)
        return self._unit.convert(value)

    def get_p50(self) -> float:
        return self._value_at(0.5)

    def get_p75(self) -> float:
        return self._value_at(0.75)

    def get_p90(self) -> float:
        return self._value_at(0.9)

    def get_p95(self) -> float:
        return self._value_at(0.95)

    def get_p99(self) -> float:
        return self._value_at(0.99)

    def get_min(self) -> float:
        with self._lock:
            value = self._digest.get_min()
        return self._unit.convert(value)

    def get_max(self) -> float:
        with self._lock:
            value = self._digest.get_max()
        return self._unit.convert(value)

    def get_avg(self) -> float:
        """
        Decayed mean of the observations, NaN when there are none.

        Decay scales the total and the count alike, so the mean stays
        defined after idle periods that decay the count itself to 0.
        """
        with self._lock:
            mean = self._total.count_ratio(self._digest)
        return self._unit.convert(mean)

    def get_unit(self) -> TimeUnit:
        return self._unit

    @property
    def unit(self) -> TimeUnit:
        return self._unit

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def compression(self) -> int:
        return self._compression

    @property
    def is_empty(self) -> bool:
        """True until the first value is added, and again after reset()."""
        with self._lock:
            return self._digest.is_empty

    def get_percentiles(self) -> Dict[float, float]:
        """
        Values at quantiles 0.00, 0.01, ..., 0.99, in the display unit.

        Returns:
            An ordered mapping from quantile to value.
        """
        with self._lock:
            values = self._digest.values_at(PERCENTILES)
        return {q: self._unit.convert(v) for q, v in zip(PERCENTILES, values)}

    def snapshot(self) -> TimeDistributionSnapshot:
        """
        Capture every statistic from one consistent state.

        Returns:
            An immutable TimeDistributionSnapshot in the display unit.
        """
        with self._lock:
            now = self._clock()
            count = self._digest.get_count(now)
            mean = self._total.count_ratio(self._digest)
            min_val = self._digest.get_min()
            max_val = self._digest.get_max()
            quantiles: List[float] = self._digest.values_at(SNAPSHOT_QUANTILES)

        convert = self._unit.convert
        return TimeDistributionSnapshot(
            count=count,
            p50=convert(quantiles[0]),
            p75=convert(quantiles[1]),
            p90=convert(quantiles[2]),
            p95=convert(quantiles[3]),
            p99=convert(quantiles[4]),
            min=convert(min_val),
            max=convert(max_val),
            avg=convert(mean),
            unit=self._unit,
        )

    def reset(self) -> None:
        """
        Discard all observations.

        The counter is cleared in place; the digest is replaced with a new
        one so nothing holding the old digest ever sees it change.
        """
        with self._lock:
            self._total.reset()
            self._digest = self._new_digest()
        logger.debug("Reset TimeDistribution(unit=%s)", self._unit.name)

    def __repr__(self) -> str:
        return (
            f"TimeDistribution(alpha={self._alpha:.4g}, unit={self._unit.name}, "
            f"compression={self._compression})"
        )
