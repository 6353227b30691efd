# timedist/algorithms/quantile_sketch.py

import bisect
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from timedist.core.base import DecayingSummary, check_value
from timedist.core.clock import Clock


class _Centroid:
    """Internal representation of a centroid in the T-Digest algorithm."""

    __slots__ = ["mean", "weight"]

    def __init__(self, mean: float, weight: float = 1.0):
        """Initialize a centroid with a mean value and weight."""
        if weight < 0:
            raise ValueError("Centroid weight cannot be negative")
        self.mean = float(mean)
        self.weight = float(weight)

    def __lt__(self, other: "_Centroid") -> bool:
        """Allow centroids to be sorted by mean value."""
        return self.mean < other.mean

    def __repr__(self) -> str:
        """Provide a readable representation of the centroid."""
        return f"Centroid(mean={self.mean:.4g}, weight={self.weight:.4g})"


class DecayTDigest(DecayingSummary):
    """
    T-Digest with exponentially decaying centroid weights.

    The T-Digest (Dunning, 2019) clusters observations into centroids, keeping
    clusters small near the tails and letting them grow toward the median.
    This version adds every observation with weight 1 at the time it is made
    and lets that weight fade by exp(-alpha * age), so quantiles follow the
    recent distribution.

    Key properties:

    1. The number of centroids never exceeds 2 * compression
    2. The exact minimum and maximum are kept outside the centroids
    3. Quantile estimates interpolate linearly between centroid midpoints
    4. Identical inputs at identical times produce identical digests
    """

    DEFAULT_COMPRESSION: int = 100
    BUFFER_FACTOR: int = 2
    ZERO_WEIGHT_THRESHOLD: float = 1e-12

    def __init__(
        self,
        compression: int = DEFAULT_COMPRESSION,
        alpha: float = DecayingSummary.DEFAULT_ALPHA,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize a DecayTDigest.

        Args:
            compression: Controls accuracy and memory usage. A merge pass
                leaves roughly `compression` centroids. Must be a positive
                integer. Default: 100.
            alpha: Decay rate per second, >= 0. Default 0 (no decay).
            clock: Time source in seconds. Defaults to a monotonic clock.

        Raises:
            ValueError: If compression is not a positive integer, or alpha
                is negative or not finite.
        """
        if isinstance(compression, bool) or not isinstance(compression, int) or compression < 1:
            raise ValueError("Compression factor must be a positive integer")
        super().__init__(alpha, clock)

        self.compression: int = compression
        self._max_centroids: int = self.BUFFER_FACTOR * compression
        self._centroids: List[_Centroid] = []
        self._total_weight: float = 0.0
        self._min_val: Optional[float] = None
        self._max_val: Optional[float] = None

    def add(self, value: float) -> None:
        """
        Add a value to the digest.

        Args:
            value: A finite number.

        Raises:
            TypeError: If value is not a number.
            ValueError: If value is NaN or infinite.
        """
        value = check_value(value)
        super().add(value)

        weight = self._forward_weight(self._clock())

        if self._min_val is None or value < self._min_val:
            self._min_val = value
        if self._max_val is None or value > self._max_val:
            self._max_val = value

        bisect.insort(self._centroids, _Centroid(value, weight))
        self._total_weight += weight

        if len(self._centroids) > self._max_centroids:
            self._compress()

    def _rescale(self, factor: float) -> None:
        for c in self._centroids:
            c.weight *= factor
        # Centroids that have decayed to nothing no longer affect any quantile
        self._centroids = [
            c for c in self._centroids if c.weight > self.ZERO_WEIGHT_THRESHOLD
        ]
        self._total_weight = math.fsum(c.weight for c in self._centroids)

    def _scale(self, q: float) -> float:
        """The k1 scale function, k(q) = compression / (2 pi) * asin(2q - 1)."""
        q = min(1.0, max(0.0, q))
        return self.compression / (2.0 * math.pi) * math.asin(2.0 * q - 1.0)

    def _compress(self) -> None:
        """
        Merge adjacent centroids in a single left-to-right pass.

        A centroid absorbs its right neighbour only while the merged cluster
        spans at most one unit of the scale function. Since asin is steep near
        q = 0 and q = 1, tail clusters stay small. Any two consecutive clusters
        left after the pass span more than one unit, which bounds the result
        to about `compression` centroids.
        """
        total = self._total_weight
        if total <= 0 or len(self._centroids) < 2:
            return

        merged: List[_Centroid] = []
        current = self._centroids[0]
        mean, weight = current.mean, current.weight
        weight_before = 0.0
        k_lower = self._scale(0.0)

        for c in self._centroids[1:]:
            proposed = weight + c.weight
            if self._scale((weight_before + proposed) / total) - k_lower <= 1.0:
                # Convex form, so extreme finite means cannot overflow
                mean = mean * (weight / proposed) + c.mean * (c.weight / proposed)
                weight = proposed
            else:
                merged.append(_Centroid(mean, weight))
                weight_before += weight
                k_lower = self._scale(weight_before / total)
                mean, weight = c.mean, c.weight
        merged.append(_Centroid(mean, weight))

        self._centroids = merged
        self._total_weight = math.fsum(c.weight for c in merged)

    def value_at(self, quantile: float) -> float:
        """
        Estimate the value at the given quantile.

        Args:
            quantile: Target quantile between 0.0 and 1.0.
                      0.0 returns the minimum value.
                      0.5 returns the estimated median.
                      1.0 returns the maximum value.

        Returns:
            Estimated value at the specified quantile. Returns NaN
            if the digest is empty.

        Raises:
            ValueError: If quantile is not between 0.0 and 1.0.
        """
        return self.values_at([quantile])[0]

    def values_at(self, quantiles: Iterable[float]) -> List[float]:
        """
        Estimate the values at several quantiles with one pass over the
        centroids.

        Results come back in the order of `quantiles` and match what
        value_at() returns for each one.

        Raises:
            ValueError: If any quantile is not between 0.0 and 1.0.
        """
        quantiles = list(quantiles)
        for q in quantiles:
            if not (0.0 <= q <= 1.0):
                raise ValueError("Quantile must be between 0.0 and 1.0")

        if not self._centroids or self._total_weight <= 0:
            return [float("nan")] * len(quantiles)

        centroids = self._centroids
        total = self._total_weight
        results = [0.0] * len(quantiles)

        # State of the walk: centroids before index i have been passed, and
        # (prev_mid, prev_value) is the last anchor behind the target.
        i = 0
        cumulative = 0.0
        prev_mid = 0.0
        prev_value = self._min_val

        for idx in sorted(range(len(quantiles)), key=quantiles.__getitem__):
            q = quantiles[idx]
            if q == 0.0:
                results[idx] = self._min_val
                continue
            if q == 1.0:
                results[idx] = self._max_val
                continue

            target = q * total
            while i < len(centroids) and cumulative + centroids[i].weight / 2.0 < target:
                c = centroids[i]
                prev_mid = cumulative + c.weight / 2.0
                prev_value = c.mean
                cumulative += c.weight
                i += 1

            if i < len(centroids):
                next_mid = cumulative + centroids[i].weight / 2.0
                next_value = centroids[i].mean
            else:
                next_mid = total
                next_value = self._max_val

            span = next_mid - prev_mid
            if span <= 0:
                results[idx] = next_value
                continue

            fraction = max(0.0, min(1.0, (target - prev_mid) / span))
            results[idx] = prev_value * (1.0 - fraction) + next_value * fraction

        return results

    def _stored_count(self) -> float:
        return self._total_weight

    def get_count(self, now: Optional[float] = None) -> float:
        """Decayed total weight of all added values."""
        return self._total_weight * self._decay_factor(self._now(now))

    def get_min(self) -> Optional[float]:
        """Smallest value ever added, or None if the digest is empty."""
        return self._min_val

    def get_max(self) -> Optional[float]:
        """Largest value ever added, or None if the digest is empty."""
        return self._max_val

    @property
    def is_empty(self) -> bool:
        """Check if the digest contains any data."""
        return self._min_val is None

    def __len__(self) -> int:
        """Return the number of values added to the digest."""
        return self.items_processed

    def get_centroids(self) -> List[Tuple[float, float]]:
        """
        Return the current centroids as (mean, weight) tuples, sorted by mean.

        Weights are decayed to the present. This is primarily for debugging
        and inspection.
        """
        factor = self._decay_factor(self._clock())
        return [(c.mean, c.weight * factor) for c in self._centroids]

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the digest.

        Returns:
            A dictionary with configuration, structure and extremes.
        """
        stats = super().get_stats()
        stats.update(
            {
                "compression": self.compression,
                "max_centroids": self._max_centroids,
                "num_centroids": len(self._centroids),
                "compression_ratio": len(self._centroids) / self.compression,
            }
        )
        if self._min_val is not None:
            stats["min_value"] = self._min_val
        if self._max_val is not None:
            stats["max_value"] = self._max_val
        return stats
