"""
timedist - Decaying Time Distributions

timedist tracks the distribution of latencies observed by a running service,
weighting recent observations more than old ones. Quantiles come from a
decaying T-Digest and averages from a decaying counter, both behind one lock
so snapshots stay consistent under concurrent writers.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from timedist.algorithms.decay import DecayCounter, ExponentialDecay
from timedist.algorithms.quantile_sketch import DecayTDigest
from timedist.core.base import DecayingSummary
from timedist.core.clock import ManualClock
from timedist.core.units import TimeUnit
from timedist.distribution import TimeDistribution, TimeDistributionSnapshot

__all__ = [
    # Core
    "DecayingSummary",
    "ManualClock",
    "TimeUnit",
    # Algorithm implementations
    "DecayCounter",
    "DecayTDigest",
    "ExponentialDecay",
    # Distribution tracking
    "TimeDistribution",
    "TimeDistributionSnapshot",
]
