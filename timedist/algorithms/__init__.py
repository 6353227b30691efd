"""
Algorithm implementations for timedist.
"""

from timedist.algorithms.decay import DecayCounter, ExponentialDecay
from timedist.algorithms.quantile_sketch import DecayTDigest

__all__ = [
    "DecayCounter",
    "DecayTDigest",
    "ExponentialDecay",
]
