"""
Unit tests for the decaying counter and decay-rate helpers.
"""

import math
import unittest

from timedist.algorithms.decay import DecayCounter, ExponentialDecay
from timedist.core.clock import ManualClock


class TestExponentialDecay(unittest.TestCase):
    """Test cases for the decay-rate factory."""

    def test_standard_horizons(self):
        self.assertAlmostEqual(ExponentialDecay.one_minute(), 1 / 60)
        self.assertAlmostEqual(ExponentialDecay.five_minutes(), 1 / 300)
        self.assertAlmostEqual(ExponentialDecay.fifteen_minutes(), 1 / 900)
        self.assertAlmostEqual(ExponentialDecay.seconds(10), 0.1)

    def test_seconds_invalid(self):
        with self.assertRaises(ValueError):
            ExponentialDecay.seconds(0)
        with self.assertRaises(ValueError):
            ExponentialDecay.seconds(-5)

    def test_compute_alpha(self):
        alpha = ExponentialDecay.compute_alpha(0.5, 60)
        # Half the weight remains after 60 seconds
        self.assertAlmostEqual(math.exp(-alpha * 60), 0.5)

    def test_compute_alpha_invalid(self):
        with self.assertRaises(ValueError):
            ExponentialDecay.compute_alpha(0.0, 60)
        with self.assertRaises(ValueError):
            ExponentialDecay.compute_alpha(1.0, 60)
        with self.assertRaises(ValueError):
            ExponentialDecay.compute_alpha(0.5, 0)


class TestDecayCounter(unittest.TestCase):
    """Test cases for DecayCounter."""

    def test_init_invalid_alpha(self):
        with self.assertRaises(ValueError):
            DecayCounter(alpha=-0.1)
        with self.assertRaises(ValueError):
            DecayCounter(alpha=float("inf"))
        with self.assertRaises(ValueError):
            DecayCounter(alpha=float("nan"))
        with self.assertRaises(TypeError):
            DecayCounter(alpha="0.1")
        with self.assertRaises(TypeError):
            DecayCounter(alpha=True)

    def test_empty(self):
        counter = DecayCounter()
        self.assertEqual(counter.get_count(), 0.0)
        self.assertEqual(counter.get_sample_count(), 0.0)
        self.assertEqual(counter.get_rate(), 0.0)

    def test_no_decay_is_exact(self):
        clock = ManualClock()
        counter = DecayCounter(alpha=0.0, clock=clock)
        values = [5, 10, 15, -3, 2.5]
        for value in values:
            counter.add(value)
            clock.advance(1000)

        self.assertEqual(counter.get_count(), sum(values))
        self.assertEqual(counter.get_sample_count(), len(values))
        self.assertEqual(counter.items_processed, len(values))

    def test_negative_values_accepted(self):
        counter = DecayCounter()
        counter.add(-10)
        counter.add(4)
        self.assertEqual(counter.get_count(), -6.0)

    def test_non_finite_rejected(self):
        counter = DecayCounter()
        counter.add(1)
        for bad in (float("inf"), float("-inf"), float("nan")):
            with self.assertRaises(ValueError):
                counter.add(bad)
        with self.assertRaises(TypeError):
            counter.add("1")
        # Rejected values leave no trace
        self.assertEqual(counter.get_count(), 1.0)
        self.assertEqual(counter.items_processed, 1)

    def test_decay_over_time(self):
        clock = ManualClock()
        alpha = 0.1
        counter = DecayCounter(alpha=alpha, clock=clock)
        counter.add(10)
        clock.advance(5)

        expected = 10 * math.exp(-alpha * 5)
        self.assertAlmostEqual(counter.get_count(), expected)
        self.assertAlmostEqual(counter.get_sample_count(), math.exp(-alpha * 5))
        self.assertAlmostEqual(counter.get_rate(), expected * alpha)

    def test_decay_at_explicit_instant(self):
        clock = ManualClock()
        counter = DecayCounter(alpha=1.0, clock=clock)
        counter.add(1)
        self.assertAlmostEqual(counter.get_count(now=2.0), math.exp(-2.0))
        # Reading does not move the clock or change state
        self.assertAlmostEqual(counter.get_count(), 1.0)

    def test_geometric_bound(self):
        clock = ManualClock()
        alpha = 0.5
        step = 1.0
        counter = DecayCounter(alpha=alpha, clock=clock)
        n = 200
        for _ in range(n):
            counter.add(1)
            clock.advance(step)

        count = counter.get_sample_count(now=clock() - step)
        self.assertLess(count, n)
        # Sum of exp(-alpha * step * k) over k >= 0
        bound = 1.0 / (1.0 - math.exp(-alpha * step))
        self.assertAlmostEqual(count, bound, places=6)

    def test_rescale_keeps_values_finite(self):
        clock = ManualClock()
        alpha = 1.0
        counter = DecayCounter(alpha=alpha, clock=clock)
        counter.add(100)
        # Far beyond exp() overflow if weights were never rescaled
        clock.advance(2000)
        counter.add(3)
        clock.advance(1)
        counter.add(5)

        expected = 3 * math.exp(-alpha) + 5
        self.assertAlmostEqual(counter.get_count(), expected)
        self.assertTrue(math.isfinite(counter._sum))

    def test_long_idle_read_does_not_overflow(self):
        clock = ManualClock()
        counter = DecayCounter(alpha=1.0, clock=clock)
        counter.add(1)
        clock.advance(10_000)
        self.assertEqual(counter.get_count(), 0.0)

    def test_count_ratio(self):
        clock = ManualClock()
        latencies = DecayCounter(alpha=0.5, clock=clock)
        latencies.add(30)
        clock.advance(4)
        requests = DecayCounter(alpha=0.5, clock=clock)
        requests.add(2)
        latencies.add(20)

        now = clock()
        expected = latencies.get_count(now) / requests.get_count(now)
        self.assertAlmostEqual(latencies.count_ratio(requests), expected)

        # The quotient survives counts that have decayed to nothing
        clock.advance(5_000)
        self.assertEqual(requests.get_count(), 0.0)
        self.assertAlmostEqual(latencies.count_ratio(requests), expected)

    def test_count_ratio_empty(self):
        counter = DecayCounter(alpha=1.0, clock=ManualClock())
        counter.add(5)
        self.assertTrue(math.isnan(counter.count_ratio(DecayCounter(alpha=1.0))))

    def test_reset(self):
        clock = ManualClock()
        counter = DecayCounter(alpha=0.2, clock=clock)
        counter.add(10)
        clock.advance(3)
        counter.reset()

        self.assertEqual(counter.get_count(), 0.0)
        self.assertEqual(counter.get_sample_count(), 0.0)
        self.assertEqual(counter.items_processed, 0)
        self.assertEqual(counter.alpha, 0.2)

        counter.add(7)
        self.assertAlmostEqual(counter.get_count(), 7.0)

    def test_get_stats(self):
        counter = DecayCounter(alpha=0.0)
        counter.add(2)
        counter.add(4)
        stats = counter.get_stats()
        self.assertEqual(stats["type"], "DecayCounter")
        self.assertEqual(stats["count"], 6.0)
        self.assertEqual(stats["sample_count"], 2.0)
        self.assertEqual(stats["items_processed"], 2)


if __name__ == "__main__":
    unittest.main()
