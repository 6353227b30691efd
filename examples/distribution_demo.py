"""
TimeDistribution Demo for timedist.

This example shows how to track request latencies with a decaying
distribution, read consistent snapshots, and watch old latencies fade out.
"""

import random
import threading

from timedist import ExponentialDecay, ManualClock, TimeDistribution, TimeUnit


def demonstrate_basic_distribution():
    """Track a stream of latencies without decay."""
    print("\n=== Basic TimeDistribution Demo ===")

    dist = TimeDistribution(unit=TimeUnit.MILLISECONDS)

    # Simulated latencies: mostly around 20ms with a slow tail
    rng = random.Random(1)
    for _ in range(10000):
        latency_ms = rng.lognormvariate(3.0, 0.5)
        dist.add(int(latency_ms * 1_000_000))

    snapshot = dist.snapshot()
    print(f"Count: {snapshot.count:.0f}")
    print(f"Min:   {snapshot.min:.2f} ms")
    print(f"Avg:   {snapshot.avg:.2f} ms")
    print(f"p50:   {snapshot.p50:.2f} ms")
    print(f"p90:   {snapshot.p90:.2f} ms")
    print(f"p99:   {snapshot.p99:.2f} ms")
    print(f"Max:   {snapshot.max:.2f} ms")


def demonstrate_decay():
    """Show recent latencies taking over from old ones."""
    print("\n=== Decay Demo ===")

    clock = ManualClock()
    dist = TimeDistribution(
        alpha=ExponentialDecay.one_minute(), unit=TimeUnit.MILLISECONDS, clock=clock
    )

    # Ten minutes of fast responses, then a slowdown
    for second in range(1200):
        latency_ms = 10 if second < 600 else 200
        dist.add(latency_ms * 1_000_000)
        clock.advance(1)

        if second % 120 == 119:
            snapshot = dist.snapshot()
            print(
                f"  t={second + 1:4d}s  count={snapshot.count:6.1f}  "
                f"avg={snapshot.avg:6.1f} ms  p50={snapshot.p50:6.1f} ms"
            )


def demonstrate_concurrent_writers():
    """Several threads writing while another reads snapshots."""
    print("\n=== Concurrent Writers Demo ===")

    dist = TimeDistribution(unit="us")

    def writer(seed):
        rng = random.Random(seed)
        for _ in range(5000):
            dist.add(int(rng.uniform(100, 900) * 1_000))

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snapshot = dist.snapshot()
    print(f"Count: {snapshot.count:.0f} (expected 20000)")
    print(f"p50:   {snapshot.p50:.1f} us")
    print(f"JSON:  {snapshot.serialize()}")


def demonstrate_reset():
    """Reset discards history but keeps the configuration."""
    print("\n=== Reset Demo ===")

    dist = TimeDistribution(unit="s")
    for value in (1, 2, 3):
        dist.add(value * 1_000_000_000)
    print(f"Before reset: {dist.snapshot()}")

    dist.reset()
    print(f"After reset:  {dist.snapshot()}")


if __name__ == "__main__":
    demonstrate_basic_distribution()
    demonstrate_decay()
    demonstrate_concurrent_writers()
    demonstrate_reset()
