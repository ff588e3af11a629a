"""
HyperLogLog Example for tiny-hll.

This example demonstrates how to use the HyperLogLog sketch for cardinality
estimation on data streams, how to merge sketches built on separate streams,
and how to ship a sketch between processes.
"""

import logging
import random
import sys
import time

from tiny_hll import HyperLogLog, SeedMismatch


def demonstrate_basic_hyperloglog():
    """Estimate the number of distinct values in a simulated stream."""
    print("\n=== Basic HyperLogLog Demo ===")

    hll = HyperLogLog(12)

    print(
        f"Using precision k={hll.precision()} "
        f"(error ~{hll.error_bounds()['relative_error']:.2%})"
    )
    print(f"Memory usage: ~{hll.estimate_size()} bytes")

    print("\nProcessing 100,000 values...")
    for i in range(100000):
        hll.add(f"user-{i}")

        if i % 20000 == 0:
            print(f"  Processed {i} items, current estimate: {hll.cardinality():.0f}")

    final_estimate = hll.cardinality()
    print(f"\nFinal cardinality estimate: {final_estimate:.0f} (true: 100000)")
    print(f"Relative error: {abs(final_estimate - 100000) / 100000:.2%}")

    stats = hll.get_stats()
    print("\nSketch statistics:")
    print(f"  Number of registers: {stats['num_registers']}")
    print(
        f"  Empty registers: {stats['empty_registers']} "
        f"({stats['empty_registers_pct']:.2f}%)"
    )
    print(f"  Maximum register value: {stats['max_register_value']}")


def demonstrate_skewed_stream():
    """Duplicates do not inflate the estimate."""
    print("\n=== Skewed Stream Demo ===")

    hll = HyperLogLog(14)
    true_uniques = set()

    n_unique = 20000
    weights = [1.0 / (i + 1) ** 1.2 for i in range(n_unique)]

    start_time = time.time()
    for value in random.choices(range(n_unique), weights=weights, k=200000):
        item = f"page-{value}"
        hll.add(item)
        true_uniques.add(item)
    elapsed = time.time() - start_time

    estimate = hll.cardinality()
    true_count = len(true_uniques)
    print(f"  Stream size: 200,000 items in {elapsed:.1f}s")
    print(f"  True unique count: {true_count:,}")
    print(f"  HyperLogLog estimate: {estimate:,.0f}")
    print(f"  Relative error: {abs(estimate - true_count) / true_count:.2%}")

    exact_bytes = sys.getsizeof(true_uniques)
    print(f"  Memory for exact storage (set): {exact_bytes:,} bytes")
    print(f"  Sketch memory: {hll.estimate_size():,} bytes")


def demonstrate_merge():
    """Combine sketches built on different shards of a stream."""
    print("\n=== Merge Demo ===")

    shards = [HyperLogLog(12) for _ in range(4)]
    for shard_id, shard in enumerate(shards):
        # Each shard sees 30,000 ids; neighbouring shards overlap by 10,000
        start = shard_id * 20000
        shard.add_all(f"id-{i}" for i in range(start, start + 30000))

    total = shards[0].copy()
    for shard in shards[1:]:
        total.merge(shard)

    true_count = 3 * 20000 + 30000
    print(f"  Per-shard estimates: {[round(s.cardinality()) for s in shards]}")
    print(f"  Merged estimate: {total.cardinality():.0f} (true: {true_count})")

    try:
        total.merge(HyperLogLog(12, seed=1), check_seed=True)
    except SeedMismatch as exc:
        print(f"  Refused seed-mismatched merge: {exc}")


def demonstrate_serialization():
    """Send a sketch as bytes and rebuild it."""
    print("\n=== Serialization Demo ===")

    hll = HyperLogLog(10, seed=2024)
    hll.add_all(f"session-{i}" for i in range(5000))

    blob = hll.to_bytes()
    restored = HyperLogLog.from_bytes(blob)

    print(f"  Binary size: {len(blob)} bytes")
    print(f"  JSON size: {len(hll.serialize(format='json'))} characters")
    print(f"  Restored equals original: {restored == hll}")
    print(f"  Restored estimate: {restored.cardinality():.0f}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    demonstrate_basic_hyperloglog()
    demonstrate_skewed_stream()
    demonstrate_merge()
    demonstrate_serialization()
