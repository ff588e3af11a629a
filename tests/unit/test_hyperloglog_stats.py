"""
Unit tests for HyperLogLog statistics and error bounds.
"""

import json
import math
import unittest

from tiny_hll.algorithms.hyperloglog import HyperLogLog


class TestHyperLogLogStats(unittest.TestCase):
    """Test cases for HyperLogLog statistics reporting."""

    def test_error_bounds(self):
        """Test error bound calculations."""
        for precision in [2, 4, 8, 12, 16]:
            hll = HyperLogLog(precision)
            bounds = hll.error_bounds()

            expected_std_error = 1.04 / math.sqrt(2**precision)

            self.assertAlmostEqual(
                bounds["relative_error"], expected_std_error, places=10
            )
            self.assertAlmostEqual(
                bounds["confidence_68pct"], expected_std_error, places=10
            )
            self.assertAlmostEqual(
                bounds["confidence_95pct"], expected_std_error * 1.96, places=10
            )
            self.assertAlmostEqual(
                bounds["confidence_99pct"], expected_std_error * 2.58, places=10
            )

    def test_get_stats_empty(self):
        """Test getting stats for an empty sketch."""
        hll = HyperLogLog(10)

        stats = hll.get_stats()

        self.assertEqual(stats["type"], "HyperLogLog")
        self.assertEqual(stats["estimated_cardinality"], 0.0)
        self.assertEqual(stats["precision"], 10)
        self.assertEqual(stats["num_registers"], 1024)
        self.assertEqual(stats["seed"], 314)
        self.assertAlmostEqual(stats["alpha_value"], 0.7213 / (1 + 1.079 / 1024))
        self.assertEqual(stats["empty_registers"], 1024)
        self.assertEqual(stats["empty_registers_pct"], 100.0)
        self.assertEqual(stats["max_register_value"], 0)
        self.assertEqual(stats["register_value_distribution"], {"0": 1024})
        self.assertEqual(stats["max_reachable_rank"], 23)

    def test_get_stats_with_data(self):
        """Test getting stats for a sketch with data."""
        hll = HyperLogLog(8)
        hll.add_all(f"item-{i}" for i in range(1000))

        stats = hll.get_stats()

        self.assertEqual(stats["num_registers"], 256)
        self.assertTrue(0 <= stats["empty_registers_pct"] <= 100)
        self.assertGreaterEqual(stats["max_register_value"], 1)
        self.assertLessEqual(stats["max_register_value"], 25)
        self.assertGreater(stats["avg_register_value"], 0)

        # The distribution accounts for every register
        distribution = stats["register_value_distribution"]
        self.assertEqual(sum(distribution.values()), 256)
        self.assertEqual(distribution.get("0", 0), stats["empty_registers"])

        self.assertAlmostEqual(stats["estimated_cardinality"], hll.cardinality())
        self.assertIn("relative_error", stats)
        self.assertIn("confidence_95pct", stats)
        self.assertGreater(stats["memory_bytes"], 256)

        # Stats are JSON serializable
        json.dumps(stats)

    def test_estimate_size(self):
        """Memory estimates grow with the register count."""
        sizes = [HyperLogLog(k).estimate_size() for k in (4, 8, 12, 16)]
        self.assertEqual(sizes, sorted(sizes))
        self.assertGreaterEqual(sizes[-1], 65536)

    def test_accuracy_improves_with_precision(self):
        """Average error shrinks as precision grows."""
        n = 5000
        dataset = [f"item-{i}".encode() for i in range(n)]
        precisions = [6, 8, 10, 12]
        num_trials = 3

        avg_errors = []
        for p in precisions:
            total = 0.0
            for trial in range(num_trials):
                hll = HyperLogLog(p, seed=42 + trial)
                hll.add_all(dataset)
                total += abs(hll.cardinality() - n) / n
            avg_errors.append(total / num_trials)

        # Errors stay within 3x the theoretical standard error
        for p, error in zip(precisions, avg_errors):
            self.assertLessEqual(
                error,
                3 * 1.04 / math.sqrt(2**p),
                f"Error at precision {p} exceeds 3x theoretical bound: {error:.4f}",
            )

        self.assertLessEqual(
            sum(avg_errors[2:]) / 2,
            sum(avg_errors[:2]) / 2 * 1.2,
            f"Average error did not decrease with precision: {avg_errors}",
        )


if __name__ == "__main__":
    unittest.main()
