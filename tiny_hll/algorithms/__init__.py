"""
Algorithm implementations for tiny-hll.
"""

from tiny_hll.algorithms.hyperloglog import HyperLogLog

__all__ = [
    "HyperLogLog",
]
