"""
Core functionality for tiny-hll.
"""

from tiny_hll.core.base import CardinalityEstimator
from tiny_hll.core.hash import DEFAULT_SEED, murmur3_hash
from tiny_hll.core.registers import MAX_RANK, RegisterStore

__all__ = [
    # Base classes
    "CardinalityEstimator",
    "RegisterStore",
    # Utility functions
    "murmur3_hash",
    # Constants
    "DEFAULT_SEED",
    "MAX_RANK",
]
