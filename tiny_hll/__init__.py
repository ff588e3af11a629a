"""
tiny-hll - HyperLogLog cardinality estimation

tiny-hll is a Python library for estimating the number of distinct elements
in a stream of byte strings with a fixed, small amount of memory.
"""

import logging

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from tiny_hll.algorithms.hyperloglog import (
    MAX_PRECISION,
    MIN_PRECISION,
    HyperLogLog,
)
from tiny_hll.core.base import CardinalityEstimator
from tiny_hll.core.errors import (
    DeserializationError,
    HyperLogLogError,
    IndexOutOfRange,
    InvalidPrecision,
    InvalidSeed,
    RankOutOfRange,
    SeedMismatch,
    SizeMismatch,
)
from tiny_hll.core.hash import DEFAULT_SEED, murmur3_hash
from tiny_hll.core.registers import MAX_RANK

# The sketch under its generic name
Sketch = HyperLogLog

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Sketch
    "HyperLogLog",
    "Sketch",
    "CardinalityEstimator",
    # Hashing
    "murmur3_hash",
    # Constants
    "DEFAULT_SEED",
    "MIN_PRECISION",
    "MAX_PRECISION",
    "MAX_RANK",
    # Errors
    "HyperLogLogError",
    "InvalidPrecision",
    "InvalidSeed",
    "SizeMismatch",
    "SeedMismatch",
    "IndexOutOfRange",
    "RankOutOfRange",
    "DeserializationError",
]
