"""
Exceptions raised by tiny-hll.

Every error derives from HyperLogLogError and from the builtin exception a
caller would naturally catch (ValueError or IndexError).
"""


class HyperLogLogError(Exception):
    """Base exception for all sketch errors."""

    pass


class InvalidPrecision(HyperLogLogError, ValueError):
    """Raised when the precision k is not an integer in the supported range."""

    def __init__(self, precision: object, low: int, high: int) -> None:
        self.precision = precision
        super().__init__(
            f"Precision must be an integer between {low} and {high} "
            f"(inclusive), got {precision!r}"
        )


class InvalidSeed(HyperLogLogError, ValueError):
    """Raised when a hash seed is not an unsigned 32-bit integer."""

    def __init__(self, seed: object) -> None:
        self.seed = seed
        super().__init__(f"Seed must be an integer in [0, 2**32 - 1], got {seed!r}")


class SizeMismatch(HyperLogLogError, ValueError):
    """Raised when combining register sets of different sizes."""

    def __init__(self, size: int, other_size: int) -> None:
        self.size = size
        self.other_size = other_size
        super().__init__(
            f"Cannot merge sketches with different sizes: {size} and {other_size}"
        )


class SeedMismatch(HyperLogLogError, ValueError):
    """Raised by a seed-checked merge when the two sketches hash differently."""

    def __init__(self, seed: int, other_seed: int) -> None:
        self.seed = seed
        self.other_seed = other_seed
        super().__init__(
            f"Cannot merge sketches with different seeds: {seed} and {other_seed}"
        )


class IndexOutOfRange(HyperLogLogError, IndexError):
    """Raised when a register index falls outside [0, size)."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Register index {index} out of range for size {size}")


class RankOutOfRange(HyperLogLogError, ValueError):
    """Raised when a register value falls outside [0, MAX_RANK]."""

    def __init__(self, rank: int, max_rank: int) -> None:
        self.rank = rank
        self.max_rank = max_rank
        super().__init__(f"Rank {rank} out of range [0, {max_rank}]")


class DeserializationError(HyperLogLogError, ValueError):
    """Raised when serialized sketch state is malformed."""

    pass
