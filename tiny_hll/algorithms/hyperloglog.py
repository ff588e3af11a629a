"""
HyperLogLog cardinality estimator.

The sketch hashes every item with 32-bit MurmurHash3, uses the top k bits of
the hash to pick one of 2^k registers, and records in that register the
largest rank (position of the first set bit) seen in the remaining 32 - k
bits. The estimate combines the registers with a bias-corrected harmonic
mean, switching to linear counting for small cardinalities and to a
collision correction near the size of the 32-bit hash space.

References:
    - Flajolet, P., Fusy, E., Gandouet, O., & Meunier, F. (2007).
      HyperLogLog: the analysis of a near-optimal cardinality estimation algorithm.
"""

import logging
import math
from typing import Any, Dict, Union

from tiny_hll.core.base import CardinalityEstimator
from tiny_hll.core.errors import (
    DeserializationError,
    InvalidPrecision,
    SeedMismatch,
    SizeMismatch,
)
from tiny_hll.core.hash import DEFAULT_SEED, Hashable, check_seed, murmur3_hash
from tiny_hll.core.registers import RegisterStore

logger = logging.getLogger(__name__)

MIN_PRECISION = 2
MAX_PRECISION = 16

HASH_BITS = 32

_TWO_32 = float(1 << HASH_BITS)
_LARGE_RANGE_THRESHOLD = _TWO_32 / 30.0
_SMALL_RANGE_FACTOR = 2.5

# Binary layout: precision (1 byte), seed (4 bytes, big-endian), registers
_HEADER_SIZE = 5


def _count_leading_zeros(x: int, bits: int) -> int:
    """
    Count the number of leading zeros of x within a window of ``bits`` bits.

    Args:
        x: The integer to analyze, assumed to fit in ``bits`` bits.
        bits: Width of the window.

    Returns:
        The number of leading zeros (``bits`` when x is zero).
    """
    if x == 0:
        return bits
    return bits - x.bit_length()


def _alpha(m: int) -> float:
    """Bias correction constant for m registers."""
    if m == 16:
        return 0.673
    if m == 32:
        return 0.697
    if m == 64:
        return 0.709
    return 0.7213 / (1.0 + 1.079 / m)


def _check_precision(k: Any) -> int:
    if isinstance(k, bool) or not isinstance(k, int):
        raise InvalidPrecision(k, MIN_PRECISION, MAX_PRECISION)
    if not MIN_PRECISION <= k <= MAX_PRECISION:
        raise InvalidPrecision(k, MIN_PRECISION, MAX_PRECISION)
    return k


class HyperLogLog(CardinalityEstimator):
    """
    HyperLogLog sketch for estimating the number of distinct byte strings.

    The precision parameter k determines both the accuracy and the memory usage:
    - There are m = 2^k registers of one byte each
    - The standard error is roughly 1.04/sqrt(m)

    For common use cases:
    - k=10: ~1KB memory, ~3.25% error
    - k=12: ~4KB memory, ~1.62% error
    - k=14: ~16KB memory, ~0.81% error
    - k=16: ~64KB memory, ~0.40% error

    A sketch is completely described by ``(k, seed, registers)``; see
    ``to_bytes`` and ``to_dict``. Instances are not thread-safe: concurrent
    ``add`` or ``merge`` calls on one sketch must be serialized by the caller.
    """

    def __init__(self, k: int, seed: int = DEFAULT_SEED):
        """
        Initialize an empty sketch.

        Args:
            k: Precision, the base-2 logarithm of the register count.
               Valid values are 2 to 16.
            seed: Unsigned 32-bit MurmurHash3 seed. Defaults to 314.

        Raises:
            InvalidPrecision: If k is not an integer in [2, 16].
            InvalidSeed: If seed is not an unsigned 32-bit integer.
        """
        # Validate everything before allocating registers
        self._k = _check_precision(k)
        self._seed = check_seed(seed)

        self._m = 1 << self._k
        self._alpha = _alpha(self._m)

        # The top k bits of a hash select the register, the rest give the rank
        self._tail_bits = HASH_BITS - self._k
        self._tail_mask = (1 << self._tail_bits) - 1

        self._registers = RegisterStore(self._m)

        logger.debug("Created HyperLogLog with k=%d, seed=%d", self._k, self._seed)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(k={self._k}, seed={self._seed})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperLogLog):
            return NotImplemented
        return (
            self._k == other._k
            and self._seed == other._seed
            and self._registers == other._registers
        )

    def __or__(self, other: object) -> "HyperLogLog":
        if not isinstance(other, HyperLogLog):
            return NotImplemented
        return self.union(other)

    def add(self, data: Hashable) -> None:
        """
        Add an item to the sketch.

        This method:
        1. Hashes the item to a 32-bit value using the sketch seed
        2. Uses the top k bits as the register index in [0, m - 1]
        3. Computes the rank, 1 + leading zeros of the remaining 32 - k bits
        4. Raises the register to the rank if the rank is larger

        Args:
            data: The item to add, as bytes or text (encoded as UTF-8).

        Raises:
            TypeError: If data is neither bytes-like nor str.
        """
        hash_value = murmur3_hash(data, self._seed)

        register_index = hash_value >> self._tail_bits
        remaining_hash = hash_value & self._tail_mask

        rank = _count_leading_zeros(remaining_hash, self._tail_bits) + 1

        self._registers.raise_to(register_index, rank)

    def cardinality(self) -> float:
        """
        Estimate the number of distinct items added to the sketch.

        This method implements the HyperLogLog estimate with its corrections:
        1. Raw estimate alpha * m^2 / sum(2^-register)
        2. Linear counting m * ln(m / V) when the raw estimate is at most 2.5m
           and V > 0 registers are still empty
        3. Large range correction -2^32 * ln(1 - E / 2^32) above 2^32 / 30

        Returns:
            The estimate as a float. An empty sketch returns 0.0 and a sketch
            whose raw estimate reaches 2^32 returns infinity.
        """
        m = self._m

        # Indicator sum: the harmonic mean's denominator
        indicator = 0.0
        for rank in self._registers:
            indicator += 2.0 ** -rank

        raw_estimate = self._alpha * m * m / indicator

        if raw_estimate <= _SMALL_RANGE_FACTOR * m:
            zero_registers = self._registers.count_zeros()
            if zero_registers > 0:
                return m * math.log(m / zero_registers)

        if raw_estimate <= _LARGE_RANGE_THRESHOLD:
            return raw_estimate

        if raw_estimate >= _TWO_32:
            logger.warning(
                "HyperLogLog raw estimate %.0f exceeds the 32-bit hash space; "
                "returning infinity",
                raw_estimate,
            )
            return math.inf

        return -_TWO_32 * math.log(1.0 - raw_estimate / _TWO_32)

    def merge(self, other: "HyperLogLog", check_seed: bool = False) -> None:
        """
        Merge another sketch into this one by taking register-wise maxima.

        The result estimates the cardinality of the union of both streams.
        ``other`` is left untouched. Merging only gives meaningful estimates
        when both sketches use the same seed; by default a seed mismatch is
        logged and the merge goes ahead.

        Args:
            other: Another HyperLogLog with the same number of registers.
            check_seed: Reject sketches built with a different seed.

        Raises:
            TypeError: If other is not a HyperLogLog.
            SizeMismatch: If the sketches have different sizes.
            SeedMismatch: If check_seed is set and the seeds differ.
        """
        self._check_same_type(other)

        if other._m != self._m:
            raise SizeMismatch(self._m, other._m)

        if other._seed != self._seed:
            if check_seed:
                raise SeedMismatch(self._seed, other._seed)
            logger.warning(
                "Merging HyperLogLog sketches with different seeds (%d and %d); "
                "the combined estimate is not meaningful",
                self._seed,
                other._seed,
            )

        if other is self:
            return

        self._registers.merge(other._registers)
        logger.debug("Merged HyperLogLog sketches of size %d", self._m)

    def union(self, other: "HyperLogLog", check_seed: bool = False) -> "HyperLogLog":
        """
        Return a new sketch holding the merge of this sketch and another.

        Neither operand is modified. Errors are the same as for ``merge``.
        """
        result = self.copy()
        result.merge(other, check_seed=check_seed)
        return result

    def copy(self) -> "HyperLogLog":
        """Return an independent sketch with the same precision, seed and registers."""
        clone = self.__class__(self._k, self._seed)
        clone._registers = self._registers.copy()
        return clone

    def registers(self) -> bytes:
        """
        Get a copy of the registers, one byte per register.

        Changing the returned value never affects the sketch.
        """
        return self._registers.snapshot()

    def set_register(self, index: int, rank: int) -> None:
        """
        Set the register at a zero-based index to the given rank.

        Used to rebuild a sketch from a register snapshot and in tests. The
        register is left unchanged when validation fails.

        Args:
            index: Register index in [0, size()).
            rank: Rank in [0, 32].

        Raises:
            IndexOutOfRange: If index is outside [0, size()).
            RankOutOfRange: If rank is outside [0, 32].
        """
        self._registers.set(index, rank)

    def seed(self) -> int:
        """Get the seed used in the MurmurHash3 hash."""
        return self._seed

    def size(self) -> int:
        """Get the number of registers."""
        return self._m

    def precision(self) -> int:
        """Get the precision k, the base-2 logarithm of the register count."""
        return self._k

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the sketch to a dictionary for serialization.

        Returns:
            A dictionary representation of the sketch.
        """
        data = self._base_dict()
        data.update(
            {
                "precision": self._k,
                "seed": self._seed,
                "registers": list(self._registers),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HyperLogLog":
        """
        Create a sketch from a dictionary representation.

        Every register is written through ``set_register``, so out-of-range
        values are rejected.

        Args:
            data: The dictionary containing the sketch state.

        Returns:
            A new sketch.

        Raises:
            DeserializationError: If required fields are missing, or the
                register list has the wrong length or non-int values.
            InvalidPrecision: If the stored precision is invalid.
            RankOutOfRange: If a stored register value is out of range.
        """
        try:
            precision = data["precision"]
            registers = data["registers"]
            seed = data.get("seed", DEFAULT_SEED)
            kind = data.get("type", cls.__name__)
        except (KeyError, TypeError, AttributeError) as exc:
            raise DeserializationError(f"Malformed sketch dictionary: {exc}") from exc

        if kind != cls.__name__:
            raise DeserializationError(f"Cannot load a {kind} as {cls.__name__}")
        if not isinstance(registers, (list, tuple, bytes, bytearray)):
            raise DeserializationError(
                f"Registers must be a sequence, got {type(registers).__name__}"
            )

        sketch = cls(precision, seed)
        if len(registers) != sketch._m:
            raise DeserializationError(
                f"Expected {sketch._m} registers for precision {precision}, "
                f"got {len(registers)}"
            )
        for index, rank in enumerate(registers):
            if isinstance(rank, bool) or not isinstance(rank, int):
                raise DeserializationError(
                    f"Register {index} must be an int, got {type(rank).__name__}"
                )
        for index, rank in enumerate(registers):
            sketch.set_register(index, rank)

        logger.debug("Loaded %r from dictionary", sketch)
        return sketch

    def to_bytes(self) -> bytes:
        """
        Encode the sketch as precision, seed and registers.

        Layout: 1 byte precision, 4 bytes big-endian seed, then one byte per
        register.
        """
        header = bytes([self._k]) + self._seed.to_bytes(4, "big")
        return header + self._registers.snapshot()

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "HyperLogLog":
        """
        Decode a sketch produced by ``to_bytes``.

        Raises:
            DeserializationError: If the data is truncated or has the wrong length.
            InvalidPrecision: If the stored precision is invalid.
            RankOutOfRange: If a stored register value is out of range.
        """
        blob = bytes(data)
        if len(blob) < _HEADER_SIZE:
            raise DeserializationError(
                f"Sketch data too short: {len(blob)} bytes, "
                f"need at least {_HEADER_SIZE}"
            )

        sketch = cls(blob[0], int.from_bytes(blob[1:_HEADER_SIZE], "big"))
        body = blob[_HEADER_SIZE:]
        if len(body) != sketch._m:
            raise DeserializationError(
                f"Expected {sketch._m} register bytes, got {len(body)}"
            )
        for index, rank in enumerate(body):
            sketch.set_register(index, rank)

        logger.debug("Loaded %r from %d bytes", sketch, len(blob))
        return sketch

    @classmethod
    def create_from_error_rate(
        cls, relative_error: float, seed: int = DEFAULT_SEED
    ) -> "HyperLogLog":
        """
        Create a sketch with the desired standard error.

        Args:
            relative_error: The target relative (standard) error.
                For example, 0.01 means a target error of 1%.
            seed: MurmurHash3 seed.

        Returns:
            A new sketch with the smallest precision meeting the target.

        Raises:
            ValueError: If relative_error is not between 0 and 1, or is too
                small to achieve with precision 16.
        """
        if not (0 < relative_error < 1):
            raise ValueError("Relative error must be between 0 and 1")

        # Standard error = 1.04/sqrt(2^k); take the first k that meets the target
        for precision in range(MIN_PRECISION, MAX_PRECISION + 1):
            if 1.04 / math.sqrt(1 << precision) <= relative_error:
                return cls(precision, seed)

        raise ValueError(
            f"Relative error of {relative_error} is too small to achieve "
            f"with maximum precision of {MAX_PRECISION}. Minimum achievable "
            f"error is approximately {1.04 / math.sqrt(1 << MAX_PRECISION):.2%}."
        )

    def error_bounds(self) -> Dict[str, float]:
        """
        Calculate the theoretical error bounds for this sketch.

        Returns:
            A dictionary with the error bounds:
            - relative_error: The standard error (approximately 1.04/sqrt(m))
            - confidence_68pct: Error range for 68% confidence (1 sigma)
            - confidence_95pct: Error range for 95% confidence (1.96 sigma)
            - confidence_99pct: Error range for 99% confidence (2.58 sigma)
        """
        bounds = super().error_bounds()

        std_error = 1.04 / math.sqrt(self._m)
        bounds.update(
            {
                "relative_error": std_error,
                "confidence_68pct": std_error,
                "confidence_95pct": std_error * 1.96,
                "confidence_99pct": std_error * 2.58,
            }
        )
        return bounds

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the sketch.

        Extends the base statistics with the sketch parameters and the
        distribution of register values.

        Returns:
            A dictionary containing various statistics about the sketch.
        """
        stats = super().get_stats()

        register_values = list(self._registers)
        empty_registers = register_values.count(0)

        # Keys are strings so the result stays JSON compatible
        distribution: Dict[str, int] = {}
        for value in sorted(set(register_values)):
            distribution[str(value)] = register_values.count(value)

        stats.update(
            {
                "precision": self._k,
                "num_registers": self._m,
                "seed": self._seed,
                "alpha_value": self._alpha,
                "empty_registers": empty_registers,
                "empty_registers_pct": empty_registers / self._m * 100,
                "max_register_value": max(register_values),
                "avg_register_value": sum(register_values) / self._m,
                "register_value_distribution": distribution,
                "max_reachable_rank": self._tail_bits + 1,
            }
        )
        return stats

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of the sketch in bytes.

        Returns:
            Estimated size in bytes, dominated by the register buffer.
        """
        return super().estimate_size() + self._registers.estimate_size()
