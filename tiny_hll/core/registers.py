"""
Fixed-size register storage for HyperLogLog sketches.
"""

import array
import sys
from typing import Iterator

from tiny_hll.core.errors import IndexOutOfRange, RankOutOfRange, SizeMismatch

# Largest meaningful rank for a 32-bit hash window
MAX_RANK = 32


class RegisterStore:
    """
    A zero-initialized array of small unsigned integers ("ranks").

    Registers are kept in an ``array.array`` with typecode 'B' (unsigned char,
    0 to 255), one byte per register. Only ``[0, MAX_RANK]`` is meaningful.
    The store never changes length. Values only go up through ``raise_to``
    and ``merge``; ``set`` is the single validated path that can write an
    arbitrary rank.
    """

    def __init__(self, size: int):
        """
        Allocate ``size`` registers, all set to zero.

        Args:
            size: Number of registers. Must be positive.

        Raises:
            ValueError: If size is not positive.
        """
        if size <= 0:
            raise ValueError(f"Register count must be positive, got {size}")
        self._cells = array.array("B", bytes(size))

    def __len__(self) -> int:
        return len(self._cells)

    def __getitem__(self, index: int) -> int:
        return self._cells[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterStore):
            return NotImplemented
        return self._cells == other._cells

    def raise_to(self, index: int, rank: int) -> None:
        """
        Write ``rank`` at ``index`` only if it exceeds the current value.

        Callers are trusted to pass an in-range index and rank; this is the
        hot path used by ``add``.
        """
        if rank > self._cells[index]:
            self._cells[index] = rank

    def set(self, index: int, rank: int) -> None:
        """
        Overwrite the register at ``index`` with ``rank``.

        Both arguments are validated before anything is written.

        Raises:
            TypeError: If index or rank is not an int.
            IndexOutOfRange: If index is outside [0, len(self)).
            RankOutOfRange: If rank is outside [0, MAX_RANK].
        """
        for name, value in (("index", index), ("rank", rank)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(
                    f"Register {name} must be an int, got {type(value).__name__}"
                )
        if not 0 <= index < len(self._cells):
            raise IndexOutOfRange(index, len(self._cells))
        if not 0 <= rank <= MAX_RANK:
            raise RankOutOfRange(rank, MAX_RANK)
        self._cells[index] = rank

    def merge(self, other: "RegisterStore") -> None:
        """
        Take the pointwise maximum with another store of the same size.

        Raises:
            SizeMismatch: If the stores differ in length. Nothing is modified.
        """
        if len(other) != len(self):
            raise SizeMismatch(len(self), len(other))
        cells = self._cells
        for i, rank in enumerate(other._cells):
            if rank > cells[i]:
                cells[i] = rank

    def snapshot(self) -> bytes:
        """Return an independent copy of all registers as bytes."""
        return self._cells.tobytes()

    def count_zeros(self) -> int:
        """Count registers that have never been written."""
        return self._cells.count(0)

    def copy(self) -> "RegisterStore":
        """Return an independent store with the same register values."""
        clone = RegisterStore(len(self))
        clone._cells = array.array("B", self._cells)
        return clone

    def estimate_size(self) -> int:
        """Approximate memory used by the register buffer, in bytes."""
        return sys.getsizeof(self) + sys.getsizeof(self._cells)
