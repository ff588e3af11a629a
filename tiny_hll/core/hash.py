"""
Hashing functions for tiny-hll.

This module provides a pure Python MurmurHash3 (x86, 32-bit variant) that
requires no external dependencies. Register selection in the sketch depends
on the exact bit pattern produced, so the output matches the reference
MurmurHash3_x86_32 bit for bit.
"""

from typing import Union

from tiny_hll.core.errors import InvalidSeed

DEFAULT_SEED = 314

_MASK_32 = 0xFFFFFFFF

# MurmurHash3 constants
_C1 = 0xCC9E2D51
_C2 = 0x1B873593

Hashable = Union[bytes, bytearray, memoryview, str]


def to_bytes(data: Hashable) -> bytes:
    """
    Convert hash input to bytes.

    Text is encoded as UTF-8; bytes-like objects are used as-is.

    Args:
        data: The value to convert.

    Returns:
        The bytes to hash.

    Raises:
        TypeError: If data is neither text nor bytes-like.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(
        f"Expected bytes, bytearray, memoryview or str, got {type(data).__name__}"
    )


def check_seed(seed: int) -> int:
    """
    Validate that seed is an unsigned 32-bit integer.

    Raises:
        InvalidSeed: If seed is not an int in [0, 2**32 - 1].
    """
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise InvalidSeed(seed)
    if not 0 <= seed <= _MASK_32:
        raise InvalidSeed(seed)
    return seed


def _rotl32(x: int, r: int) -> int:
    return ((x << r) | (x >> (32 - r))) & _MASK_32


def _mix_k1(k: int) -> int:
    k = (k * _C1) & _MASK_32
    k = _rotl32(k, 15)
    return (k * _C2) & _MASK_32


def _fmix32(h: int) -> int:
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK_32
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK_32
    h ^= h >> 16
    return h


def murmur3_hash(data: Hashable, seed: int = DEFAULT_SEED) -> int:
    """
    Pure Python implementation of MurmurHash3 (x86, 32-bit variant).

    MurmurHash is a non-cryptographic hash function with good distribution
    and avalanche behaviour. The function is pure and reentrant.

    Args:
        data: The bytes to hash (text is encoded as UTF-8).
        seed: Unsigned 32-bit seed. Defaults to 314, the sketch default.

    Returns:
        Unsigned 32-bit hash value.

    Raises:
        TypeError: If data is not bytes-like or str.
        InvalidSeed: If seed is not an unsigned 32-bit integer.
    """
    key = to_bytes(data)
    h = check_seed(seed)
    length = len(key)

    # Body: 4-byte little-endian blocks
    nblocks = length // 4
    for i in range(nblocks):
        k = int.from_bytes(key[i * 4 : i * 4 + 4], "little")
        h ^= _mix_k1(k)
        h = _rotl32(h, 13)
        h = (h * 5 + 0xE6546B64) & _MASK_32

    # Tail: remaining 0-3 bytes
    tail = length & 3
    idx = nblocks * 4
    k = 0
    if tail >= 3:
        k ^= key[idx + 2] << 16
    if tail >= 2:
        k ^= key[idx + 1] << 8
    if tail >= 1:
        k ^= key[idx]
        h ^= _mix_k1(k)

    # Finalization
    h ^= length & _MASK_32
    return _fmix32(h)
