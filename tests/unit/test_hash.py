"""
Unit tests for hashing functions.
"""

import unittest
from collections import Counter

from tiny_hll.core.errors import InvalidSeed
from tiny_hll.core.hash import DEFAULT_SEED, murmur3_hash, to_bytes


class TestMurmur3Hash(unittest.TestCase):
    """Test cases for murmur3_hash in tiny_hll.core.hash."""

    def test_known_values(self):
        """Test against reference MurmurHash3_x86_32 outputs."""
        test_cases = [
            (b"", 0, 0x00000000),
            (b"", 1, 0x514E28B7),
            (b"", 0xFFFFFFFF, 0x81F16F39),
            (b"\x00", 0, 0x514E28B7),
            (b"\x00\x00", 0, 0x30F4C306),
            (b"\x00\x00\x00", 0, 0x85F0B427),
            (b"\x00\x00\x00\x00", 0, 0x2362F9DE),
            (b"\xff\xff\xff\xff", 0, 0x76293B50),
            (b"\x21\x43\x65\x87", 0, 0xF55B516B),
            (b"\x21\x43\x65\x87", 0x5082EDEE, 0x2362F9DE),
            (b"\x21\x43\x65", 0, 0x7E4A8634),
            (b"\x21\x43", 0, 0xA0F7B07A),
            (b"\x21", 0, 0x72661CF4),
            (b"a", 0x9747B28C, 0x7FA09EA6),
            (b"aa", 0x9747B28C, 0x5D211726),
            (b"aaa", 0x9747B28C, 0x283E0130),
            (b"aaaa", 0x9747B28C, 0x5A97808A),
            (b"ab", 0x9747B28C, 0x74875592),
            (b"abc", 0x9747B28C, 0xC84A62DD),
            (b"abcd", 0x9747B28C, 0xF0478627),
            (b"Hello, world!", 0x9747B28C, 0x24884CBA),
            (
                b"The quick brown fox jumps over the lazy dog",
                0x9747B28C,
                0x2FA826CD,
            ),
            (b"hello world", 0, 0x5E928F0F),
        ]

        for data, seed, expected in test_cases:
            hash_value = murmur3_hash(data, seed)
            self.assertEqual(
                hash_value,
                expected,
                f"MurmurHash3 of {data!r} with seed {seed:#x} should be "
                f"{expected:08x}, got {hash_value:08x}",
            )

    def test_default_seed(self):
        """The default seed is 314."""
        self.assertEqual(DEFAULT_SEED, 314)
        self.assertEqual(murmur3_hash(b"abc"), murmur3_hash(b"abc", 314))

    def test_reproducibility(self):
        """Test that the same input always produces the same hash."""
        first = murmur3_hash(b"abc", seed=314)
        for _ in range(10):
            self.assertEqual(murmur3_hash(b"abc", seed=314), first)

    def test_seed_changes_output(self):
        """Test that different seeds produce different outputs."""
        self.assertNotEqual(murmur3_hash(b"abc", seed=1), murmur3_hash(b"abc", seed=2))
        self.assertNotEqual(
            murmur3_hash(b"test seed", seed=0), murmur3_hash(b"test seed", seed=42)
        )

    def test_input_types(self):
        """Text is hashed as UTF-8; bytes-like objects hash like bytes."""
        expected = murmur3_hash(b"caf\xc3\xa9")
        self.assertEqual(murmur3_hash("café"), expected)
        self.assertEqual(murmur3_hash(bytearray(b"caf\xc3\xa9")), expected)
        self.assertEqual(murmur3_hash(memoryview(b"caf\xc3\xa9")), expected)

        for bad in (123, 3.14, None, [1, 2], (1, 2)):
            with self.assertRaises(TypeError):
                murmur3_hash(bad)

    def test_to_bytes(self):
        self.assertEqual(to_bytes("abc"), b"abc")
        self.assertEqual(to_bytes(bytearray(b"abc")), b"abc")
        with self.assertRaises(TypeError):
            to_bytes(1)

    def test_invalid_seed(self):
        """Seeds must be unsigned 32-bit integers."""
        for seed in (-1, 2**32, 1.5, "1", None, True):
            with self.assertRaises(InvalidSeed):
                murmur3_hash(b"abc", seed)

        # InvalidSeed is also a ValueError
        with self.assertRaises(ValueError):
            murmur3_hash(b"abc", -1)

    def test_range(self):
        """Test that hashes are unsigned 32-bit integers."""
        inputs = [b"", b"test", b"a" * 1000, bytes(range(256))]

        for data in inputs:
            for seed in (0, 314, 0xFFFFFFFF):
                hash_value = murmur3_hash(data, seed)
                self.assertIsInstance(hash_value, int)
                self.assertGreaterEqual(hash_value, 0)
                self.assertLessEqual(hash_value, 0xFFFFFFFF)

    def test_tail_lengths(self):
        """Inputs of every tail length (0-3 bytes) hash differently."""
        hashes = {murmur3_hash(b"x" * n) for n in range(0, 9)}
        self.assertEqual(len(hashes), 9)

    def test_distribution(self):
        """Test that top bits of the hash are reasonably uniform."""
        num_samples = 10000
        num_buckets = 16

        # Bucket on the top 4 bits, which is how the sketch selects registers
        counter = Counter(
            murmur3_hash(f"item-{i}".encode()) >> 28 for i in range(num_samples)
        )

        expected = num_samples / num_buckets
        self.assertEqual(len(counter), num_buckets)
        for bucket, count in counter.items():
            self.assertGreaterEqual(
                count, expected * 0.8, f"Bucket {bucket} has too few items"
            )
            self.assertLessEqual(
                count, expected * 1.2, f"Bucket {bucket} has too many items"
            )

    def test_avalanche(self):
        """Small changes in input should cause significant changes in output."""
        base_hash = murmur3_hash(b"test_avalanche", seed=0)
        mod_hash = murmur3_hash(b"test_avalanchf", seed=0)

        diff_bits = bin(base_hash ^ mod_hash).count("1")
        self.assertGreaterEqual(
            diff_bits,
            10,
            f"MurmurHash3 changed only {diff_bits} bits with small input change",
        )


if __name__ == "__main__":
    unittest.main()
