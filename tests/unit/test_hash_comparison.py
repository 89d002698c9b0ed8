"""
Unit tests for bit-string comparison helpers.
"""

import unittest

from vaultdedup.core.dedup.hash_comparison import (
    calculate_bit_similarity,
    calculate_hamming_distance,
    calculate_similarity_ratio,
)


class TestHashComparison(unittest.TestCase):
    def test_hamming_distance(self):
        self.assertEqual(calculate_hamming_distance("1100", "1010"), 2)
        self.assertEqual(calculate_hamming_distance("1111", "1111"), 0)

    def test_hamming_distance_requires_equal_length(self):
        with self.assertRaises(ValueError):
            calculate_hamming_distance("10", "101")

    def test_similarity_ratio(self):
        self.assertEqual(calculate_similarity_ratio(0, 64), 1.0)
        self.assertEqual(calculate_similarity_ratio(16, 64), 0.75)
        self.assertEqual(calculate_similarity_ratio(3, 64), 61 / 64)
        for distance, length in [(1, 0), (-1, 64), (65, 64)]:
            with self.assertRaises(ValueError):
                calculate_similarity_ratio(distance, length)

    def test_bit_similarity(self):
        self.assertEqual(calculate_bit_similarity("1100", "1000"), 0.75)
        self.assertEqual(calculate_bit_similarity("1100", "110"), 0.0)
        self.assertEqual(calculate_bit_similarity("", ""), 0.0)

    def test_bit_similarity_is_exact_share_of_equal_bits(self):
        a = "1" * 20
        b = "0" * 3 + "1" * 17
        self.assertEqual(calculate_bit_similarity(a, b), 17 / 20)
        self.assertFalse(calculate_bit_similarity(a, b) > 0.85)


if __name__ == '__main__':
    unittest.main()
