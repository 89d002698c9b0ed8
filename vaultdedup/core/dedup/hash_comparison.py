"""
Hash Comparison Utilities
=========================

Functions for comparing perceptual fingerprints using Hamming distance.
Fingerprints are compared as '0'/'1' bit strings of equal length.
"""


def calculate_hamming_distance(bits1: str, bits2: str) -> int:
    """
    Counts differing positions between two bit strings.
    Raises ValueError if lengths differ.
    """
    if len(bits1) != len(bits2):
        raise ValueError("Fingerprints must be of the same length to calculate Hamming distance.")

    return sum(1 for a, b in zip(bits1, bits2) if a != b)


def calculate_similarity_ratio(hamming_distance: int, bit_length: int) -> float:
    """
    Similarity in [0, 1] from a Hamming distance, i.e. the share of equal bits.
    """
    if bit_length <= 0:
        raise ValueError("Bit length must be positive.")
    if not 0 <= hamming_distance <= bit_length:
        raise ValueError(f"Hamming distance {hamming_distance} outside [0, {bit_length}].")

    return (bit_length - hamming_distance) / bit_length


def calculate_bit_similarity(bits1: str, bits2: str) -> float:
    """
    Share of equal bit positions. Mismatched lengths (or empty input) are
    treated as completely dissimilar.
    """
    if len(bits1) != len(bits2) or not bits1:
        return 0.0

    return calculate_similarity_ratio(calculate_hamming_distance(bits1, bits2), len(bits1))
