"""
Name Similarity
===============

Normalized Levenshtein similarity between file names, used to flag files
whose names are easy to confuse ("vacation.jpg" vs "vacation(1).jpg").

Normalization lowercases the name and removes everything outside [a-z0-9],
including the dot before the extension, so "photo.jpg" and "photojpg"
normalize to the same string.
"""

import re
from typing import Dict

from Levenshtein import distance as levenshtein_distance

from vaultdedup.core import config

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: str) -> str:
    return _NON_ALNUM.sub("", name.lower())


def normalized_similarity(a: str, b: str) -> float:
    """Similarity of two already normalized strings, 1.0 when both are empty."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


class NameSimilarityScorer:
    """
    Scores file-name similarity in [0, 1].

    Normalized names are memoized per scorer instance, which lives for a
    single grouping run.
    """

    def __init__(self, threshold: float = config.DEFAULT_NAME_THRESHOLD):
        self.threshold = threshold
        self._normalized: Dict[str, str] = {}

    def normalize(self, name: str) -> str:
        normalized = self._normalized.get(name)
        if normalized is None:
            normalized = normalize_name(name)
            self._normalized[name] = normalized
        return normalized

    def similarity(self, a: str, b: str) -> float:
        return normalized_similarity(self.normalize(a), self.normalize(b))

    def could_match(self, a: str, b: str) -> bool:
        """
        Cheap length check: the edit distance is at least the length
        difference, so pairs that cannot reach the threshold are skipped
        without running the full distance computation.
        """
        na, nb = self.normalize(a), self.normalize(b)
        longest = max(len(na), len(nb))
        if longest == 0:
            return True
        return 1.0 - abs(len(na) - len(nb)) / longest >= self.threshold

    def is_similar(self, a: str, b: str) -> bool:
        return self.could_match(a, b) and self.similarity(a, b) >= self.threshold
