"""Edit-distance helpers shared by the model and characteristic matchers."""
from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Plain Levenshtein distance (insert/delete/substitute, unit costs)."""
    return int(Levenshtein.distance(a, b))


def levenshtein_similarity(a: str, b: str) -> float:
    """``1 - distance / max(len(a), len(b))``; two empty strings are identical."""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / max_length


def jaccard_similarity(a: str, b: str) -> float:
    """Word-set Jaccard similarity over whitespace tokens."""
    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)
