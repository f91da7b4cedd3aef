"""Whole-string fuzzy scoring against the model catalog.

Used only when no extraction rule produced a catalog-verified name. Three
scores are tried per catalog name, strongest first:

1. containment of the catalog name in the description, scored
   ``1.0 + len(name) / 1000`` so the longer (more specific) name wins ties;
2. word overlap, for names not contained verbatim;
3. edit-distance similarity, only for names of at most
   :data:`MAX_EDIT_DISTANCE_LENGTH` characters where it is meaningful.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .config import settings
from .similarity import levenshtein_similarity

logger = logging.getLogger(__name__)

MAX_EDIT_DISTANCE_LENGTH = 15
EXACT_WORD_WEIGHT = 1.0
PARTIAL_WORD_WEIGHT = 0.8
# A word must be longer than this to count as contained in another word.
MIN_PARTIAL_WORD_LENGTH = 3


def containment_score(name: str) -> float:
    return 1.0 + len(name) / 1000


def word_overlap_score(model_words: Sequence[str], text_words: Sequence[str]) -> float:
    """Share of catalog-name words found among the description words."""
    if not model_words:
        return 0.0
    matching = 0.0
    for model_word in model_words:
        for text_word in text_words:
            if model_word == text_word:
                matching += EXACT_WORD_WEIGHT
                break
            if len(model_word) > MIN_PARTIAL_WORD_LENGTH and model_word in text_word:
                matching += PARTIAL_WORD_WEIGHT
                break
            if len(text_word) > MIN_PARTIAL_WORD_LENGTH and text_word in model_word:
                matching += PARTIAL_WORD_WEIGHT
                break
    return matching / len(model_words)


def find_best_model(
    text: str,
    names: Sequence[str],
    threshold: float | None = None,
) -> Optional[Tuple[str, float]]:
    """Return ``(catalog_name, score)`` for the best-scoring name, or ``None``."""
    limit = settings.smart_fallback_threshold if threshold is None else threshold
    lowered = (text or "").lower()
    text_words = lowered.split()
    best_match = ""
    best_score = 0.0

    for name in names:
        lowered_name = name.lower()
        if lowered_name in lowered:
            score = containment_score(name)
            if score > best_score:
                best_score = score
                best_match = name
            continue

        word_score = word_overlap_score(lowered_name.split(), text_words)
        if word_score > best_score and word_score >= limit:
            best_score = word_score
            best_match = name

        if len(name) <= MAX_EDIT_DISTANCE_LENGTH:
            similarity = levenshtein_similarity(lowered_name, lowered)
            if similarity > best_score and similarity >= limit:
                best_score = similarity
                best_match = name

    if best_match and best_score >= limit:
        logger.debug("Smart fallback match: %r with score %.3f", best_match, best_score)
        return best_match, best_score
    return None
