"""Reference-catalog membership checks and whole-name normalization."""
from __future__ import annotations

import logging
import re
from typing import Optional

from .catalog import ModelCatalog
from .config import settings
from .models import ModelNameMatch
from .similarity import jaccard_similarity, levenshtein_similarity
from .translit import normalize_cyrillic_to_latin

logger = logging.getLogger(__name__)

_NAME_NOISE_RE = re.compile(r"[^\w\s\-.]")
_WHITESPACE_RE = re.compile(r"\s+")


def lookup(catalog: ModelCatalog, normalized: str, extracted: Optional[str] = None) -> Optional[str]:
    """Return the name to report when the candidate is in the model catalog.

    ``normalized`` is the (possibly transliterated) candidate and ``extracted``
    the raw capture it came from. Checks run exact, then upper-cased, then
    against the transliterated catalog; the first hit wins.
    """

    raw = extracted if extracted is not None else normalized
    if normalized in catalog.lookup or raw in catalog.lookup:
        return normalized
    if normalized.upper() in catalog.lookup or raw.upper() in catalog.lookup:
        return normalized.upper()
    if (
        normalize_cyrillic_to_latin(normalized) in catalog.transliterated
        or normalize_cyrillic_to_latin(raw) in catalog.transliterated
    ):
        return normalized
    return None


def _normalize_name(value: str) -> str:
    cleaned = _NAME_NOISE_RE.sub("", value.strip())
    return _WHITESPACE_RE.sub(" ", cleaned).lower()


def name_similarity(a: str, b: str) -> float:
    left = _normalize_name(a)
    right = _normalize_name(b)
    if left == right:
        return 1.0
    if left.replace(" ", "") == right.replace(" ", ""):
        return 0.95
    if left in right or right in left:
        return 0.9
    return max(levenshtein_similarity(left, right), jaccard_similarity(left, right))


def normalize_model_name(
    catalog: ModelCatalog,
    name: str,
    threshold: float | None = None,
) -> ModelNameMatch:
    """Map an already isolated model name onto its closest catalog entry."""
    if not name or not catalog:
        return ModelNameMatch(original_name=name or "")

    limit = settings.model_similarity_threshold if threshold is None else threshold
    best_name = ""
    best_similarity = 0.0
    for candidate in catalog.names:
        similarity = name_similarity(name, candidate)
        if similarity > best_similarity:
            best_similarity = similarity
            best_name = candidate

    matched = best_similarity >= limit
    if matched:
        logger.debug("Normalized model %r to %r (similarity: %.3f)", name, best_name, best_similarity)
    else:
        logger.debug("No suitable match found for model %r (best similarity: %.3f)", name, best_similarity)
    return ModelNameMatch(
        original_name=name,
        normalized_name=best_name if matched else None,
        similarity=best_similarity,
        matched=matched,
    )
