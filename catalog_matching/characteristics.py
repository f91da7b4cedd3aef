"""Reconciliation of raw characteristic labels against the characteristic catalog."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Tuple

from .catalog import CatalogContext, CharacteristicCatalog
from .config import settings
from .models import CharacteristicMatch, MatchStatistics, RawCharacteristic
from .similarity import levenshtein_distance

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    """Lowercase, turn punctuation into spaces, collapse whitespace."""
    lowered = (label or "").lower()
    spaced = _NON_WORD_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", spaced).strip()


class CharacteristicMatcher:
    """Edit-distance matcher bound to a :class:`CatalogContext`.

    Reads the context's current snapshot on every call, so a reload is picked
    up by the next match without rebuilding the matcher.
    """

    def __init__(
        self,
        context: CatalogContext,
        *,
        max_distance: int | None = None,
        min_similarity: float | None = None,
    ) -> None:
        self._context = context
        self.max_distance = settings.characteristic_max_distance if max_distance is None else max_distance
        self.min_similarity = settings.characteristic_min_similarity if min_similarity is None else min_similarity

    def set_thresholds(self, max_distance: int | None = None, min_similarity: float | None = None) -> None:
        if max_distance is not None:
            self.max_distance = max_distance
        if min_similarity is not None:
            self.min_similarity = min_similarity
        logger.info(
            "Updated matching thresholds - max_distance: %s, min_similarity: %s",
            self.max_distance,
            self.min_similarity,
        )

    def is_match(self, distance: int, similarity: float) -> bool:
        return distance <= self.max_distance and similarity >= self.min_similarity

    def find_best_match(self, name: str, catalog: CharacteristicCatalog | None = None) -> CharacteristicMatch:
        """Best catalog entry for ``name``; ``catalog`` pins a snapshot, else the current one is read."""
        normalized_input = normalize_label(name)
        best = CharacteristicMatch(original_name=name)
        entries = (catalog if catalog is not None else self._context.characteristics).entries
        for entry in entries:
            target = normalize_label(entry.name)
            max_length = max(len(normalized_input), len(target))
            distance = levenshtein_distance(normalized_input, target)
            similarity = 1.0 if max_length == 0 else 1 - distance / max_length
            if similarity > best.similarity:
                best = CharacteristicMatch(
                    original_name=name,
                    normalized_name=entry.name,
                    distance=distance,
                    similarity=similarity,
                    matched=self.is_match(distance, similarity),
                )
        logger.debug(
            "characteristic %r -> %r distance=%s similarity=%.3f matched=%s",
            name,
            best.normalized_name,
            best.distance,
            best.similarity,
            best.matched,
        )
        return best

    def match_characteristics(
        self, characteristics: Iterable[RawCharacteristic | str]
    ) -> List[Tuple[str, CharacteristicMatch]]:
        results: List[Tuple[str, CharacteristicMatch]] = []
        for item in characteristics:
            name = item if isinstance(item, str) else item.name
            results.append((name, self.find_best_match(name)))
        return results


def matching_statistics(matches: Sequence[Tuple[str, CharacteristicMatch]]) -> MatchStatistics:
    total = len(matches)
    matched = sum(1 for _, match in matches if match.matched)
    return MatchStatistics(
        total=total,
        matched=matched,
        unmatched=total - matched,
        match_rate=matched / total if total else 0.0,
    )
