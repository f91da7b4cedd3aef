"""Model-name extraction from certificate descriptions.

Pipeline for one description:

1. :func:`~catalog_matching.patterns.preprocess` glues spaced hyphens.
2. Every rule in :data:`~catalog_matching.patterns.EXTRACTION_RULES` is tried in
   order; a capture is cleaned, transliterated when it only uses look-alike
   Cyrillic letters, and checked against the model catalog.
3. Nothing verified: the smart fallback scores the whole description.
4. Still nothing: the first three words are returned with ``matched=False``.

A capture that is not in the catalog is discarded and the next rule is tried
(:attr:`CandidatePolicy.VERIFIED_ONLY`). :attr:`CandidatePolicy.FIRST_CAPTURE`
instead keeps the first cleaned capture and returns it, unverified, when no
rule verifies.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from .catalog import ModelCatalog
from .fallback import find_best_model
from .models import MatchResult
from .patterns import EXTRACTION_RULES, ExtractionRule, clean_candidate, preprocess
from .reference import lookup
from .translit import can_be_written_in_latin, normalize_cyrillic_to_latin

logger = logging.getLogger(__name__)

SMART_FALLBACK = "smart fallback"
WORD_FALLBACK = "word fallback"
WORD_FALLBACK_TOKENS = 3


class CandidatePolicy(str, Enum):
    VERIFIED_ONLY = "verified-only"
    FIRST_CAPTURE = "first-capture"


def word_fallback(text: str) -> str:
    return " ".join(text.split()[:WORD_FALLBACK_TOKENS])


def extract_model_name(
    catalog: ModelCatalog,
    certificate_name: Optional[str],
    *,
    rules: Sequence[ExtractionRule] = EXTRACTION_RULES,
    policy: CandidatePolicy = CandidatePolicy.VERIFIED_ONLY,
    fallback_threshold: float | None = None,
) -> MatchResult:
    """Extract and reconcile the model name mentioned in ``certificate_name``."""
    if not certificate_name:
        return MatchResult(original_text=certificate_name or "")

    text = preprocess(certificate_name)
    first_capture: Optional[tuple[str, str]] = None

    for rule in rules:
        captured = rule.capture(text)
        if captured is None:
            continue
        extracted = clean_candidate(captured)
        if not extracted:
            continue
        logger.debug("rule=%s extracted=%r", rule.name, extracted)

        normalized = extracted
        if can_be_written_in_latin(extracted):
            normalized = normalize_cyrillic_to_latin(extracted)

        found = lookup(catalog, normalized, extracted)
        if found is not None:
            return MatchResult(
                original_text=certificate_name,
                normalized_name=found,
                matched=True,
                score=1.0,
                method=rule.name,
            )
        if first_capture is None:
            first_capture = (normalized, rule.name)

    if policy is CandidatePolicy.FIRST_CAPTURE and first_capture is not None:
        normalized, rule_name = first_capture
        logger.debug("Returning unverified first capture %r from rule %s", normalized, rule_name)
        return MatchResult(
            original_text=certificate_name,
            normalized_name=normalized,
            matched=False,
            score=0.0,
            method=rule_name,
        )

    best = find_best_model(text, catalog.names, fallback_threshold)
    if best is not None:
        name, score = best
        return MatchResult(
            original_text=certificate_name,
            normalized_name=name,
            matched=True,
            score=score,
            method=SMART_FALLBACK,
        )

    fallback = word_fallback(text)
    logger.debug("Fallback model name %r from certificate %r", fallback, certificate_name)
    return MatchResult(
        original_text=certificate_name,
        normalized_name=fallback,
        matched=False,
        score=0.0,
        method=WORD_FALLBACK,
    )
