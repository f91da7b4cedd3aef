"""Per-record normalization and thread-pool batch runs."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter
from typing import Iterable, List, Sequence

from .catalog import CatalogContext
from .characteristics import CharacteristicMatcher, matching_statistics
from .extractor import WORD_FALLBACK, extract_model_name, word_fallback
from .models import MatchResult, MatchStatistics, NormalizedCharacteristic, NormalizedProduct, ProductRecord

logger = logging.getLogger(__name__)


def normalize_product(
    context: CatalogContext,
    record: ProductRecord,
    matcher: CharacteristicMatcher | None = None,
) -> NormalizedProduct:
    """Reconcile one record's model name and characteristic labels.

    The catalog snapshot is read once so a concurrent reload cannot mix two
    catalog versions inside one record.
    """

    snapshot = context.snapshot
    matcher = matcher or CharacteristicMatcher(context)
    model = extract_model_name(snapshot.models, record.certificate_name) if record.certificate_name else None
    characteristics = [
        NormalizedCharacteristic(
            value=item.value,
            match=matcher.find_best_match(item.name, snapshot.characteristics),
        )
        for item in record.characteristics
    ]
    return NormalizedProduct(
        certificate_name=record.certificate_name,
        model=model,
        characteristics=characteristics,
    )


def _safe_normalize(
    context: CatalogContext,
    matcher: CharacteristicMatcher,
    record: ProductRecord,
) -> NormalizedProduct:
    try:
        return normalize_product(context, record, matcher)
    except Exception:
        logger.exception("Failed to normalize record %r", record.certificate_name)
        text = record.certificate_name or ""
        return NormalizedProduct(
            certificate_name=record.certificate_name,
            model=MatchResult(
                original_text=text,
                normalized_name=word_fallback(text),
                matched=False,
                method=WORD_FALLBACK,
            ),
        )


def normalize_products(
    context: CatalogContext,
    records: Iterable[ProductRecord],
    *,
    workers: int = 1,
    matcher: CharacteristicMatcher | None = None,
) -> List[NormalizedProduct]:
    """Normalize many records; output order follows input order."""
    items = list(records)
    matcher = matcher or CharacteristicMatcher(context)
    start = perf_counter()
    if workers <= 1 or len(items) <= 1:
        results = [_safe_normalize(context, matcher, record) for record in items]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda record: _safe_normalize(context, matcher, record), items))
    elapsed_ms = (perf_counter() - start) * 1000
    logger.info("Normalized %s records with %s workers in %.2fms", len(results), workers, elapsed_ms)
    return results


def model_statistics(results: Sequence[MatchResult]) -> MatchStatistics:
    total = len(results)
    matched = sum(1 for result in results if result.matched)
    return MatchStatistics(
        total=total,
        matched=matched,
        unmatched=total - matched,
        match_rate=matched / total if total else 0.0,
    )


def batch_report(products: Sequence[NormalizedProduct]) -> dict:
    """Summarize model and characteristic match rates of a batch."""
    models = [product.model for product in products if product.model is not None]
    characteristic_pairs = [
        (item.match.original_name, item.match) for product in products for item in product.characteristics
    ]
    methods: dict[str, int] = {}
    for result in models:
        key = result.method or "none"
        methods[key] = methods.get(key, 0) + 1
    return {
        "models": model_statistics(models).model_dump(),
        "characteristics": matching_statistics(characteristic_pairs).model_dump(),
        "methods": methods,
    }
