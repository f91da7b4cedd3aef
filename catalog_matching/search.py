"""Rendering of characteristic filters as Elasticsearch queries.

Model variants are stored as documents with a nested ``characteristics``
array. Each filter becomes one ``nested`` clause; all clauses sit in a
``bool.filter`` so a variant must satisfy every filter, mirroring
:func:`catalog_matching.filters.matches_all`.

Numeric comparisons need ``characteristics.value_numeric``, which
:func:`prepare_variant_document` fills for values that are plain numbers.
Values without it fall back to a case-insensitive substring wildcard, the same
dual behaviour :func:`catalog_matching.filters.evaluate` implements in memory.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import BadRequestError

from .config import settings
from .filters import NUMERIC_VALUE_RE, list_members
from .models import Filter, SearchOperator

logger = logging.getLogger(__name__)

VARIANT_MAPPING: Dict[str, Any] = {
    "mappings": {
        "properties": {
            "model_name": {"type": "keyword"},
            "ktru_code": {"type": "keyword"},
            "characteristics": {
                "type": "nested",
                "properties": {
                    "code": {"type": "keyword"},
                    "name": {"type": "keyword"},
                    "value": {"type": "keyword"},
                    "value_numeric": {"type": "double"},
                },
            },
        }
    }
}

_WILDCARD_SPECIALS = ("\\", "*", "?")
_RANGE_KEYS = {
    SearchOperator.LESS_THAN_OR_EQUAL: "lte",
    SearchOperator.GREATER_THAN_OR_EQUAL: "gte",
}


def _escape_wildcard(value: str) -> str:
    escaped = value
    for special in _WILDCARD_SPECIALS:
        escaped = escaped.replace(special, f"\\{special}")
    return escaped


def _contains(field: str, value: str) -> dict:
    return {
        "wildcard": {
            field: {
                "value": f"*{_escape_wildcard(value)}*",
                "case_insensitive": True,
            }
        }
    }


def _as_float(value: str) -> Optional[float]:
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _value_condition(filter_: Filter) -> dict:
    if filter_.operator is SearchOperator.EQUALS:
        members = list_members(filter_.value)
        if len(members) == 1:
            return _contains("characteristics.value", members[0])
        return {
            "bool": {
                "should": [_contains("characteristics.value", member) for member in members],
                "minimum_should_match": 1,
            }
        }
    contains = _contains("characteristics.value", filter_.value)
    bound = _as_float(filter_.value)
    if bound is None:
        return contains
    return {
        "bool": {
            "should": [
                {"range": {"characteristics.value_numeric": {_RANGE_KEYS[filter_.operator]: bound}}},
                {
                    "bool": {
                        "must_not": [{"exists": {"field": "characteristics.value_numeric"}}],
                        "filter": [contains],
                    }
                },
            ],
            "minimum_should_match": 1,
        }
    }


def filter_clause(filter_: Filter) -> dict:
    return {
        "nested": {
            "path": "characteristics",
            "query": {
                "bool": {
                    "filter": [
                        {"term": {"characteristics.code": filter_.code}},
                        _value_condition(filter_),
                    ]
                }
            },
        }
    }


def build_filter_query(
    filters: Sequence[Filter],
    *,
    model_name: str | None = None,
    ktru_code: str | None = None,
    limit: int | None = None,
) -> Dict[str, Any]:
    clauses: List[dict] = [filter_clause(item) for item in filters]
    if model_name:
        clauses.append(_contains("model_name", model_name))
    if ktru_code:
        clauses.append({"term": {"ktru_code": ktru_code}})

    query = {
        "size": limit if limit is not None else settings.search_result_size,
        "query": {"bool": {"filter": clauses}} if clauses else {"match_all": {}},
    }
    logger.debug("ES query payload=%s", query)
    return query


def prepare_variant_document(
    model_name: str,
    characteristics: Iterable[Dict[str, Any]],
    ktru_code: str | None = None,
) -> Dict[str, Any]:
    """Shape a variant for indexing, adding ``value_numeric`` where the value is a number."""
    prepared: List[Dict[str, Any]] = []
    for item in characteristics:
        value = str(item.get("value") or "").strip()
        entry = {
            "code": item.get("code"),
            "name": item.get("name"),
            "value": value,
        }
        if NUMERIC_VALUE_RE.match(value):
            entry["value_numeric"] = float(value)
        prepared.append(entry)
    document: Dict[str, Any] = {"model_name": model_name, "characteristics": prepared}
    if ktru_code:
        document["ktru_code"] = ktru_code
    return document


async def ensure_index(es: Elasticsearch, index: str | None = None) -> None:
    """Create the variants index with the nested characteristics mapping if missing."""
    name = index or settings.es_index
    exists = await asyncio.to_thread(es.indices.exists, index=name)
    if exists:
        return
    logger.info("Creating index %s", name)
    try:
        await asyncio.to_thread(es.indices.create, index=name, body=VARIANT_MAPPING)
    except BadRequestError as exc:
        if getattr(exc, "error", "") == "resource_already_exists_exception":
            logger.info("Index %s already exists", name)
            return
        logger.exception("Failed to create index: %s", exc)
        raise


async def search_variants(
    es: Elasticsearch,
    filters: Sequence[Filter],
    *,
    index: str | None = None,
    model_name: str | None = None,
    ktru_code: str | None = None,
    limit: int | None = None,
) -> dict:
    name = index or settings.es_index
    body = build_filter_query(filters, model_name=model_name, ktru_code=ktru_code, limit=limit)
    response = await asyncio.to_thread(es.search, index=name, body=body)
    hits = response.get("hits", {}).get("hits", [])
    results = [
        {
            **(hit.get("_source", {})),
            "score": hit.get("_score"),
        }
        for hit in hits
    ]
    took_ms = response.get("took", 0)
    logger.info("search filters=%s hits=%s took=%sms", len(filters), len(results), took_ms)
    return {"results": results, "took_ms": took_ms}
