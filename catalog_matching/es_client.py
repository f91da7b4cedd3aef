"""Elasticsearch connection for the variant search adapter.

Clients are synchronous; :mod:`catalog_matching.search` offloads every call
with ``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from elasticsearch import Elasticsearch

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def get_client(host: str | None = None) -> Elasticsearch:
    """One cached client per host; ``ES_HOST`` when no host is given."""
    target = host or settings.es_host
    logger.info(
        "Connecting to Elasticsearch at %s (index %s, timeout %ss)",
        target,
        settings.es_index,
        settings.es_request_timeout,
    )
    return Elasticsearch(target, request_timeout=settings.es_request_timeout)
