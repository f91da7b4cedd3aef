"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    model_catalog_path: str = _get_env("MODEL_CATALOG_PATH", "model_names_only.txt")
    characteristic_catalog_path: str = _get_env("CHARACTERISTIC_CATALOG_PATH", "characteristics.csv")
    characteristic_skip_rows: int = int(_get_env("CHARACTERISTIC_SKIP_ROWS", "1"))
    characteristic_max_distance: int = int(_get_env("CHARACTERISTIC_MAX_DISTANCE", "3"))
    characteristic_min_similarity: float = float(_get_env("CHARACTERISTIC_MIN_SIMILARITY", "0.7"))
    smart_fallback_threshold: float = float(_get_env("SMART_FALLBACK_THRESHOLD", "0.7"))
    model_similarity_threshold: float = float(_get_env("MODEL_SIMILARITY_THRESHOLD", "0.8"))
    batch_workers: int = int(_get_env("BATCH_WORKERS", "4"))
    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "model_variants")
    es_request_timeout: float = float(_get_env("ES_REQUEST_TIMEOUT", "10"))
    search_result_size: int = int(_get_env("SEARCH_RESULT_SIZE", "100"))
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
