"""Shared catalog fixtures."""
from __future__ import annotations

import pytest

from catalog_matching.catalog import CatalogContext, ModelCatalog

MODEL_NAMES = [
    "Consona N7",
    "Consona N7Q",
    "EPIQ",
    "EPIQ 7",
    "MyLab X8",
    "MyLab X8 eXP",
    "Vivid iq 4D console",
    "РуСкан 65",
    "Aixplorer",
    "LOGIQ E10",
    "Acuson S-2000",
]

CHARACTERISTIC_NAMES = [
    "Вес",
    "Глубина сканирования",
    "Количество датчиков",
    "Наличие доплера",
]


@pytest.fixture
def model_catalog() -> ModelCatalog:
    return ModelCatalog.from_names(MODEL_NAMES)


@pytest.fixture
def context() -> CatalogContext:
    return CatalogContext.from_entries(MODEL_NAMES, CHARACTERISTIC_NAMES)
