"""Reference catalog loading and the shared catalog context.

Two closed catalogs back every match:

* the model catalog, a newline-delimited list of canonical model names;
* the characteristic catalog, ``;``-delimited ``name;value;unit`` rows.

Both are loaded into immutable snapshots. :class:`CatalogContext` owns the
current snapshot and replaces it wholesale on :meth:`CatalogContext.reload`,
so a matcher holding a snapshot never observes a half-loaded catalog.
"""
from __future__ import annotations

import csv
import logging
import re
import threading
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Iterable, List, Optional

from .config import settings
from .models import CharacteristicEntry
from .translit import normalize_cyrillic_to_latin

logger = logging.getLogger(__name__)

# Catalog dumps sometimes keep the "12→Name" line numbering of the export tool.
_LINE_NUMBER_PREFIX = re.compile(r"^\d+→")


@dataclass(frozen=True)
class ModelCatalog:
    names: tuple[str, ...]
    lookup: frozenset[str]
    transliterated: frozenset[str]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "ModelCatalog":
        ordered = tuple(dict.fromkeys(name for name in names if name))
        lookup = frozenset(ordered) | frozenset(name.upper() for name in ordered)
        transliterated = frozenset(normalize_cyrillic_to_latin(name) for name in lookup)
        return cls(names=ordered, lookup=lookup, transliterated=transliterated)

    def __len__(self) -> int:
        return len(self.names)

    def __bool__(self) -> bool:
        return bool(self.names)


@dataclass(frozen=True)
class CharacteristicCatalog:
    entries: tuple[CharacteristicEntry, ...]

    @classmethod
    def from_entries(cls, entries: Iterable[CharacteristicEntry]) -> "CharacteristicCatalog":
        return cls(entries=tuple(entries))

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class CatalogSnapshot:
    models: ModelCatalog
    characteristics: CharacteristicCatalog


def load_model_names(path: str | Path) -> List[str]:
    """Read canonical model names, one per line.

    A missing or unreadable file yields an empty list and a warning; matching
    then degrades to the word fallback instead of failing.
    """

    file_path = Path(path)
    names: List[str] = []
    try:
        with file_path.open("r", encoding="utf-8", errors="ignore") as handle:
            for raw_line in handle:
                line = _LINE_NUMBER_PREFIX.sub("", raw_line.strip()).strip()
                if line:
                    names.append(line)
    except OSError as exc:
        logger.warning("Model catalog %s could not be read: %s", file_path, exc)
        return []
    logger.info("Loaded %s model names from %s", len(names), file_path)
    return names


def load_characteristics(path: str | Path, skip_rows: int = 1) -> List[CharacteristicEntry]:
    """Read ``name;value;unit`` rows, skipping headers and short rows."""

    file_path = Path(path)
    entries: List[CharacteristicEntry] = []
    try:
        with file_path.open("r", encoding="utf-8", errors="ignore", newline="") as handle:
            # One physical line per row; quotes are part of the text.
            reader = csv.reader(handle, delimiter=";", quoting=csv.QUOTE_NONE)
            for row in islice(reader, max(skip_rows, 0), None):
                if len(row) < 3 or not row[0].strip():
                    continue
                entries.append(
                    CharacteristicEntry(
                        name=row[0].strip(),
                        value=row[1].strip(),
                        unit=row[2].strip(),
                    )
                )
    except (OSError, csv.Error) as exc:
        logger.warning("Characteristic catalog %s could not be read: %s", file_path, exc)
        return []
    logger.info("Loaded %s normalized characteristics from %s", len(entries), file_path)
    return entries


class CatalogContext:
    """Owns the loaded catalogs and swaps them atomically on reload."""

    def __init__(
        self,
        model_catalog_path: str | Path | None = None,
        characteristic_catalog_path: str | Path | None = None,
        *,
        skip_rows: int | None = None,
    ) -> None:
        self._model_path = Path(model_catalog_path) if model_catalog_path is not None else None
        self._characteristic_path = (
            Path(characteristic_catalog_path) if characteristic_catalog_path is not None else None
        )
        self._skip_rows = settings.characteristic_skip_rows if skip_rows is None else skip_rows
        self._reload_lock = threading.Lock()
        self._snapshot = CatalogSnapshot(
            models=ModelCatalog.from_names(()),
            characteristics=CharacteristicCatalog.from_entries(()),
        )
        self.reload()

    @classmethod
    def from_settings(cls) -> "CatalogContext":
        return cls(settings.model_catalog_path, settings.characteristic_catalog_path)

    @classmethod
    def from_entries(
        cls,
        model_names: Iterable[str] = (),
        characteristics: Iterable[CharacteristicEntry | str] = (),
    ) -> "CatalogContext":
        """Build a context from in-memory data; :meth:`reload` keeps it as is."""
        context = cls()
        entries = [
            item if isinstance(item, CharacteristicEntry) else CharacteristicEntry(name=item)
            for item in characteristics
        ]
        context._snapshot = CatalogSnapshot(
            models=ModelCatalog.from_names(model_names),
            characteristics=CharacteristicCatalog.from_entries(entries),
        )
        return context

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def models(self) -> ModelCatalog:
        return self._snapshot.models

    @property
    def characteristics(self) -> CharacteristicCatalog:
        return self._snapshot.characteristics

    def reload(self) -> CatalogSnapshot:
        """Re-read every file-backed catalog and publish a fresh snapshot."""
        with self._reload_lock:
            current = self._snapshot
            models: Optional[ModelCatalog] = None
            characteristics: Optional[CharacteristicCatalog] = None
            if self._model_path is not None:
                models = ModelCatalog.from_names(load_model_names(self._model_path))
            if self._characteristic_path is not None:
                characteristics = CharacteristicCatalog.from_entries(
                    load_characteristics(self._characteristic_path, self._skip_rows)
                )
            self._snapshot = CatalogSnapshot(
                models=models if models is not None else current.models,
                characteristics=characteristics if characteristics is not None else current.characteristics,
            )
            logger.info(
                "Catalog snapshot ready: %s models, %s characteristics",
                len(self._snapshot.models),
                len(self._snapshot.characteristics),
            )
            return self._snapshot
