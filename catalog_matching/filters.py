"""Search-filter parsing and predicate evaluation.

Filters reach the engine in two shapes: structured ``{code, operator, value}``
objects, or a ``;``-delimited spreadsheet export where each row names a
characteristic and a free-text requirement such as ``"≥ 46"`` or
``"27 - 46"``. Both end up as :class:`~catalog_matching.models.Filter` lists.

Predicate semantics, shared by :func:`evaluate` and the Elasticsearch
rendering in :mod:`catalog_matching.search`:

* ``=`` is a case-insensitive substring test, not strict equality; a
  comma-joined list value passes when any member is contained;
* ``<=``/``>=`` compare numerically when the stored value is a plain number
  and fall back to the substring test otherwise.
"""
from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .catalog import CharacteristicCatalog
from .models import Filter, FilterParseResult, ParsedFilter, SearchOperator

logger = logging.getLogger(__name__)

SKIPPED_VALUES = {"", "-", "неважно"}
LIST_SEPARATOR = ","

_RANGE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)$")
_GTE_PREFIX_RE = re.compile(r"^(≥|>=)\s*")
_LTE_PREFIX_RE = re.compile(r"^(≤|<=)\s*")
_EQ_PREFIX_RE = re.compile(r"^=\s*")
# Stored values are compared numerically only when they match this exactly.
NUMERIC_VALUE_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")


class FilterFileError(ValueError):
    """Raised when an uploaded filter file cannot be decoded at all."""


@dataclass(frozen=True)
class CharacteristicRef:
    code: str
    name: str


@dataclass(frozen=True)
class CharacteristicRow:
    """Row opening a new characteristic: ``name;value[;unit;instruction]``."""

    name: str
    value: str


@dataclass(frozen=True)
class ContinuationRow:
    """Row with a blank name column; its value extends the previous characteristic."""

    value: str


UploadRow = Union[CharacteristicRow, ContinuationRow]


@dataclass
class _ValueGroup:
    name: str
    values: List[str]


def parse_value(value: str) -> List[Tuple[SearchOperator, str]]:
    """Split a free-text requirement into ``(operator, value)`` pairs.

    ``"27 - 46"`` becomes ``>= 27`` and ``<= 46``; ``"≥ 46"`` becomes ``>= 46``;
    anything without a recognised prefix is an ``=`` filter on the literal text.
    """

    trimmed = (value or "").strip()

    range_match = _RANGE_RE.match(trimmed)
    if range_match:
        minimum, maximum = range_match.groups()
        return [
            (SearchOperator.GREATER_THAN_OR_EQUAL, minimum),
            (SearchOperator.LESS_THAN_OR_EQUAL, maximum),
        ]

    if trimmed.startswith(("≥", ">=")):
        return [(SearchOperator.GREATER_THAN_OR_EQUAL, _GTE_PREFIX_RE.sub("", trimmed).strip())]
    if trimmed.startswith(("≤", "<=")):
        return [(SearchOperator.LESS_THAN_OR_EQUAL, _LTE_PREFIX_RE.sub("", trimmed).strip())]
    if trimmed.startswith("="):
        return [(SearchOperator.EQUALS, _EQ_PREFIX_RE.sub("", trimmed).strip())]

    # Lists ("А,Б,В") stay one literal value; consumers match any member.
    return [(SearchOperator.EQUALS, trimmed)]


def is_skipped_value(value: str) -> bool:
    return value.strip().lower() in SKIPPED_VALUES


def build_code_map(pairs: Iterable[Tuple[str, str]]) -> dict[str, CharacteristicRef]:
    """Index ``(code, name)`` pairs by lower-cased name; later pairs win."""
    code_map: dict[str, CharacteristicRef] = {}
    for code, name in pairs:
        code_map[name.lower().strip()] = CharacteristicRef(code=code, name=name)
    return code_map


def code_map_from_catalog(catalog: CharacteristicCatalog) -> dict[str, CharacteristicRef]:
    """Use catalog names as codes when no external code table is available."""
    return build_code_map((name, name) for name in catalog.names())


def classify_row(record: Sequence[str]) -> Optional[UploadRow]:
    if len(record) < 2:
        return None
    name = (record[0] or "").strip()
    value = (record[1] or "").strip()
    if not value:
        return None
    if name:
        return CharacteristicRow(name=name, value=value)
    return ContinuationRow(value=value)


def group_rows(rows: Iterable[Optional[UploadRow]]) -> List[_ValueGroup]:
    groups: List[_ValueGroup] = []
    for row in rows:
        if isinstance(row, CharacteristicRow):
            groups.append(_ValueGroup(name=row.name, values=[row.value]))
        elif isinstance(row, ContinuationRow):
            if groups:
                groups[-1].values.append(row.value)
            else:
                logger.debug("Dropping continuation value %r without a preceding characteristic", row.value)
    return groups


def _decode(content: Union[bytes, str]) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FilterFileError("Filter file is not valid UTF-8 text") from exc


def parse_filters_csv(
    content: Union[bytes, str],
    code_map: Mapping[str, CharacteristicRef],
    *,
    skip_rows: int = 0,
) -> FilterParseResult:
    """Parse a spreadsheet export of filter conditions.

    Expected columns: characteristic name; value; unit; filling instruction.
    Unknown characteristic names are reported in ``not_found`` rather than
    aborting the upload.
    """

    text = _decode(content)
    reader = csv.reader(io.StringIO(text), delimiter=";")
    records = [row for index, row in enumerate(reader) if index >= skip_rows]
    groups = group_rows(classify_row(record) for record in records)

    result = FilterParseResult()
    for group in groups:
        all_values = LIST_SEPARATOR.join(group.values)
        if is_skipped_value(all_values):
            logger.debug("Skipping %r with value %r", group.name, all_values)
            continue

        reference = code_map.get(group.name.lower().strip())
        if reference is None:
            logger.warning("Characteristic not found for name: %r", group.name)
            result.not_found.append(group.name)
            continue

        for operator, value in parse_value(all_values):
            result.filters.append(
                ParsedFilter(code=reference.code, name=reference.name, operator=operator, value=value)
            )
            logger.debug("Parsed filter: %s (%s) %s %s", group.name, reference.code, operator.value, value)

    if result.not_found:
        logger.warning("Not found characteristics: %s", ", ".join(result.not_found))
    logger.info(
        "Parsed %s filters from CSV (%s characteristics not found)",
        len(result.filters),
        len(result.not_found),
    )
    return result


def _as_decimal(value: str) -> Optional[Decimal]:
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _contains(stored: str, needle: str) -> bool:
    return needle.lower() in stored.lower()


def list_members(value: str) -> List[str]:
    """Members of a comma-joined list value; a plain value is its own only member."""
    members = [member.strip() for member in value.split(LIST_SEPARATOR) if member.strip()]
    return members or [value]


def evaluate(filter_: Filter, stored_value: object) -> bool:
    """Check one stored characteristic value against a filter."""
    stored = "" if stored_value is None else str(stored_value).strip()
    if filter_.operator is SearchOperator.EQUALS:
        return any(_contains(stored, member) for member in list_members(filter_.value))

    if NUMERIC_VALUE_RE.match(stored):
        bound = _as_decimal(filter_.value)
        if bound is not None:
            number = Decimal(stored)
            if filter_.operator is SearchOperator.LESS_THAN_OR_EQUAL:
                return number <= bound
            return number >= bound
    return _contains(stored, filter_.value)


def matches_all(filters: Iterable[Filter], characteristics: Mapping[str, Union[str, Sequence[str]]]) -> bool:
    """True when every filter is satisfied by some value stored under its code."""
    for filter_ in filters:
        stored = characteristics.get(filter_.code)
        if stored is None:
            return False
        values = [stored] if isinstance(stored, str) else list(stored)
        if not any(evaluate(filter_, value) for value in values):
            return False
    return True


def filter_variants(
    variants: Iterable[Mapping[str, Union[str, Sequence[str]]]],
    filters: Sequence[Filter],
) -> List[Mapping[str, Union[str, Sequence[str]]]]:
    return [variant for variant in variants if matches_all(filters, variant)]
