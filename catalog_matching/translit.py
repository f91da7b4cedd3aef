"""Cyrillic/Latin homoglyph helpers.

Procurement registries mix alphabets freely: ``"МуLab"`` or ``"ЕРIQ 7"`` are
common because Cyrillic ``М``/``Е``/``Р`` render identically to their Latin
twins. Only letters that *look* the same are mapped here; this is not a
phonetic transliteration, so ``"РуСкан"`` keeps its ``у`` when checked with
:func:`can_be_written_in_latin`.
"""
from __future__ import annotations

import re

CYRILLIC_PATTERN = re.compile(r"[А-Яа-яЁё]")
# ASCII letters/digits, whitespace, hyphen and period never block conversion.
_LATIN_SAFE_PATTERN = re.compile(r"[A-Za-z0-9\s\-.]")

CYRILLIC_TO_LATIN = {
    "А": "A",
    "а": "a",
    "В": "B",
    "в": "b",
    "С": "C",
    "с": "c",
    "Е": "E",
    "е": "e",
    "Н": "H",
    "н": "h",
    "К": "K",
    "к": "k",
    "М": "M",
    "м": "m",
    "О": "O",
    "о": "o",
    "Р": "P",
    "р": "p",
    "Т": "T",
    "т": "t",
    "У": "Y",
    "у": "y",
    "Х": "X",
    "х": "x",
    "Ё": "E",
    "ё": "e",
}
_CYRILLIC_TO_LATIN_TABLE = str.maketrans(CYRILLIC_TO_LATIN)

# Narrower than the map: lowercase "н"/"у" and "Ё"/"ё" are mapped
# but do not make a word safe to convert.
CONVERTIBLE_CYRILLIC = frozenset(
    {
        "А",
        "а",
        "В",
        "в",
        "С",
        "с",
        "Е",
        "е",
        "Н",
        "К",
        "к",
        "М",
        "м",
        "О",
        "о",
        "Р",
        "р",
        "Т",
        "т",
        "У",
        "Х",
        "х",
    }
)


def can_be_written_in_latin(text: str) -> bool:
    """Return ``True`` when no Cyrillic letter in ``text`` lacks a Latin twin.

    Characters that are neither ASCII-safe nor Cyrillic (quotes, slashes,
    symbols) do not block conversion.
    """

    for char in text or "":
        if _LATIN_SAFE_PATTERN.match(char):
            continue
        if CYRILLIC_PATTERN.match(char) and char not in CONVERTIBLE_CYRILLIC:
            return False
    return True


def normalize_cyrillic_to_latin(text: str) -> str:
    """Replace look-alike Cyrillic letters with Latin ones, character by character."""
    if not text:
        return ""
    return text.translate(_CYRILLIC_TO_LATIN_TABLE)
