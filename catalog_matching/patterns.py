"""Ordered extraction rules for model names inside certificate descriptions.

Registry descriptions wrap the model token in boilerplate::

    Система ультразвуковая диагностическая медицинская серии Consona N7
    с принадлежностями, вариант исполнения: Consona N7Q по ТУ 26.60.12-...

Each :class:`ExtractionRule` captures exactly one group. Rules are tried in
list order and the order *is* the priority: narrow phrase rules come first,
quoted strings later, the "leading Latin token" catch-all last. Rule names are
stable tags stored with every result, so renaming one is a data change.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

# Character classes reused by the rules below. ``_ANY_SCRIPT`` admits Cyrillic
# model names such as "РуСкан 65"; ``_LATIN`` is for rules whose model token
# is always Latin.
_ANY_SCRIPT = r"[A-Za-zА-Яа-я0-9\s\-.ёЁ]"
_LATIN = r"[A-Za-z0-9\s\-.]"

COMPANY_KEYWORDS = (
    "КО",
    "ЛТД",
    "ООО",
    "АО",
    "ЗАО",
    "Корпорэйшн",
    "Системз",
    "МЕДИСОН",
    "САМСУНГ",
)

_CLEANUP_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(Система\s+ультразвуковая\s+диагностическая\s+медицинская\s+)", re.IGNORECASE),
    re.compile(r"^(Система\s+ультразвуковая\s+)", re.IGNORECASE),
    re.compile(r"^(медицинская\s+)", re.IGNORECASE),
    re.compile(r"\s+с\s+принадлежностями.*$", re.IGNORECASE),
    re.compile(r"\s+по\s+ТУ.*$", re.IGNORECASE),
)
_HYPHEN_SPACING = re.compile(r"\s*-\s*")


@dataclass(frozen=True)
class ExtractionRule:
    name: str
    pattern: re.Pattern[str]
    validate: Optional[Callable[[str], bool]] = None

    def capture(self, text: str) -> Optional[str]:
        """Return the stripped capture when the pattern matches and the validator accepts it."""
        match = self.pattern.search(text)
        if not match or not match.group(1):
            return None
        captured = match.group(1).strip()
        if self.validate is not None and not self.validate(captured):
            return None
        return captured


def _rule(name: str, pattern: str, validate: Optional[Callable[[str], bool]] = None) -> ExtractionRule:
    return ExtractionRule(name=name, pattern=re.compile(pattern, re.IGNORECASE), validate=validate)


def is_not_company_name(captured: str) -> bool:
    """Reject quoted strings that are manufacturer names rather than models."""
    return not any(keyword in captured for keyword in COMPANY_KEYWORDS)


EXTRACTION_RULES: tuple[ExtractionRule, ...] = (
    _rule(
        "execution-variant-with-TU",
        rf"вариант\s+исполнения:\s*({_ANY_SCRIPT}+?)(?:\s+по\s+ТУ|\s*,|$)",
    ),
    _rule("in-execution", rf"в\s+исполнении\s+({_ANY_SCRIPT}+?)(?:\s*,|$)"),
    _rule("execution-variant-no-colon", rf"вариант\s+исполнения\s+({_ANY_SCRIPT}+?)(?:\s*$)"),
    _rule(
        "execution-variant-with-colon",
        rf"вариант\s+исполнения:\s*({_LATIN}+?)(?:\s+с\s+принадлежностями|\s*,|$)",
    ),
    _rule(
        "series-M-execution-variants",
        rf"серии\s+[МM]\s+с\s+принадлежностями,?\s*варианты\s+исполнения:\s*({_ANY_SCRIPT}+?)"
        r"(?:\s+Производитель|\s*,|$)",
    ),
    _rule(
        "in-execution-variant-before-quotes",
        rf"в\s+варианте\s+исполнения:\s*({_LATIN}+?)(?:\"[^\"]*\"|$)",
    ),
    _rule(
        "execution-variant-numbered-full-description",
        r"вариант\s+исполнения:\s*\d+\.\d+\.\s*Система\s+ультразвуковая\s+диагностическая\s+медицинская\s+"
        rf"({_LATIN}+?)(?:\s*,|$)",
    ),
    _rule(
        "execution-variant-diagnostic-system",
        rf"вариант\s+исполнения:\s*Система\s+диагностическая\s+ультразвуковая\s+({_LATIN}+?)(?:\s*,|$)",
    ),
    _rule(
        "execution-variants-before-manufacturer",
        rf"варианты\s+исполнения:\s*({_LATIN}+?)(?:\s+Производитель|\s*,|$)",
    ),
    _rule(
        "universal-series",
        rf"универсальная\s+серии\s+({_ANY_SCRIPT}+?)(?:\s+с\s+принадлежностями|\s*,|$)",
    ),
    _rule(
        "numbered-list-with-variant",
        rf"\d+\.\s*Система\s+ультразвуковая\s+диагностическая\s+({_LATIN}+?)(?:\s+в\s+варианте|\s*,|$)",
    ),
    _rule(
        "execution-variant-full-system-description",
        r"вариант\s+исполнения:\s*Система\s+ультразвуковая\s+диагностическая\s+медицинская\s+"
        rf"({_LATIN}+?)(?:\s*,|\s+производства|$)",
    ),
    _rule("in-execution-variant", rf"в\s+варианте\s+исполнения\s+({_LATIN}+?)(?:\s*,|$)"),
    _rule(
        "execution-variants-quoted-diagnostic",
        r"варианты\s+исполнения:.*?I.*?диагностический\s+\"([^\"]+)\"",
    ),
    _rule(
        "execution-variants-roman-numerals",
        r"варианты\s+исполнения:.*?I\.\s*Система\s+ультразвуковая\s+диагностическая\s+"
        rf"({_LATIN}+?)(?:\s+в\s+варианте|\s*,|$)",
    ),
    _rule("series", rf"серии\s+({_LATIN}+?)(?:\s+с\s+принадлежностями|\s*,|$)"),
    _rule(
        "medical-with-model",
        rf"медицинская\s+с\s+({_ANY_SCRIPT}+?)(?:\s+[cс]\s+принадлежностями|\s*,|$)",
    ),
    _rule("medical-to-end", rf"медицинская\s+({_LATIN}+?)(?:\s+с\s+принадлежностями|\s*,|$)"),
    _rule("medical-with-slash", r"медицинская\s+([A-Za-z0-9\-]+)(?:/[A-Za-z0-9\-]+)*"),
    _rule(
        "ultrasound-diagnostic-system-with-manufacturer",
        r"Система\s+ультразвуковая\s+диагностическая\s+([A-Za-z0-9\-]+)"
        r"(?:\s+с\s+принадлежностями,\s*производитель|\s*,|$)",
    ),
    _rule(
        "ultrasound-diagnostic-device",
        rf"Ультразвуковой\s+диагностический\s+аппарат\s+({_LATIN}+?)(?:\s+с\s+принадлежностями|\.|\s*,|$)",
    ),
    _rule(
        "execution-variant-with-quoted-company",
        rf"вариант\s+исполнения\s+({_LATIN}+?)(?:\s*,\s*\"[^\"]+\"|$)",
    ),
    _rule(
        "execution-variant-with-manufacturer",
        rf"вариант\s+исполнения\s+({_LATIN}+?)(?:\s*,\s*производитель|$)",
    ),
    _rule(
        "ultrasound-diagnostic-system",
        rf"Система\s+ультразвуковая\s+диагностическая\s+({_LATIN}+?)(?:\s+с\s+принадлежностями|\s*,|$)",
    ),
    _rule(
        "ultrasound-doppler-system",
        rf"Система\s+ультразвуковая\s+.*?доплеровская\s+({_LATIN}+?)(?:\s*,|$)",
    ),
    ExtractionRule(name="angle-quotes", pattern=re.compile(r"«([^»]+)»")),
    ExtractionRule(name="double-quotes", pattern=re.compile(r"\"([^\"]+)\""), validate=is_not_company_name),
    _rule("model-at-start-with-accessories", rf"^({_LATIN}+?)(?:\s+с\s+принадлежностями|$)"),
)


def preprocess(text: str) -> str:
    """Glue ``"word - word"`` into ``"word-word"`` so hyphenated models stay whole."""
    return _HYPHEN_SPACING.sub("-", text or "")


def clean_candidate(candidate: str) -> str:
    """Strip boilerplate product nouns and trailing accessory/TU clauses."""
    cleaned = candidate
    for pattern in _CLEANUP_RULES:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()
