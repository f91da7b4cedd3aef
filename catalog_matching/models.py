"""Pydantic models for matcher inputs and results."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SearchOperator(str, Enum):
    EQUALS = "="
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN_OR_EQUAL = ">="


class CharacteristicEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str = ""
    unit: str = ""


class MatchResult(BaseModel):
    original_text: str = Field(..., description="Description the model name was extracted from")
    normalized_name: str | None = None
    matched: bool = False
    score: float = 0.0
    method: str | None = Field(None, description="Extraction rule tag or fallback tier")


class ModelNameMatch(BaseModel):
    original_name: str
    normalized_name: str | None = None
    similarity: float = 0.0
    matched: bool = False


class CharacteristicMatch(BaseModel):
    original_name: str
    normalized_name: str = ""
    distance: int | None = None
    similarity: float = 0.0
    matched: bool = False


class MatchStatistics(BaseModel):
    total: int
    matched: int
    unmatched: int
    match_rate: float


class Filter(BaseModel):
    code: str
    operator: SearchOperator = SearchOperator.EQUALS
    value: str


class ParsedFilter(Filter):
    name: str


class FilterParseResult(BaseModel):
    filters: list[ParsedFilter] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)


class RawCharacteristic(BaseModel):
    name: str
    value: str = ""


class ProductRecord(BaseModel):
    certificate_name: str | None = None
    characteristics: list[RawCharacteristic] = Field(default_factory=list)


class NormalizedCharacteristic(BaseModel):
    value: str = ""
    match: CharacteristicMatch


class NormalizedProduct(BaseModel):
    certificate_name: str | None = None
    model: MatchResult | None = None
    characteristics: list[NormalizedCharacteristic] = Field(default_factory=list)
