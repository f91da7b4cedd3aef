"""Tests for the CSV filter grammar and predicate evaluation."""

import pytest

from catalog_matching.catalog import CharacteristicCatalog
from catalog_matching.filters import (
    ContinuationRow,
    CharacteristicRow,
    FilterFileError,
    build_code_map,
    classify_row,
    code_map_from_catalog,
    evaluate,
    filter_variants,
    is_skipped_value,
    matches_all,
    parse_filters_csv,
    parse_value,
)
from catalog_matching.models import CharacteristicEntry, Filter, SearchOperator

GTE = SearchOperator.GREATER_THAN_OR_EQUAL
LTE = SearchOperator.LESS_THAN_OR_EQUAL
EQ = SearchOperator.EQUALS

CODE_MAP = build_code_map(
    [
        ("DEPTH", "Глубина сканирования"),
        ("PROBES", "Количество датчиков"),
        ("PROBE_TYPE", "Тип датчика"),
        ("DOPPLER", "Наличие доплера"),
    ]
)

UPLOAD = (
    "Наименование характеристики;Значение;Единица измерения;Инструкция\n"
    "Глубина сканирования;27 - 46;см;\n"
    "Количество датчиков;≥ 3;шт;\n"
    "Тип датчика;Конвексный;;\n"
    ";Линейный;;\n"
    "Наличие доплера;Неважно;;\n"
    "Вес;-;кг;\n"
    "Цвет корпуса;Белый;;\n"
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("27 - 46", [(GTE, "27"), (LTE, "46")]),
        ("1.5-2", [(GTE, "1.5"), (LTE, "2")]),
        ("≥ 46", [(GTE, "46")]),
        (">=46", [(GTE, "46")]),
        ("≤ 10", [(LTE, "10")]),
        ("<= 10", [(LTE, "10")]),
        ("= 5", [(EQ, "5")]),
        ("Конвексный,Линейный", [(EQ, "Конвексный,Линейный")]),
        ("  Цветной  ", [(EQ, "Цветной")]),
    ],
)
def test_parse_value(text, expected):
    assert parse_value(text) == expected


@pytest.mark.parametrize("value", ["", " ", "-", "неважно", "НЕВАЖНО "])
def test_sentinel_values_are_skipped(value):
    assert is_skipped_value(value) is True


def test_classify_row():
    assert classify_row(["Вес", " 5 ", "кг"]) == CharacteristicRow(name="Вес", value="5")
    assert classify_row(["", "Линейный"]) == ContinuationRow(value="Линейный")
    assert classify_row(["Вес", ""]) is None
    assert classify_row(["Вес"]) is None


def test_parse_filters_csv():
    result = parse_filters_csv(UPLOAD.encode("utf-8"), CODE_MAP, skip_rows=1)

    assert [(f.code, f.operator, f.value) for f in result.filters] == [
        ("DEPTH", GTE, "27"),
        ("DEPTH", LTE, "46"),
        ("PROBES", GTE, "3"),
        ("PROBE_TYPE", EQ, "Конвексный,Линейный"),
    ]
    assert result.filters[0].name == "Глубина сканирования"
    assert result.not_found == ["Цвет корпуса"]


def test_parse_filters_csv_accepts_bom_and_case_insensitive_names():
    content = "\ufeffглубина СКАНИРОВАНИЯ;≤ 20;см\n".encode("utf-8")

    result = parse_filters_csv(content, CODE_MAP)

    assert [(f.code, f.operator, f.value) for f in result.filters] == [("DEPTH", LTE, "20")]


def test_continuation_without_characteristic_is_dropped():
    result = parse_filters_csv(";Линейный;;\n", CODE_MAP)

    assert result.filters == []
    assert result.not_found == []


def test_undecodable_upload_raises():
    with pytest.raises(FilterFileError):
        parse_filters_csv(b"\xff\xfe\xfa", CODE_MAP)


def test_code_map_prefers_later_pairs_and_catalog_names():
    code_map = build_code_map([("A", "Вес"), ("B", "вес")])
    catalog = CharacteristicCatalog.from_entries([CharacteristicEntry(name="Вес")])

    assert code_map["вес"].code == "B"
    assert code_map_from_catalog(catalog)["вес"].code == "Вес"


@pytest.mark.parametrize(
    "operator, value, stored, expected",
    [
        (GTE, "27", "30", True),
        (GTE, "27", "20", False),
        (LTE, "46", "46.0", True),
        (LTE, "46", "100", False),
        (GTE, "27", "до 27 см", True),
        (GTE, "27", "30 см", False),
        (LTE, "abc", "5", False),
        (EQ, "конвекс", "Конвексный", True),
        (EQ, "Конвексный,Линейный", "Линейный датчик", True),
        (EQ, "Конвексный,Линейный", "Секторный", False),
        (EQ, "5", None, False),
    ],
)
def test_evaluate(operator, value, stored, expected):
    assert evaluate(Filter(code="X", operator=operator, value=value), stored) is expected


def test_matches_all_and_filter_variants():
    filters = [
        Filter(code="DEPTH", operator=">=", value="27"),
        Filter(code="PROBE_TYPE", value="линейный"),
    ]
    good = {"DEPTH": "30", "PROBE_TYPE": ["Конвексный", "Линейный"]}
    shallow = {"DEPTH": "20", "PROBE_TYPE": "Линейный"}
    missing = {"DEPTH": "30"}

    assert matches_all(filters, good) is True
    assert matches_all(filters, shallow) is False
    assert matches_all(filters, missing) is False
    assert matches_all([], missing) is True
    assert filter_variants([good, shallow, missing], filters) == [good]
