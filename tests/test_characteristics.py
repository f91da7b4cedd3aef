"""Tests for characteristic label matching."""

import pytest

from catalog_matching.catalog import CatalogContext
from catalog_matching.characteristics import CharacteristicMatcher, matching_statistics, normalize_label
from catalog_matching.models import RawCharacteristic


@pytest.fixture
def matcher(context):
    return CharacteristicMatcher(context)


def test_normalize_label():
    assert normalize_label("  Глубина   сканирования, см ") == "глубина сканирования см"
    assert normalize_label("Вес (нетто)") == "вес нетто"
    assert normalize_label("") == ""


def test_exact_label_ignores_case_and_punctuation(matcher):
    match = matcher.find_best_match("ГЛУБИНА СКАНИРОВАНИЯ.")

    assert match.normalized_name == "Глубина сканирования"
    assert match.distance == 0
    assert match.similarity == 1.0
    assert match.matched is True


def test_small_typo_matches(matcher):
    match = matcher.find_best_match("Количество датчика")

    assert match.normalized_name == "Количество датчиков"
    assert match.distance == 2
    assert match.similarity == pytest.approx(1 - 2 / 19)
    assert match.matched is True


def test_threshold_boundary_is_inclusive():
    context = CatalogContext.from_entries(characteristics=["abcdefghij"])
    match = CharacteristicMatcher(context).find_best_match("abcdefgxyz")

    assert match.distance == 3
    assert match.similarity == pytest.approx(0.7)
    assert match.matched is True


def test_both_thresholds_must_hold(matcher):
    assert matcher.is_match(3, 0.7) is True
    assert matcher.is_match(4, 0.7) is False
    assert matcher.is_match(0, 0.69) is False


def test_unrelated_label_reports_best_candidate_unmatched(matcher):
    match = matcher.find_best_match("Цвет корпуса")

    assert match.matched is False
    assert match.original_name == "Цвет корпуса"


def test_empty_catalog_has_no_candidate():
    match = CharacteristicMatcher(CatalogContext.from_entries()).find_best_match("Вес")

    assert match.normalized_name == ""
    assert match.distance is None
    assert match.similarity == 0.0
    assert match.matched is False


def test_set_thresholds_changes_decision(matcher):
    matcher.set_thresholds(max_distance=1)
    assert matcher.find_best_match("Количество датчика").matched is False

    matcher.set_thresholds(max_distance=2, min_similarity=0.9)
    assert matcher.min_similarity == 0.9
    assert matcher.find_best_match("Количество датчика").matched is False


def test_matcher_follows_reloaded_catalog(tmp_path):
    path = tmp_path / "ktru.csv"
    path.write_text("Имя;Значение;Ед\nВес;5;кг\n", encoding="utf-8")
    context = CatalogContext(None, path)
    matcher = CharacteristicMatcher(context)
    assert matcher.find_best_match("Мощность").matched is False

    path.write_text("Имя;Значение;Ед\nМощность;100;Вт\n", encoding="utf-8")
    context.reload()

    assert matcher.find_best_match("Мощность").normalized_name == "Мощность"


def test_match_characteristics_and_statistics(matcher):
    pairs = matcher.match_characteristics(
        ["Вес", RawCharacteristic(name="Наличие допплера", value="да"), "Цвет корпуса"]
    )

    assert [name for name, _ in pairs] == ["Вес", "Наличие допплера", "Цвет корпуса"]
    stats = matching_statistics(pairs)
    assert (stats.total, stats.matched, stats.unmatched) == (3, 2, 1)
    assert stats.match_rate == pytest.approx(2 / 3)


def test_statistics_of_empty_batch():
    assert matching_statistics([]).match_rate == 0.0
