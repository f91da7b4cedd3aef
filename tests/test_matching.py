"""Tests for catalog lookup, whole-name normalization and the smart fallback."""

import pytest

from catalog_matching.catalog import ModelCatalog
from catalog_matching.fallback import find_best_model, word_overlap_score
from catalog_matching.reference import lookup, normalize_model_name


@pytest.fixture
def small_catalog():
    return ModelCatalog.from_names(["Aixplorer", "АСЕ 100", "MyLab X8"])


def test_lookup_exact(small_catalog):
    assert lookup(small_catalog, "MyLab X8") == "MyLab X8"
    assert lookup(small_catalog, "MYLAB X8") == "MYLAB X8"


def test_lookup_upper_cases_candidate(small_catalog):
    assert lookup(small_catalog, "aixplorer") == "AIXPLORER"


def test_lookup_transliterated(small_catalog):
    """Latin "ACE 100" matches the Cyrillic catalog entry "АСЕ 100"."""

    assert lookup(small_catalog, "ACE 100") == "ACE 100"


def test_lookup_checks_raw_capture(small_catalog):
    assert lookup(small_catalog, "ACE 100", extracted="АСЕ 100") == "ACE 100"


def test_lookup_miss(small_catalog):
    assert lookup(small_catalog, "Consona") is None


def test_containment_prefers_longer_name():
    best = find_best_model("Система EPIQ 7 премиум", ["EPIQ", "EPIQ 7"])

    assert best == ("EPIQ 7", pytest.approx(1.006))


def test_word_overlap_match():
    best = find_best_model("аппарат vivid iq 4d", ["Vivid iq 4D console"])

    assert best == ("Vivid iq 4D console", pytest.approx(0.75))


def test_word_overlap_below_threshold():
    assert find_best_model("аппарат vivid", ["Vivid iq 4D console"]) is None


def test_partial_words_score_point_eight():
    assert word_overlap_score(["aixplorer", "ultimate"], ["aixplorerultimate"]) == pytest.approx(0.8)
    assert word_overlap_score(["iq"], ["iq4"]) == 0.0


def test_edit_distance_for_short_names():
    best = find_best_model("LOGIQ E1O", ["LOGIQ E10"])

    assert best is not None
    assert best[0] == "LOGIQ E10"
    assert best[1] == pytest.approx(1 - 1 / 9)


def test_edit_distance_skipped_for_long_names():
    name = "Vivid iq Premium console"
    assert find_best_model("vivid iq premiun consola", [name], threshold=0.95) is None


def test_normalize_model_name_scores():
    catalog = ModelCatalog.from_names(["MyLab X8", "MyLab X8 eXP", "EPIQ 7"])

    exact = normalize_model_name(catalog, "mylab x8")
    compact = normalize_model_name(catalog, "MyLabX8")
    contained = normalize_model_name(catalog, "EPIQ 7 Ultra")
    missing = normalize_model_name(catalog, "Совсем другое")

    assert (exact.normalized_name, exact.similarity) == ("MyLab X8", 1.0)
    assert (compact.normalized_name, compact.similarity) == ("MyLab X8", 0.95)
    assert (contained.normalized_name, contained.similarity) == ("EPIQ 7", 0.9)
    assert missing.matched is False
    assert missing.normalized_name is None


def test_normalize_model_name_with_empty_catalog():
    result = normalize_model_name(ModelCatalog.from_names([]), "EPIQ")

    assert result.matched is False
    assert result.similarity == 0.0
