"""Tests for free-text input normalization and input-mode detection."""

import pytest

from recipe_engine.services.input_normalizer import InputNormalizer, NegationRules
from recipe_engine.utils.helpers import to_phrase


def test_plain_ingredient_list_keeps_order(normalizer):
    result = normalizer.normalize("chicken rice garlic spinach")
    assert result.ingredients == ["chicken", "rice", "garlic", "spinach"]
    assert result.excluded == []
    assert result.unknown == []


def test_dish_phrase_beats_its_words(normalizer):
    result = normalizer.normalize("butter chicken")
    assert result.ingredients == ["butter_chicken"]


def test_dish_alias_resolves_to_dish_key(normalizer):
    assert normalizer.normalize("murgh makhani").ingredients == ["butter_chicken"]


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_input_gives_empty_result(normalizer, raw):
    result = normalizer.normalize(raw)
    assert result.ingredients == []
    assert result.excluded == []
    assert result.signals.goal is None


def test_negation_excludes_and_removes(normalizer):
    result = normalizer.normalize("chicken, rice, no onion")
    assert result.ingredients == ["chicken", "rice"]
    assert result.excluded == ["onion"]


def test_excluded_key_never_appears_in_ingredients(normalizer):
    result = normalizer.normalize("onion garlic, without onion")
    assert "onion" in result.excluded
    assert "onion" not in result.ingredients
    assert "garlic" in result.ingredients


def test_negation_scope_ends_at_comma(normalizer):
    result = normalizer.normalize("no onion, garlic")
    assert result.excluded == ["onion"]
    assert result.ingredients == ["garlic"]


def test_negation_scope_ends_at_reset_word(normalizer):
    result = normalizer.normalize("no onion but garlic")
    assert result.excluded == ["onion"]
    assert result.ingredients == ["garlic"]


def test_negation_phrase(normalizer):
    result = normalizer.normalize("rice and tomato, allergic to peanuts")
    assert result.excluded == ["peanuts"]
    assert result.ingredients == ["rice", "tomato"]


def test_custom_negation_rules(reference_data):
    rules = NegationRules.from_lists(["sans"], resets=["plus"])
    custom = InputNormalizer(reference_data, rules)
    result = custom.normalize("rice sans onion plus garlic")
    assert result.ingredients == ["rice", "garlic"]
    assert result.excluded == ["onion"]


def test_quantities_units_and_adjectives_are_dropped(normalizer):
    result = normalizer.normalize("2 cups chopped spinach, 200g fresh chicken")
    assert result.ingredients == ["spinach", "chicken"]


def test_variants_and_regional_names(normalizer):
    result = normalizer.normalize("tomatoes aloo")
    assert result.ingredients == ["tomato", "potato"]


def test_duplicates_collapse_to_first_occurrence(normalizer):
    result = normalizer.normalize("rice, chicken, rice")
    assert result.ingredients == ["rice", "chicken"]


def test_typo_is_corrected(normalizer):
    assert normalizer.normalize("chiken").ingredients == ["chicken"]


def test_unknown_word_is_kept_and_reported(normalizer):
    result = normalizer.normalize("rice zzqxv")
    assert result.ingredients == ["rice", "zzqxv"]
    assert result.unknown == ["zzqxv"]


def test_normalizing_canonical_output_is_stable(normalizer):
    first = normalizer.normalize("2 cups basmati rice, tomatoes, chiken, no onion")
    again = normalizer.normalize(", ".join(to_phrase(key) for key in first.ingredients))
    assert again.ingredients == first.ingredients


@pytest.mark.parametrize("text", [
    "2 cups basmati rice, tomatoes, chiken, no onion",
    "spinach, garlic, tomato",
    "paneer, spinach, rice",
])
def test_space_joined_output_is_stable_without_adjacent_phrases(normalizer, text):
    first = normalizer.normalize(text)
    again = normalizer.normalize(" ".join(to_phrase(key) for key in first.ingredients))
    assert again.ingredients == first.ingredients


def test_space_joined_keys_can_merge_into_a_dish(normalizer):
    # comma-separated keys stay apart; whitespace lets adjacent keys form a dish name
    first = normalizer.normalize("butter, chicken")
    assert first.ingredients == ["butter", "chicken"]
    assert normalizer.normalize(", ".join(first.ingredients)).ingredients == ["butter", "chicken"]
    assert normalizer.normalize(" ".join(first.ingredients)).ingredients == ["butter_chicken"]


def test_suggestions_are_nearest_first(normalizer):
    assert normalizer.suggest("chiken")[0] == "chicken"
    assert normalizer.suggest("zzqxv") == []


def test_signals_goal_and_time(normalizer):
    signals = normalizer.extract_signals("something high protein under 30 mins")
    assert signals.goal == "muscle_gain"
    assert signals.max_prep_time == 30


def test_signals_hours_convert_to_minutes(normalizer):
    assert normalizer.extract_signals("ready in 1 hour").max_prep_time == 60


def test_longest_dietary_keyword_wins(normalizer):
    assert normalizer.extract_signals("non veg dinner").dietary == "non-veg"
    assert normalizer.extract_signals("veg dinner").dietary == "vegetarian"


def test_signals_cuisine_and_meal_type(normalizer):
    signals = normalizer.extract_signals("south indian breakfast")
    assert signals.cuisine == "India-South"
    assert signals.meal_type == "breakfast"


def test_signal_words_are_not_ingredients(normalizer):
    result = normalizer.normalize("high protein chicken rice")
    assert result.ingredients == ["chicken", "rice"]
    assert result.signals.goal == "muscle_gain"


class TestModeMismatch:
    def test_raw_ingredients_in_dish_mode(self, normalizer):
        parsed = normalizer.normalize("chicken rice garlic spinach")
        mismatch = normalizer.detect_mismatch(parsed, "dish")
        assert mismatch.mismatch is True
        assert mismatch.suggested_mode == "ingredients"
        assert mismatch.confidence == 0.95
        assert mismatch.ingredient_count == 4

    def test_dish_name_in_ingredient_mode(self, normalizer):
        mismatch = normalizer.detect_mismatch(["butter_chicken"], "ingredients")
        assert mismatch.mismatch is True
        assert mismatch.suggested_mode == "dish"

    def test_consistent_input_is_not_a_mismatch(self, normalizer):
        mismatch = normalizer.detect_mismatch(["chicken", "rice"], "ingredients")
        assert mismatch.mismatch is False
        assert mismatch.confidence == 0.0

    def test_single_raw_ingredient_in_dish_mode_is_not_flagged(self, normalizer):
        assert normalizer.detect_mismatch(["chicken"], "dish").mismatch is False

    def test_nothing_to_judge(self, normalizer):
        assert normalizer.detect_mismatch([], "dish") is None


@pytest.mark.parametrize("text, expected", [
    ("butter chicken", "dish"),
    ("chicken rice garlic", "ingredients"),
    ("", "unknown"),
])
def test_guess_input_type(normalizer, text, expected):
    assert normalizer.guess_input_type(text) == expected
