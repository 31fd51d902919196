"""Tests for the kitchen guidance collaborator."""

import pytest

from recipe_engine.services.kitchen_guide import GENERIC_PROFILE
from recipe_engine.utils.helpers import display_name


@pytest.mark.parametrize("ingredients, location, method", [
    (["chicken", "rice", "saffron"], "India", "biryani"),
    (["chicken", "soy_sauce"], "India", "stirfry"),
    (["chicken", "garlic"], "China", "stirfry"),
    (["cucumber", "avocado"], "USA", "nocook"),
    (["toor_dal", "tomato"], "India", "onepotdal"),
    (["lamb", "onion"], "India", "braise"),
    (["chicken", "garlic", "spinach"], "India", "saute"),
])
def test_detect_cooking_method(guide, ingredients, location, method):
    assert guide.detect_cooking_method(ingredients, location) == method


def test_india_profile_follows_the_dish_region(guide, reference_data):
    profiles = reference_data.kitchen["cuisine_profiles"]
    assert guide.get_cuisine_profile("India", ["dosa"]) == profiles["India-South"]
    assert guide.get_cuisine_profile("India") == profiles["India-North"]


def test_unknown_location_gets_generic_profile(guide):
    assert guide.get_cuisine_profile("Narnia") == GENERIC_PROFILE


def test_steps_are_ordered_and_labelled(guide):
    steps = guide.generate_steps(["chicken", "rice", "garlic", "spinach"], "muscle_gain", "medium", "India")
    assert steps[0].startswith("PREP:")
    assert steps[-1].startswith("PLATE:")
    labels = [step.split(":")[0] for step in steps]
    assert labels.index("AROMATICS") < labels.index("PROTEIN") < labels.index("SEASON")


def test_no_cook_steps_skip_the_stove(guide):
    steps = guide.generate_steps(["cucumber", "avocado"], "weight_loss", "mild", "USA")
    assert any(step.startswith("ASSEMBLE:") for step in steps)
    assert not any(step.startswith("FAT AND BLOOM:") for step in steps)


def test_hot_spice_adds_heat(guide):
    hot = guide.generate_steps(["chicken", "garlic"], "balanced", "hot", "India")
    mild = guide.generate_steps(["chicken", "garlic"], "balanced", "mild", "India")
    assert any("extra dried chili" in step for step in hot)
    assert not any("extra dried chili" in step for step in mild)


def test_suggestions_skip_present_ingredients(guide):
    ingredients = ["chicken", "garlic", "spinach"]
    suggestions = guide.generate_suggestions(ingredients, "muscle_gain", "India")
    assert 0 < len(suggestions) <= 4
    assert not set(suggestions) & {display_name(i) for i in ingredients}


def test_common_mistakes_are_unique_and_capped(guide):
    mistakes = guide.get_common_mistakes(["chicken", "rice", "spinach", "garlic"], "India")
    assert len(mistakes) <= 6
    assert len(mistakes) == len(set(mistakes))


def test_pairings_fall_back_to_india(guide):
    assert guide.get_pairings("India", "muscle_gain")[0] == "Jeera rice + toor dal"
    assert guide.get_pairings("Narnia", "balanced") == guide.get_pairings("India", "balanced")


def test_title_is_deterministic(guide):
    args = (["chicken", "rice"], "muscle_gain", "hot", "India", "chicken")
    title = guide.generate_title(*args)
    assert title == guide.generate_title(*args)
    assert "Chicken & Rice" in title


def test_description_reports_totals(guide):
    totals = {"calories": 412.4, "protein": 38.2, "carbs": 30.0, "fat": 9.6}
    text = guide.generate_description(["chicken", "rice", "garlic", "spinach"], "balanced", "India", totals)
    assert "~412 kcal" in text
    assert "and 1 more" in text
    assert "protein-forward" in text
