"""Tests for recipe synthesis."""

import pytest
from pydantic import ValidationError

from recipe_engine.models.input import Signals
from recipe_engine.models.recipe import EmptyResult, Recipe, RecipeContext

BUTTER_CHICKEN = ["chicken", "tomato", "butter", "cream", "ginger", "garlic", "cardamom"]


def make_context(ingredients, **kwargs):
    return RecipeContext(ingredients=ingredients, **kwargs)


class TestEmptyResult:
    def test_vegan_filter_removes_only_ingredient(self, synthesizer):
        result = synthesizer.synthesize(make_context(["milk"], dietary="vegan"))
        assert isinstance(result, EmptyResult)
        assert result.status == "empty"
        assert result.removed == ["milk"]
        assert "vegan" in result.reason

    def test_everything_excluded(self, synthesizer):
        result = synthesizer.synthesize(make_context(["rice"], excluded=["rice"]))
        assert isinstance(result, EmptyResult)
        assert result.removed == ["rice"]

    def test_no_ingredients_at_all(self, synthesizer):
        assert isinstance(synthesizer.synthesize(make_context([])), EmptyResult)


class TestResolution:
    def test_dish_expands_in_place(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["butter_chicken", "rice"]))
        assert resolved.ingredients == BUTTER_CHICKEN + ["rice"]
        assert resolved.dish_keys == ["butter_chicken"]

    def test_repeated_ingredient_counts_once(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["butter_chicken", "chicken", "rice", "rice"]))
        assert resolved.ingredients == BUTTER_CHICKEN + ["rice"]

    def test_dish_alias_in_context(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["murgh makhani"]))
        assert resolved.dish_keys == ["butter_chicken"]

    def test_excluded_dish_is_not_expanded(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(
            make_context(["butter_chicken", "rice"], excluded=["butter_chicken"])
        )
        assert resolved.ingredients == ["rice"]
        assert resolved.removed == ["butter_chicken"]

    def test_exclusion_applies_inside_expanded_dish(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["butter_chicken"], excluded=["cream"]))
        assert "cream" not in resolved.ingredients
        assert "cream" in resolved.removed

    def test_exclusion_runs_before_dietary_filter(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(
            make_context(["paneer", "rice", "milk"], excluded=["paneer"], dietary="vegan")
        )
        assert resolved.ingredients == ["rice"]
        # paneer counts once, as an exclusion
        assert resolved.removed == ["paneer", "milk"]

    def test_vegan_filter_keeps_only_vegan_items(self, synthesizer, reference_data):
        resolved = synthesizer.resolve_ingredients(
            make_context(["butter_chicken", "rice", "tofu", "paneer", "egg"], dietary="vegan")
        )
        assert resolved.ingredients
        for key in resolved.ingredients:
            assert reference_data.nutrition[key].dietary_group == "vegan"

    def test_vegetarian_filter_keeps_dairy(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["butter_chicken"], dietary="vegetarian"))
        assert "chicken" not in resolved.ingredients
        assert "butter" in resolved.ingredients

    def test_gluten_free_uses_denylist(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["pasta", "tomato"], dietary="gluten-free"))
        assert resolved.ingredients == ["tomato"]

    def test_unknown_ingredients_pass_dietary_filters(self, synthesizer):
        resolved = synthesizer.resolve_ingredients(make_context(["rice", "zzqxv"], dietary="vegan"))
        assert resolved.ingredients == ["rice", "zzqxv"]


class TestContextPrecedence:
    def test_explicit_beats_signal_beats_default(self, synthesizer):
        signals = Signals(goal="weight_loss", cuisine="Italy", dietary="vegetarian")
        from_signals = synthesizer.resolve_context(make_context(["rice"], signals=signals))
        assert from_signals.goal == "weight_loss"
        assert from_signals.location == "Italy"
        assert from_signals.dietary == "vegetarian"

        explicit = synthesizer.resolve_context(
            make_context(["rice"], signals=signals, goal="muscle_gain", location="USA", dietary="vegan")
        )
        assert (explicit.goal, explicit.location, explicit.dietary) == ("muscle_gain", "USA", "vegan")

        default = synthesizer.resolve_context(make_context(["rice"]))
        assert (default.goal, default.location, default.dietary) == ("balanced", "India", None)


class TestSynthesize:
    def test_dish_recipe(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["butter_chicken"]))
        assert isinstance(recipe, Recipe)
        assert recipe.ingredient_keys == BUTTER_CHICKEN
        assert recipe.cuisine == "India-North"
        assert recipe.estimated_prep_minutes == 45
        assert "naan" in recipe.served_with
        assert recipe.steps[0].startswith("PREP:")

    def test_excluded_ingredient_never_reaches_the_recipe(self, synthesizer, normalizer):
        parsed = normalizer.normalize("chicken, rice, onion, no onion")
        recipe = synthesizer.synthesize(make_context(parsed.ingredients, excluded=parsed.excluded))
        assert "onion" not in recipe.ingredient_keys

        plain = synthesizer.synthesize(make_context(["chicken", "rice"]))
        assert recipe.nutrition == plain.nutrition

    def test_heuristic_prep_and_difficulty(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["chicken", "rice", "garlic", "spinach"]))
        # 15 base + 4 per ingredient + 5 for a dense protein
        assert recipe.estimated_prep_minutes == 36
        assert recipe.difficulty == "beginner"
        assert recipe.metadata is None

    def test_goal_adjustment(self, synthesizer, nutrition):
        raw = nutrition.compute_totals(["chicken", "rice"])
        recipe = synthesizer.synthesize(make_context(["chicken", "rice"], goal="weight_loss"))
        assert recipe.nutrition.calories == pytest.approx(raw.calories * 0.85, abs=0.01)
        assert recipe.nutrition.fat == pytest.approx(raw.fat * 0.75, abs=0.01)
        assert recipe.nutrition.protein == pytest.approx(raw.protein * 1.10, abs=0.01)

    def test_budget_and_time_flags(self, synthesizer):
        cheap = synthesizer.synthesize(make_context(["rice", "spinach"], budget=500, max_prep_time=5))
        assert cheap.within_budget is True
        assert cheap.fits_time_limit is False

        pricey = synthesizer.synthesize(make_context(["chicken", "saffron"], budget=1))
        assert pricey.within_budget is False
        assert pricey.fits_time_limit is None

    def test_unknown_ingredient_is_kept_and_priced(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["rice", "zzqxv"]))
        unknown = recipe.ingredients[1]
        assert unknown.is_known is False
        assert unknown.cost_per_serving > 0

    def test_synthesis_is_deterministic(self, synthesizer):
        context = make_context(["paneer", "spinach", "rice"], goal="muscle_gain", spice="hot", servings=2)
        assert synthesizer.synthesize(context) == synthesizer.synthesize(context)

    def test_recipe_is_immutable(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["rice"]))
        with pytest.raises(ValidationError):
            recipe.title = "Changed"
        with pytest.raises(ValidationError):
            recipe.health.score = 3.0
        with pytest.raises(ValidationError):
            recipe.cost.total_per_serving = 0.0
        with pytest.raises(ValidationError):
            recipe.cost.items[0].cost_per_serving = 0.0
        with pytest.raises(ValidationError):
            recipe.nutrition.calories = 0.0

    def test_servings_only_change_recipe_total(self, synthesizer):
        one = synthesizer.synthesize(make_context(["chicken", "rice"], servings=1))
        four = synthesizer.synthesize(make_context(["chicken", "rice"], servings=4))
        assert one.cost.total_per_serving == four.cost.total_per_serving
        assert four.cost.total_for_recipe > one.cost.total_for_recipe

    def test_recipe_lists_budget_swaps_and_value(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["chicken", "rice"], goal="muscle_gain"))
        assert [swap.item for swap in recipe.budget_swaps] == ["chicken"]
        assert recipe.budget_swaps[0].swap_to == "soy_chunks"
        assert recipe.potential_savings == pytest.approx(18.0)
        scores = [item.value_score for item in recipe.cost_efficiency]
        assert scores == sorted(scores, reverse=True)

    def test_meal_type_drives_dish_ideas(self, synthesizer):
        recipe = synthesizer.synthesize(make_context(["rice"], location="India-South", meal_type="breakfast"))
        assert recipe.meal_type == "breakfast"
        assert recipe.dish_ideas == ["sambar", "idli", "dosa", "upma", "pongal"]

        quick = synthesizer.synthesize(
            make_context(["dosa"], location="India-South", signals=Signals(meal_type="breakfast"), max_prep_time=25)
        )
        assert quick.meal_type == "breakfast"
        assert quick.dish_ideas == ["upma"]

    def test_synthetic_dataset(self, tiny_services):
        recipe = tiny_services["synthesizer"].synthesize(make_context(["bowl"]))
        assert recipe.ingredient_keys == ["grain", "bean", "oil"]
        assert recipe.cook_method == "onepotdal"
        assert recipe.cuisine == "India-South"
        assert recipe.estimated_prep_minutes == 25


def test_context_rejects_unknown_goal():
    with pytest.raises(ValidationError):
        RecipeContext(ingredients=["rice"], goal="bulking")
