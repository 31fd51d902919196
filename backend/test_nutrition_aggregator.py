"""Tests for nutrition aggregation and quantity estimation."""

import pytest

from recipe_engine.models.ingredient import NutritionProfile
from recipe_engine.services.nutrition_aggregator import NutritionAggregator
from recipe_engine.services.reference_data import ReferenceData


@pytest.fixture
def tiny_nutrition(tiny_services):
    return tiny_services["nutrition"]


class TestEstimateQuantity:
    def test_typical_use_override_wins(self, nutrition):
        assert nutrition.estimate_quantity("chicken") == 150.0
        assert nutrition.estimate_quantity("garlic") == 10.0
        assert nutrition.estimate_quantity("butter") == 15.0

    def test_unknown_ingredient_uses_fallback(self, nutrition):
        assert nutrition.estimate_quantity("unobtainium") == 80.0

    def test_unknown_fallback_is_configurable(self, reference_data):
        assert NutritionAggregator(reference_data, 55.0).estimate_quantity("unobtainium") == 55.0

    def test_macro_density_heuristic(self):
        data = ReferenceData(nutrition={
            "rich": NutritionProfile(calories=700, protein=20, carbs=10, fat=60),
            "lean": NutritionProfile(calories=150, protein=20, carbs=0, fat=5),
            "starch": NutritionProfile(calories=350, protein=8, carbs=70, fat=2),
            "leafy": NutritionProfile(calories=25, protein=2, carbs=4, fat=0),
        })
        aggregator = NutritionAggregator(data)
        # fat is checked before protein
        assert aggregator.estimate_quantity("rich") == 10.0
        assert aggregator.estimate_quantity("lean") == 150.0
        assert aggregator.estimate_quantity("starch") == 120.0
        assert aggregator.estimate_quantity("leafy") == 100.0


class TestComputeTotals:
    def test_scaled_by_quantity(self, tiny_nutrition):
        totals = tiny_nutrition.compute_totals(["grain", "bean", "cheese"])
        assert totals.calories == pytest.approx(370.0)
        assert totals.protein == pytest.approx(22.0)
        assert totals.carbs == pytest.approx(36.0)
        assert totals.fat == pytest.approx(14.5)
        assert totals.calcium == pytest.approx(350.0)

    def test_unknown_ingredient_contributes_zero(self, tiny_nutrition):
        with_unknown = tiny_nutrition.compute_totals(["grain", "mystery"])
        without = tiny_nutrition.compute_totals(["grain"])
        assert with_unknown == without

    def test_real_data(self, nutrition):
        totals = nutrition.compute_totals(["chicken", "rice"])
        assert totals.calories == pytest.approx(351.5)
        assert totals.protein == pytest.approx(48.5)
        assert totals.carbs == pytest.approx(22.4)

    def test_empty_list(self, nutrition):
        assert nutrition.compute_totals([]).calories == 0.0

    def test_totals_never_negative(self, nutrition, reference_data):
        keys = list(reference_data.nutrition)[:40]
        totals = nutrition.compute_totals(keys)
        assert all(value >= 0 for value in totals.model_dump().values())


class TestProfiles:
    def test_glycemic_profile(self, tiny_nutrition):
        profile = tiny_nutrition.glycemic_profile(["grain", "bean"])
        assert profile.average_gi == 60.0
        assert profile.gi_label == "medium"
        assert profile.total_load == 12.0
        assert profile.gl_label == "medium"
        assert profile.high_gi_items == []

    def test_glycemic_profile_needs_a_rated_item(self, tiny_nutrition):
        assert tiny_nutrition.glycemic_profile(["bean", "oil"]) is None

    def test_protein_quality_with_complement(self, tiny_nutrition):
        quality = tiny_nutrition.protein_quality(["grain", "bean"])
        assert quality.sources == ["bean"]
        assert quality.tier == "good"
        assert quality.is_complete is False
        assert quality.has_complements is True
        assert quality.complement_hint is None
        assert quality.limiting_amino_acids == ["methionine"]

    def test_protein_quality_suggests_complement(self, tiny_nutrition):
        quality = tiny_nutrition.protein_quality(["bean", "oil"])
        assert quality.has_complements is False
        assert quality.complement_hint == "grain for methionine"

    def test_complete_protein(self, tiny_nutrition):
        quality = tiny_nutrition.protein_quality(["meat"])
        assert quality.is_complete is True
        assert quality.tier == "excellent"
        assert quality.limiting_amino_acids == []

    def test_no_protein_source(self, tiny_nutrition):
        assert tiny_nutrition.protein_quality(["grain", "oil"]) is None

    def test_inflammatory_profile(self, tiny_nutrition):
        profile = tiny_nutrition.inflammatory_profile(["grain", "bean"])
        assert profile.score == -1.0
        assert profile.label == "Mildly anti-inflammatory"

    def test_inflammatory_profile_without_data_is_neutral(self, tiny_nutrition):
        profile = tiny_nutrition.inflammatory_profile(["oil", "mystery"])
        assert profile.score == 0.0
        assert profile.label == "Neutral"

    def test_allergens_sorted_union(self, tiny_nutrition):
        assert tiny_nutrition.allergens(["meat", "cheese", "grain"]) == ["Dairy", "Meat"]

    @pytest.mark.parametrize("ingredients, expected", [
        (["grain", "bean"], "vegan"),
        (["grain", "cheese"], "vegetarian"),
        (["cheese", "meat"], "non-veg"),
        (["grain", "mystery"], "vegan"),
    ])
    def test_dietary_classification(self, tiny_nutrition, ingredients, expected):
        assert tiny_nutrition.dietary_profile(ingredients).classification == expected

    def test_micronutrient_flags(self, tiny_nutrition):
        low = tiny_nutrition.micronutrient_flags(tiny_nutrition.compute_totals(["grain"]))
        assert "Calcium" in [flag.nutrient for flag in low]

        rich = tiny_nutrition.micronutrient_flags(tiny_nutrition.compute_totals(["cheese"]))
        assert "Calcium" not in [flag.nutrient for flag in rich]

    def test_health_tags_by_frequency(self, nutrition):
        tags = nutrition.health_tags(["chicken", "milk"])
        assert tags[0] in ("complete-protein", "B12-source")
        assert len(tags) <= 6


def test_build_report_empty_list(nutrition):
    report = nutrition.build_report([])
    assert report.totals.calories == 0.0
    assert report.glycemic is None
    assert report.protein_quality is None
    assert report.allergens == []


def test_build_report_collects_profiles(nutrition):
    report = nutrition.build_report(["paneer", "rice", "spinach"])
    assert report.dietary.classification == "vegetarian"
    assert "Dairy" in report.allergens
    assert report.glycemic is not None
    assert report.protein_quality is not None
