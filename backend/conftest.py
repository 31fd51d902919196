"""Shared pytest fixtures: the packaged reference data, wired services and a tiny synthetic dataset."""

import pytest

from recipe_engine.config import settings
from recipe_engine.models.cost import Currency
from recipe_engine.models.ingredient import (
    CostEntry,
    DishExpansion,
    DishMetadata,
    NutritionProfile,
    SubstitutionEntry,
)
from recipe_engine.services.cost_aggregator import CostAggregator
from recipe_engine.services.health_scorer import HealthScorer
from recipe_engine.services.input_normalizer import InputNormalizer, NegationRules
from recipe_engine.services.kitchen_guide import KitchenGuide
from recipe_engine.services.nutrition_aggregator import NutritionAggregator
from recipe_engine.services.recipe_synthesizer import RecipeSynthesizer
from recipe_engine.services.reference_data import Lexicon, ReferenceData, load_reference_data
from recipe_engine.services.substitution_optimizer import SubstitutionOptimizer


def wire(data):
    """Build the full service graph over a ReferenceData instance."""
    nutrition = NutritionAggregator(data, 80.0)
    cost = CostAggregator(data, nutrition, 12.0)
    scorer = HealthScorer(4)
    guide = KitchenGuide(data)
    synthesizer = RecipeSynthesizer(data, nutrition, cost, scorer, guide)
    return {
        "nutrition": nutrition,
        "cost": cost,
        "scorer": scorer,
        "guide": guide,
        "synthesizer": synthesizer,
        "optimizer": SubstitutionOptimizer(synthesizer),
    }


@pytest.fixture(scope="session")
def reference_data():
    return load_reference_data(settings.DATA_DIR)


@pytest.fixture(scope="session")
def services(reference_data):
    return wire(reference_data)


@pytest.fixture(scope="session")
def normalizer(reference_data):
    return InputNormalizer(reference_data, NegationRules.from_settings(settings), settings.FUZZY_MAX_DISTANCE)


@pytest.fixture(scope="session")
def nutrition(services):
    return services["nutrition"]


@pytest.fixture(scope="session")
def cost(services):
    return services["cost"]


@pytest.fixture(scope="session")
def scorer(services):
    return services["scorer"]


@pytest.fixture(scope="session")
def guide(services):
    return services["guide"]


@pytest.fixture(scope="session")
def synthesizer(services):
    return services["synthesizer"]


@pytest.fixture(scope="session")
def optimizer(services):
    return services["optimizer"]


def _profile(calories, protein, carbs, fat, group="vegan", qty=100, **extra):
    return NutritionProfile(
        calories=calories, protein=protein, carbs=carbs, fat=fat,
        dietary_group=group, typical_use_qty=qty, **extra
    )


@pytest.fixture
def tiny_data():
    """
    Five-ingredient dataset with round numbers.

    grain: 100 kcal, 2p/20c/1f per 100g, 100g per serving, 10 per 100g
    bean:  120 kcal, 10p/15c/1f, 100g, 5 per 100g (cheaper protein)
    meat:  200 kcal, 25p/0c/10f, 100g, 40 per 100g, swaps to bean
    cheese: vegetarian, 300 kcal, 20p/2c/25f, 50g, 30 per 100g
    oil:   900 kcal fat, 10g, no price row
    """
    return ReferenceData(
        nutrition={
            "grain": _profile(100, 2, 20, 1, glycemic_index=60, glycemic_load=12, inflammatory=1),
            "bean": _profile(120, 10, 15, 1, fibre=6, protein_quality=0.7, inflammatory=-3,
                             complement_with="grain for methionine", limiting_amino_acid="methionine"),
            "meat": _profile(200, 25, 0, 10, group="non-veg", protein_quality=0.95,
                             limiting_amino_acid="none", allergens=["Meat"]),
            "cheese": _profile(300, 20, 2, 25, group="vegetarian", qty=50, calcium=700,
                               allergens=["Dairy"]),
            "oil": _profile(900, 0, 0, 100, qty=10),
        },
        costs={
            "grain": CostEntry(price_per_100=10, category="staple_grain", tier="budget"),
            "bean": CostEntry(price_per_100=5, category="packaged", tier="budget"),
            "meat": CostEntry(price_per_100=40, category="meat", tier="premium",
                              waste_factor=0.8, volatility="high", price_range=[30, 60]),
            "cheese": CostEntry(price_per_100=30, category="dairy_eggs", tier="mid"),
        },
        location_multipliers={"meat": {"India": 1.0, "USA": 3.0}, "packaged": {"USA": 2.0}},
        currencies={
            "India": Currency(symbol="₹", code="INR", name="Indian Rupee"),
            "USA": Currency(symbol="$", code="USD", name="US Dollar"),
        },
        volatility={"high": {"label": "Seasonal price", "note": "Swings across seasons."}},
        dishes={
            "grain_bowl": DishExpansion(
                ingredients=["grain", "bean", "oil"],
                metadata=DishMetadata(cuisine="India-South", cook_method="onepotdal", prep_minutes=25),
            ),
            "meat_plate": DishExpansion(ingredients=["meat", "grain"]),
        },
        dish_aliases={"bowl": "grain_bowl"},
        substitutions={"meat": SubstitutionEntry(swaps=["bean"], saving=0.8, note="Bean for meat")},
        lexicon=Lexicon(),
        kitchen={},
    )


@pytest.fixture
def tiny_services(tiny_data):
    return wire(tiny_data)
