"""
Pydantic models for recipe synthesis.

This module defines the recipe context (the user's parameters plus the
normalized ingredient stream), the immutable Recipe record, the explicit
EmptyResult returned when nothing is left to cook, and the request
schemas of the HTTP layer.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional, Union

from recipe_engine.models.cost import CostEfficiency, PriceBreakdown, SwapSaving
from recipe_engine.models.health_score import HealthExtras, HealthScore
from recipe_engine.models.ingredient import DishMetadata
from recipe_engine.models.input import Signals
from recipe_engine.models.nutrition import (
    DietaryProfile,
    GlycemicProfile,
    InflammatoryProfile,
    MicronutrientFlag,
    NutritionTotals,
    ProteinQuality,
)
from recipe_engine.utils.validators import (
    validate_dietary,
    validate_goal,
    validate_skill,
    validate_spice,
)


class RecipeContext(BaseModel):
    """
    Everything the synthesizer needs to build a recipe.

    Only ``ingredients`` is required. Unset values resolve by precedence:
    explicit value, then the matching text signal, then the configured
    default.

    Attributes:
        ingredients: Canonical keys, may include dish keys
        excluded: Keys to remove even when a dish implies them
        signals: Hints extracted from free text
        goal: balanced / weight_loss / muscle_gain
        spice: mild / medium / hot
        budget: Soft per-serving cost ceiling, reported but not enforced
        location: Cuisine / pricing location (e.g. "India", "Italy")
        skill: beginner / intermediate / advanced
        servings: Number of servings (positive integer)
        dietary: vegan / vegetarian / gluten-free / non-veg
        meal_type: breakfast / lunch / dinner / snack / dessert
        max_prep_time: Minutes available
    """
    ingredients: List[str] = Field(..., description="Canonical ingredient or dish keys")
    excluded: List[str] = Field(default_factory=list)
    signals: Signals = Field(default_factory=Signals)
    goal: Optional[str] = None
    spice: Optional[str] = None
    budget: Optional[float] = Field(None, gt=0, description="Per-serving budget")
    location: Optional[str] = None
    skill: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1, le=50)
    dietary: Optional[str] = None
    meal_type: Optional[str] = None
    max_prep_time: Optional[int] = Field(None, gt=0)

    @field_validator('ingredients', 'excluded')
    @classmethod
    def normalize_keys(cls, v: List[str]) -> List[str]:
        """Lowercase keys and join multi-word names with underscores."""
        return ["_".join(item.strip().lower().split()) for item in v if item and item.strip()]

    @field_validator('goal')
    @classmethod
    def check_goal(cls, v: Optional[str]) -> Optional[str]:
        return validate_goal(v)

    @field_validator('spice')
    @classmethod
    def check_spice(cls, v: Optional[str]) -> Optional[str]:
        return validate_spice(v)

    @field_validator('skill')
    @classmethod
    def check_skill(cls, v: Optional[str]) -> Optional[str]:
        return validate_skill(v)

    @field_validator('dietary')
    @classmethod
    def check_dietary(cls, v: Optional[str]) -> Optional[str]:
        return validate_dietary(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "ingredients": ["chicken", "rice", "garlic", "spinach"],
                "excluded": ["onion"],
                "goal": "muscle_gain",
                "spice": "medium",
                "location": "India",
                "servings": 2
            }
        }
    }


class RecipeIngredient(BaseModel):
    """One ingredient line of a recipe."""
    key: str
    name: str
    qty: float = Field(..., ge=0, description="Estimated grams per serving")
    cost_per_serving: float = Field(0.0, ge=0)
    is_known: bool = True

    model_config = {"frozen": True}


class OptimizationChange(BaseModel):
    """One accepted substitution made by the optimizer."""
    original: str
    swapped_to: str
    reason: str
    saving_pct: int = Field(0, description="Approximate cost saving in percent")

    model_config = {"frozen": True}


class Recipe(BaseModel):
    """
    Synthesized recipe record.

    Built once per synthesis call and never mutated; the optimizer
    produces a new record with its change log attached.
    """
    status: Literal["ok"] = "ok"
    title: str
    description: str
    ingredients: List[RecipeIngredient]
    dish_keys: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)

    nutrition: NutritionTotals
    health: HealthScore
    glycemic_profile: Optional[GlycemicProfile] = None
    protein_quality: Optional[ProteinQuality] = None
    inflammatory: Optional[InflammatoryProfile] = None
    dietary_profile: Optional[DietaryProfile] = None
    allergens: List[str] = Field(default_factory=list)
    micronutrient_flags: List[MicronutrientFlag] = Field(default_factory=list)
    health_tags: List[str] = Field(default_factory=list)

    cost: PriceBreakdown
    within_budget: Optional[bool] = None
    budget_swaps: List[SwapSaving] = Field(default_factory=list)
    potential_savings: float = Field(0.0, ge=0)
    cost_efficiency: List[CostEfficiency] = Field(default_factory=list)

    suggestions: List[str] = Field(default_factory=list)
    mistakes: List[str] = Field(default_factory=list)
    pairings: List[str] = Field(default_factory=list)

    metadata: Optional[DishMetadata] = None
    cuisine: str
    cook_method: str
    estimated_prep_minutes: int = Field(..., gt=0)
    difficulty: str
    served_with: List[str] = Field(default_factory=list)
    dish_ideas: List[str] = Field(default_factory=list)
    fits_time_limit: Optional[bool] = None

    goal: str
    location: str
    dietary: Optional[str] = None
    meal_type: Optional[str] = None
    spice: str
    skill: str
    servings: int = Field(1, ge=1)

    is_optimized: bool = False
    optimization_changes: List[OptimizationChange] = Field(default_factory=list)
    cost_before: Optional[float] = None
    cost_after: Optional[float] = None
    cost_saving_pct: Optional[float] = None
    score_before: Optional[float] = None
    score_after: Optional[float] = None

    @property
    def ingredient_keys(self) -> List[str]:
        """Ingredient keys in recipe order."""
        return [ingredient.key for ingredient in self.ingredients]

    model_config = {"frozen": True}


class EmptyResult(BaseModel):
    """
    Explicit "nothing to cook" outcome.

    Returned instead of a recipe when the ingredient list is empty after
    dish expansion, exclusions and dietary filtering.
    """
    status: Literal["empty"] = "empty"
    reason: str
    removed: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


SynthesisResult = Union[Recipe, EmptyResult]


# ==============================================================================
# HTTP REQUEST MODELS
# ==============================================================================

class NormalizeRequest(BaseModel):
    """Request body for /normalize."""
    text: str = Field("", description="Free text describing ingredients or a dish")


class DetectModeRequest(BaseModel):
    """Request body for /detect-mode; already-parsed keys take precedence over text."""
    text: str = Field("", description="Free text as typed")
    ingredients: Optional[List[str]] = Field(None, description="Already-normalized keys")
    mode: Literal["dish", "ingredients"] = Field(..., description="Declared input mode")


class OptimizeRequest(RecipeContext):
    """Request body for /optimize."""
    max_cost_per_serving: Optional[float] = Field(
        None,
        gt=0,
        description="Per-serving ceiling no accepted substitution may exceed"
    )


class ScoreRequest(BaseModel):
    """Request body for /score."""
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    goal: Optional[str] = None
    extras: HealthExtras = Field(default_factory=HealthExtras)

    @field_validator('goal')
    @classmethod
    def check_goal(cls, v: Optional[str]) -> Optional[str]:
        return validate_goal(v)
