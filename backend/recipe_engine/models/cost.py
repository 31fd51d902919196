"""
Pydantic models for cost breakdowns.

This module defines per-ingredient costs, currency metadata, volatility
warnings and the per-serving price breakdown of a recipe.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class BudgetTier(str, Enum):
    """Budget classification of a recipe's per-serving cost."""
    BUDGET = "budget"
    MODERATE = "moderate"
    PREMIUM = "premium"
    LUXURY = "luxury"


class Currency(BaseModel):
    """Currency used to display costs for a location."""
    symbol: str
    code: str
    name: str

    model_config = {"frozen": True}


class CostItem(BaseModel):
    """
    Cost of one ingredient for a single serving.

    Attributes:
        item: Ingredient key
        qty: Grams used per serving
        buy_qty: Grams bought per serving after trimming waste
        cost_per_serving: Cost in local price terms
        base_cost: Cost in the base currency, before location scaling
        category: Price category
        tier: Ingredient price tier
        is_estimate: True when the ingredient has no price entry
    """
    item: str
    qty: float = Field(..., ge=0)
    buy_qty: float = Field(..., ge=0)
    cost_per_serving: float = Field(..., ge=0)
    base_cost: float = Field(..., ge=0)
    category: Optional[str] = None
    tier: Optional[str] = None
    is_estimate: bool = False

    model_config = {"frozen": True}


class VolatilityWarning(BaseModel):
    """Informational warning for an ingredient with unstable pricing."""
    item: str
    volatility: str
    label: str
    note: str
    price_range: Optional[List[float]] = None

    model_config = {"frozen": True}


class PriceBreakdown(BaseModel):
    """
    Per-serving cost breakdown.

    ``total_per_serving`` is always the single-serving sum; the servings
    count only affects ``total_for_recipe``, so the breakdown can be
    redisplayed for any servings count.
    """
    items: List[CostItem] = Field(default_factory=list)
    total_per_serving: float = Field(0.0, ge=0)
    base_total_per_serving: float = Field(0.0, ge=0)
    total_for_recipe: float = Field(0.0, ge=0)
    servings: int = Field(1, ge=1)
    location: str
    currency: Currency
    formatted_total: str = ""
    budget_tier: BudgetTier = BudgetTier.BUDGET
    tier_mix: Dict[str, int] = Field(default_factory=dict)
    volatility_warnings: List[VolatilityWarning] = Field(default_factory=list)

    model_config = {"frozen": True}


class SwapSaving(BaseModel):
    """
    Cheaper alternative for one ingredient of a recipe.

    Attributes:
        item: Ingredient key being replaced
        swap_to: First candidate from the substitution table
        alternatives: Remaining candidates, in table order
        original_cost: Current per-serving cost of the ingredient
        saved: Approximate per-serving saving
        new_cost: Per-serving cost after the swap
        saved_pct: Saving in percent
        note: Why the swap works
        goal_fit: How the swap sits with the recipe's goal
    """
    item: str
    swap_to: str
    alternatives: List[str] = Field(default_factory=list)
    original_cost: float = Field(..., ge=0)
    saved: float = Field(..., ge=0)
    new_cost: float = Field(..., ge=0)
    saved_pct: int = Field(..., ge=0, le=100)
    note: str = ""
    goal_fit: str = ""

    model_config = {"frozen": True}


class CostEfficiency(BaseModel):
    """Goal-specific value of one ingredient per 10 units of local currency."""
    item: str
    cost_per_serving: float = Field(..., gt=0)
    protein_per_10: float = Field(0.0, ge=0)
    calories_per_10: float = Field(0.0, ge=0)
    value_score: float
    tier: Optional[str] = None
    verdict: str

    model_config = {"frozen": True}
