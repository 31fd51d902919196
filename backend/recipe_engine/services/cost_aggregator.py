"""
Cost aggregation.

This module prices an ingredient list per serving for a location. Each
ingredient is priced at its estimated use quantity, grossed up for
trimming waste and scaled by a per-category location factor. The
breakdown is always stored per single serving; the servings count only
affects the bulk-cooking total, so a breakdown can be redisplayed for any
number of servings.
"""

import logging
from collections import Counter
from typing import List, Optional, Sequence

from recipe_engine.models.cost import (
    BudgetTier,
    CostEfficiency,
    CostItem,
    Currency,
    PriceBreakdown,
    SwapSaving,
    VolatilityWarning,
)
from recipe_engine.services.nutrition_aggregator import NutritionAggregator
from recipe_engine.services.reference_data import ReferenceData
from recipe_engine.utils.constants import (
    BUDGET_TIER_CEILING,
    BUDGET_TIER_THRESHOLDS,
    BULK_SCALE_CATEGORY,
    DEFAULT_BULK_SCALE,
    EFFICIENCY_VERDICT_FLOOR,
    EFFICIENCY_VERDICTS,
    EFFICIENCY_WEIGHTS,
    SWAP_PROTEIN_KEEP_RATIO,
    VOLATILE_LEVELS,
)
from recipe_engine.utils.helpers import base_location, format_cost

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = Currency(symbol="₹", code="INR", name="Indian Rupee")

# Price category used to scale the flat estimate for unpriced ingredients
ESTIMATE_CATEGORY = "packaged"


class CostAggregator:
    """
    Per-serving cost calculator.

    Attributes:
        data: Reference datasets
        nutrition: Aggregator supplying use-quantity estimates
        unknown_cost: Base-currency cost charged for unpriced ingredients
    """

    def __init__(
        self,
        data: ReferenceData,
        nutrition: NutritionAggregator,
        unknown_cost: float = 12.0,
    ):
        self.data = data
        self.nutrition = nutrition
        self.unknown_cost = unknown_cost
        logger.info(
            f"CostAggregator initialized with {len(data.costs)} priced ingredients "
            f"across {len(data.currencies)} currencies"
        )

    def location_factor(self, category: str, location: str) -> float:
        """
        Price multiplier for a category in a location.

        Sub-regions ("India-South") use their base location's factor. A
        missing category or location resolves to 1.0.
        """
        factors = self.data.location_multipliers.get(category)
        if not factors:
            return 1.0
        if location in factors:
            return float(factors[location])
        return float(factors.get(base_location(location), 1.0))

    def ingredient_cost(self, ingredient: str, location: str) -> CostItem:
        """
        Price one ingredient for a single serving.

        Formula:
            buy_qty = qty / waste_factor
            cost = buy_qty / 100 * price_per_100 * location_factor

        Unpriced ingredients are never free: they cost the configured
        flat estimate, scaled like a packaged good for the location, and
        are flagged ``is_estimate``.

        Args:
            ingredient: Ingredient key
            location: Pricing location

        Returns:
            CostItem: Per-serving cost line
        """
        qty = self.nutrition.estimate_quantity(ingredient)
        entry = self.data.costs.get(ingredient)

        if entry is None:
            logger.debug(f"No price for '{ingredient}', using flat estimate")
            base = self.unknown_cost
            return CostItem(
                item=ingredient,
                qty=qty,
                buy_qty=qty,
                cost_per_serving=round(base * self.location_factor(ESTIMATE_CATEGORY, location), 2),
                base_cost=round(base, 2),
                is_estimate=True,
            )

        buy_qty = qty / entry.waste_factor
        base = buy_qty / 100 * entry.price_per_100
        return CostItem(
            item=ingredient,
            qty=qty,
            buy_qty=round(buy_qty, 1),
            cost_per_serving=round(base * self.location_factor(entry.category, location), 2),
            base_cost=round(base, 2),
            category=entry.category,
            tier=entry.tier,
        )

    def raw_cost(self, ingredients: Sequence[str], location: str) -> float:
        """Sum of per-serving ingredient costs, without any breakdown."""
        return round(sum(self.ingredient_cost(i, location).cost_per_serving for i in ingredients), 2)

    def bulk_total(self, items: Sequence[CostItem], servings: int) -> float:
        """
        Cost of cooking ``servings`` portions at once.

        Extra servings add only a category-dependent share of the
        single-serving cost (a pot of spice covers many plates, meat
        scales almost linearly):

            total = sum(cost * (1 + scale * (servings - 1)))
        """
        total = 0.0
        for item in items:
            scale = BULK_SCALE_CATEGORY.get(item.category or "", DEFAULT_BULK_SCALE)
            total += item.cost_per_serving * (1 + scale * (servings - 1))
        return round(total, 2)

    def classify_budget_tier(self, base_total_per_serving: float) -> BudgetTier:
        """
        Budget tier from the base-currency per-serving total.

        Uses base prices so tiers stay comparable across locations.
        """
        for threshold, tier in BUDGET_TIER_THRESHOLDS:
            if base_total_per_serving < threshold:
                return BudgetTier(tier)
        return BudgetTier(BUDGET_TIER_CEILING)

    def volatility_warnings(self, ingredients: Sequence[str]) -> List[VolatilityWarning]:
        """Informational warnings for ingredients with unstable prices."""
        warnings = []
        for ingredient in ingredients:
            entry = self.data.costs.get(ingredient)
            if entry is None or entry.volatility not in VOLATILE_LEVELS:
                continue
            info = self.data.volatility.get(entry.volatility, {})
            warnings.append(VolatilityWarning(
                item=ingredient,
                volatility=entry.volatility,
                label=info.get("label", entry.volatility.title()),
                note=info.get("note", ""),
                price_range=entry.price_range,
            ))
        return warnings

    def currency(self, location: Optional[str]) -> Currency:
        """Currency for a location, falling back to its base location, then India."""
        for candidate in (location, base_location(location), "India"):
            if candidate and candidate in self.data.currencies:
                return self.data.currencies[candidate]
        return DEFAULT_CURRENCY

    def compute_price_breakdown(
        self,
        ingredients: Sequence[str],
        location: str,
        servings: int = 1
    ) -> PriceBreakdown:
        """
        Price an ingredient list for a location.

        Args:
            ingredients: Ingredient keys (already deduplicated)
            location: Pricing location; unknown locations price at base rates
            servings: Number of servings, used only for ``total_for_recipe``

        Returns:
            PriceBreakdown: Per-serving lines and totals, currency, budget
                tier, tier mix and volatility warnings

        Example:
            breakdown = aggregator.compute_price_breakdown(["rice", "egg"], "India", 2)
            print(breakdown.formatted_total)
        """
        servings = max(1, int(servings or 1))
        items = [self.ingredient_cost(ingredient, location) for ingredient in ingredients]

        total = round(sum(item.cost_per_serving for item in items), 2)
        base_total = round(sum(item.base_cost for item in items), 2)
        currency = self.currency(location)

        estimates = [item.item for item in items if item.is_estimate]
        if estimates:
            logger.warning(f"Estimated cost for unpriced ingredients: {', '.join(estimates)}")

        breakdown = PriceBreakdown(
            items=items,
            total_per_serving=total,
            base_total_per_serving=base_total,
            total_for_recipe=self.bulk_total(items, servings),
            servings=servings,
            location=location,
            currency=currency,
            formatted_total=format_cost(total, currency.symbol),
            budget_tier=self.classify_budget_tier(base_total),
            tier_mix=dict(Counter(item.tier for item in items if item.tier)),
            volatility_warnings=self.volatility_warnings(ingredients),
        )

        logger.debug(
            f"Priced {len(items)} ingredients for {location}: "
            f"{breakdown.formatted_total}/serving ({breakdown.budget_tier.value})"
        )
        return breakdown

    # ------------------------------------------------------------------
    # Savings and value
    # ------------------------------------------------------------------

    def swap_goal_fit(self, ingredient: str, candidate: str, goal: str) -> str:
        """Short verdict on how a swap sits with the goal, from per-100g data."""
        original = self.data.nutrition.get(ingredient)
        replacement = self.data.nutrition.get(candidate)
        if original is None or replacement is None:
            return "No nutrition data to compare"
        if goal == "muscle_gain":
            if replacement.protein >= original.protein * SWAP_PROTEIN_KEEP_RATIO:
                return "Keeps the protein"
            return "Lower protein"
        if goal == "weight_loss":
            if replacement.calories <= original.calories:
                return "Lighter option"
            return "More calories"
        return "Good swap"

    def swap_savings(self, ingredient: str, location: str, goal: str = "balanced") -> Optional[SwapSaving]:
        """
        Saving from replacing one ingredient with its first candidate.

        Applies the substitution table's approximate saving fraction to the
        ingredient's current cost. Entries that do not save money (whole-grain
        upgrades) return None.
        """
        entry = self.data.substitutions.get(ingredient)
        if entry is None or entry.saving <= 0:
            return None

        original = self.ingredient_cost(ingredient, location).cost_per_serving
        saved = round(original * entry.saving, 2)
        return SwapSaving(
            item=ingredient,
            swap_to=entry.swaps[0],
            alternatives=list(entry.swaps[1:]),
            original_cost=original,
            saved=saved,
            new_cost=round(original - saved, 2),
            saved_pct=round(entry.saving * 100),
            note=entry.note,
            goal_fit=self.swap_goal_fit(ingredient, entry.swaps[0], goal),
        )

    def budget_swaps(
        self,
        ingredients: Sequence[str],
        location: str,
        goal: str = "balanced"
    ) -> List[SwapSaving]:
        """Money-saving swaps for a recipe, largest saving first."""
        swaps = []
        for ingredient in ingredients:
            saving = self.swap_savings(ingredient, location, goal)
            if saving is not None:
                swaps.append(saving)
        return sorted(swaps, key=lambda swap: swap.saved, reverse=True)

    def potential_savings(self, swaps: Sequence[SwapSaving]) -> float:
        """Total per-serving saving if every listed swap were made."""
        return round(sum(swap.saved for swap in swaps), 2)

    def cost_efficiency(
        self,
        ingredient: str,
        location: str,
        goal: str = "balanced"
    ) -> Optional[CostEfficiency]:
        """
        Goal-specific value of an ingredient per 10 units of local currency.

        Scales the use quantity to what 10 currency units buy, then weighs
        protein, fibre and calories for the goal:

            value = w_protein * protein + w_fibre * fibre + w_calories * calories

        Args:
            ingredient: Ingredient key
            location: Pricing location
            goal: Effective goal

        Returns:
            CostEfficiency, or None for ingredients without both a price and
            nutrition data
        """
        profile = self.data.nutrition.get(ingredient)
        if profile is None or ingredient not in self.data.costs:
            return None
        cost = self.ingredient_cost(ingredient, location).cost_per_serving
        if cost <= 0:
            return None

        scale = self.nutrition.estimate_quantity(ingredient) / 100 * (10 / cost)
        protein = profile.protein * scale
        fibre = profile.fibre * scale
        calories = profile.calories * scale

        protein_weight, fibre_weight, calorie_weight = EFFICIENCY_WEIGHTS.get(
            goal, EFFICIENCY_WEIGHTS["balanced"]
        )
        value = protein_weight * protein + fibre_weight * fibre + calorie_weight * calories

        verdict = EFFICIENCY_VERDICT_FLOOR
        for floor, label in EFFICIENCY_VERDICTS:
            if value > floor:
                verdict = label
                break

        return CostEfficiency(
            item=ingredient,
            cost_per_serving=cost,
            protein_per_10=round(protein, 1),
            calories_per_10=round(calories),
            value_score=round(value, 2),
            tier=self.data.costs[ingredient].tier,
            verdict=verdict,
        )

    def rank_by_efficiency(
        self,
        ingredients: Sequence[str],
        location: str,
        goal: str = "balanced"
    ) -> List[CostEfficiency]:
        """Priced ingredients ordered by value score, best first."""
        ranked = []
        for ingredient in ingredients:
            efficiency = self.cost_efficiency(ingredient, location, goal)
            if efficiency is not None:
                ranked.append(efficiency)
        return sorted(ranked, key=lambda item: item.value_score, reverse=True)
