"""
Recipe synthesis.

This module turns a recipe context (normalized ingredient keys plus the
user's goal, location, dietary filter and other preferences) into one
immutable Recipe record: nutrition adjusted for the goal, a per-serving
cost breakdown, a health score, cooking steps and the descriptive text
around them.

Pipeline:
1. Resolve goal, location and dietary filter: explicit value, then the
   text signal, then the configured default
2. Drop excluded dish names, expand the remaining dishes in place
3. Drop excluded ingredients, then apply the dietary filter
4. Return an EmptyResult if nothing is left
5. Aggregate nutrition, apply the goal adjustment, price and score
6. Assemble the Recipe with steps, tips, title and description
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from recipe_engine.models.health_score import HealthExtras, HealthScore
from recipe_engine.models.ingredient import DishMetadata
from recipe_engine.models.nutrition import NutritionReport, NutritionTotals
from recipe_engine.models.recipe import (
    EmptyResult,
    Recipe,
    RecipeContext,
    RecipeIngredient,
    SynthesisResult,
)
from recipe_engine.services.cost_aggregator import CostAggregator
from recipe_engine.services.health_scorer import HealthScorer
from recipe_engine.services.kitchen_guide import KitchenGuide
from recipe_engine.services.nutrition_aggregator import NutritionAggregator
from recipe_engine.services.reference_data import ReferenceData
from recipe_engine.utils.constants import (
    BASE_PREP_MINUTES,
    DIFFICULTY_BY_COUNT,
    GLUTEN_DENYLIST,
    GOAL_MACRO_ADJUSTMENTS,
    GOALS,
    HIGH_PROTEIN_PER_100G,
    HIGH_PROTEIN_PREP_MINUTES,
    MAX_DISH_IDEAS,
    PREP_MINUTES_PER_INGREDIENT,
)
from recipe_engine.utils.helpers import dedupe, display_name, to_phrase

# Configure logging
logger = logging.getLogger(__name__)

# Dietary groups each filter keeps
DIETARY_ALLOWED = {
    "vegan": {"vegan"},
    "vegetarian": {"vegan", "vegetarian"},
}


class ResolvedIngredients(NamedTuple):
    """Ingredient list after dish expansion, exclusions and dietary filtering."""
    ingredients: List[str]
    dish_keys: List[str]
    removed: List[str]


class EffectiveContext(NamedTuple):
    """Context values after precedence resolution."""
    goal: str
    location: str
    dietary: Optional[str]
    spice: str
    skill: str
    servings: int


class RecipeSynthesizer:
    """
    Builds Recipe records from recipe contexts.

    Attributes:
        data: Reference datasets
        nutrition: Nutrition aggregator
        cost: Cost aggregator
        scorer: Health scorer
        guide: Kitchen guidance collaborator
    """

    def __init__(
        self,
        data: ReferenceData,
        nutrition: NutritionAggregator,
        cost: CostAggregator,
        scorer: HealthScorer,
        guide: KitchenGuide,
        default_goal: str = "balanced",
        default_location: str = "India",
        default_spice: str = "medium",
        default_skill: str = "intermediate",
        default_servings: int = 1,
    ):
        self.data = data
        self.nutrition = nutrition
        self.cost = cost
        self.scorer = scorer
        self.guide = guide
        self.default_goal = default_goal
        self.default_location = default_location
        self.default_spice = default_spice
        self.default_skill = default_skill
        self.default_servings = default_servings
        logger.info(
            f"RecipeSynthesizer initialized (goal={default_goal}, location={default_location})"
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_context(self, context: RecipeContext) -> EffectiveContext:
        """Apply explicit > signal > default precedence to the context."""
        signals = context.signals
        signal_goal = signals.goal if signals.goal in GOALS else None
        return EffectiveContext(
            goal=context.goal or signal_goal or self.default_goal,
            location=context.location or signals.cuisine or self.default_location,
            dietary=context.dietary or signals.dietary,
            spice=context.spice or self.default_spice,
            skill=context.skill or self.default_skill,
            servings=context.servings or self.default_servings,
        )

    def dish_key(self, key: str) -> Optional[str]:
        """Dish key for a key or alternate dish name, or None."""
        if key in self.data.dishes:
            return key
        return self.data.dish_aliases.get(to_phrase(key))

    def passes_dietary(self, ingredient: str, dietary: Optional[str]) -> bool:
        """
        True when an ingredient is allowed under a dietary filter.

        Ingredients without nutrition data have no classification and are
        kept.
        """
        if dietary == "gluten-free":
            return ingredient not in GLUTEN_DENYLIST
        allowed = DIETARY_ALLOWED.get(dietary or "")
        if allowed is None:
            return True
        profile = self.data.nutrition.get(ingredient)
        return profile is None or profile.dietary_group in allowed

    def resolve_ingredients(
        self,
        context: RecipeContext,
        dietary: Optional[str] = None
    ) -> ResolvedIngredients:
        """
        Expand dishes and apply exclusions and the dietary filter.

        Order matters: excluded dish names are dropped before expansion,
        dishes expand in place, excluded ingredients are removed next and
        the dietary filter runs last.

        Args:
            context: Recipe context
            dietary: Effective dietary filter; defaults to the context's
                resolved filter

        Returns:
            ResolvedIngredients: Final keys, the dishes used and every
                key removed along the way
        """
        if dietary is None:
            dietary = self.resolve_context(context).dietary

        excluded = set(context.excluded)
        removed: List[str] = []
        expanded: List[str] = []
        dish_keys: List[str] = []

        for key in context.ingredients:
            if key in excluded:
                removed.append(key)
                continue
            dish = self.dish_key(key)
            if dish is not None:
                dish_keys.append(dish)
                expanded.extend(self.data.dishes[dish].ingredients)
            else:
                expanded.append(key)

        kept = []
        for ingredient in dedupe(expanded):
            if ingredient in excluded:
                removed.append(ingredient)
            elif not self.passes_dietary(ingredient, dietary):
                logger.debug(f"Dietary filter '{dietary}' removed '{ingredient}'")
                removed.append(ingredient)
            else:
                kept.append(ingredient)

        return ResolvedIngredients(kept, dedupe(dish_keys), dedupe(removed))

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def adjust_for_goal(self, totals: NutritionTotals, goal: str) -> NutritionTotals:
        """
        Scale totals by the goal's macro multipliers.

        Models the expected effect of portion and technique choices for
        the goal, not an ingredient change.
        """
        factors = GOAL_MACRO_ADJUSTMENTS.get(goal, {})
        if not factors:
            return totals
        return totals.model_copy(update={
            name: round(getattr(totals, name) * factor, 2)
            for name, factor in factors.items()
        })

    def analyze(
        self,
        ingredients: Sequence[str],
        goal: str
    ) -> Tuple[NutritionReport, NutritionTotals, HealthScore]:
        """
        Nutrition report, goal-adjusted totals and health score for a list.

        Args:
            ingredients: Final ingredient keys
            goal: Effective goal

        Returns:
            Tuple of (raw report, adjusted totals, health score)
        """
        report = self.nutrition.build_report(ingredients)
        adjusted = self.adjust_for_goal(report.totals, goal)

        extras = HealthExtras(
            inflam=report.inflammatory.score if report.inflammatory else None,
            total_gl=report.glycemic.total_load if report.glycemic else None,
            fibre=adjusted.fibre,
            iron=adjusted.iron,
            calcium=adjusted.calcium,
        )
        health = self.scorer.score(
            adjusted.calories, adjusted.protein, adjusted.carbs, adjusted.fat, goal, extras
        )
        return report, adjusted, health

    # ------------------------------------------------------------------
    # Metadata heuristics
    # ------------------------------------------------------------------

    def dish_metadata(self, dish_keys: Sequence[str]) -> Optional[DishMetadata]:
        """Metadata of the first dish that has any."""
        for dish in dish_keys:
            metadata = self.data.dishes[dish].metadata
            if metadata is not None:
                return metadata
        if dish_keys:
            logger.warning(f"No metadata for dishes {list(dish_keys)}, using heuristics")
        return None

    def estimate_prep_minutes(self, ingredients: Sequence[str]) -> int:
        """Base time plus time per ingredient, plus extra for a dense protein."""
        minutes = BASE_PREP_MINUTES + PREP_MINUTES_PER_INGREDIENT * len(ingredients)
        for ingredient in ingredients:
            profile = self.data.nutrition.get(ingredient)
            if profile is not None and profile.protein > HIGH_PROTEIN_PER_100G:
                minutes += HIGH_PROTEIN_PREP_MINUTES
                break
        return minutes

    def estimate_difficulty(self, ingredients: Sequence[str]) -> str:
        """Difficulty from the ingredient count."""
        for limit, label in DIFFICULTY_BY_COUNT:
            if len(ingredients) <= limit:
                return label
        return "advanced"

    def primary_ingredient(self, ingredients: Sequence[str]) -> str:
        """First high-protein ingredient, else the first starchy one, else the first."""
        for threshold_field, threshold in (("protein", HIGH_PROTEIN_PER_100G), ("carbs", 20)):
            for ingredient in ingredients:
                profile = self.data.nutrition.get(ingredient)
                if profile is not None and getattr(profile, threshold_field) > threshold:
                    return ingredient
        return ingredients[0]

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    def synthesize(self, context: RecipeContext) -> SynthesisResult:
        """
        Build a recipe from a context.

        Args:
            context: Ingredient keys, exclusions, signals and preferences

        Returns:
            Recipe, or EmptyResult when no ingredient survives dish
            expansion, exclusions and dietary filtering

        Example:
            result = synthesizer.synthesize(RecipeContext(ingredients=["butter_chicken"]))
            if result.status == "ok":
                print(result.title, result.health.score)
        """
        effective = self.resolve_context(context)
        resolved = self.resolve_ingredients(context, effective.dietary)
        ingredients = resolved.ingredients

        logger.info(
            f"Synthesizing recipe from {len(context.ingredients)} keys "
            f"(goal={effective.goal}, location={effective.location}, dietary={effective.dietary})"
        )

        if not ingredients:
            reason = "No ingredients left after exclusions"
            if effective.dietary and effective.dietary != "non-veg":
                reason += f" and the {effective.dietary} filter"
            logger.warning(f"{reason}; removed={resolved.removed}")
            return EmptyResult(reason=reason, removed=resolved.removed)

        report, totals, health = self.analyze(ingredients, effective.goal)
        cost = self.cost.compute_price_breakdown(ingredients, effective.location, effective.servings)
        item_costs = {item.item: item.cost_per_serving for item in cost.items}
        budget_swaps = self.cost.budget_swaps(ingredients, effective.location, effective.goal)

        metadata = self.dish_metadata(resolved.dish_keys)
        cook_method = (metadata and metadata.cook_method) or self.guide.detect_cooking_method(
            ingredients, effective.location
        )
        prep_minutes = (metadata and metadata.prep_minutes) or self.estimate_prep_minutes(ingredients)
        difficulty = (metadata and metadata.difficulty) or self.estimate_difficulty(ingredients)

        goal, location, spice = effective.goal, effective.location, effective.spice
        primary = self.primary_ingredient(ingredients)

        recipe = Recipe(
            title=self.guide.generate_title(ingredients, goal, spice, location, primary),
            description=self.guide.generate_description(
                ingredients, goal, location, totals.model_dump(), resolved.dish_keys
            ),
            ingredients=[
                RecipeIngredient(
                    key=ingredient,
                    name=display_name(ingredient),
                    qty=self.nutrition.estimate_quantity(ingredient),
                    cost_per_serving=item_costs.get(ingredient, 0.0),
                    is_known=ingredient in self.data.nutrition,
                )
                for ingredient in ingredients
            ],
            dish_keys=resolved.dish_keys,
            steps=self.guide.generate_steps(
                ingredients, goal, spice, location, effective.skill, resolved.dish_keys
            ),
            nutrition=totals,
            health=health,
            glycemic_profile=report.glycemic,
            protein_quality=report.protein_quality,
            inflammatory=report.inflammatory,
            dietary_profile=report.dietary,
            allergens=report.allergens,
            micronutrient_flags=report.micronutrient_flags,
            health_tags=report.health_tags,
            cost=cost,
            within_budget=None if context.budget is None else cost.total_per_serving <= context.budget,
            budget_swaps=budget_swaps,
            potential_savings=self.cost.potential_savings(budget_swaps),
            cost_efficiency=self.cost.rank_by_efficiency(ingredients, effective.location, effective.goal),
            suggestions=self.guide.generate_suggestions(ingredients, goal, location),
            mistakes=self.guide.get_common_mistakes(ingredients, location),
            pairings=self.guide.get_pairings(location, goal),
            metadata=metadata,
            cuisine=(metadata and metadata.cuisine) or location,
            cook_method=cook_method,
            estimated_prep_minutes=prep_minutes,
            difficulty=difficulty,
            served_with=list(metadata.served_with) if metadata else [],
            dish_ideas=self.dish_ideas(context, location, effective.dietary, resolved.dish_keys),
            fits_time_limit=self._fits_time(prep_minutes, context),
            goal=goal,
            location=location,
            dietary=effective.dietary,
            meal_type=context.meal_type or context.signals.meal_type,
            spice=spice,
            skill=effective.skill,
            servings=effective.servings,
        )

        logger.info(
            f"Synthesized '{recipe.title}': {len(ingredients)} ingredients, "
            f"score {health.score} ({health.category}), {cost.formatted_total}/serving"
        )
        return recipe

    def dish_ideas(
        self,
        context: RecipeContext,
        location: str,
        dietary: Optional[str],
        exclude: Sequence[str] = ()
    ) -> List[str]:
        """
        Known dishes that fit the cuisine, meal type, diet and time limit.

        The meal type and time limit come from the context, then its
        signals. Dishes already in the recipe are left out.
        """
        meal_type = context.meal_type or context.signals.meal_type
        max_minutes = context.max_prep_time or context.signals.max_prep_time
        diet_filter = None if dietary == "non-veg" else dietary
        matches = self.data.find_dishes(location, meal_type, diet_filter, max_minutes)
        return [key for key in matches if key not in exclude][:MAX_DISH_IDEAS]

    def _fits_time(self, prep_minutes: int, context: RecipeContext) -> Optional[bool]:
        limit = context.max_prep_time or context.signals.max_prep_time
        return None if limit is None else prep_minutes <= limit
