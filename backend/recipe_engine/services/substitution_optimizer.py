"""
Greedy substitution optimizer.

This module improves a recipe by swapping ingredients for cheaper or
healthier alternatives from the substitution table, in one greedy sweep
over the original ingredient list.

For each original ingredient, in order, the first acceptable candidate
wins and the ingredient is never revisited. A trial is acceptable when it
stays under the cost ceiling (if one is set) and either scores at least
as well as the current best or, with a ceiling set, is strictly cheaper.
The sweep is deterministic for a given input order but does not promise
a globally optimal combination.
"""

import logging
from typing import List, Optional, Sequence

from recipe_engine.models.recipe import (
    EmptyResult,
    OptimizationChange,
    RecipeContext,
    SynthesisResult,
)
from recipe_engine.services.recipe_synthesizer import RecipeSynthesizer
from recipe_engine.utils.constants import OPTIMIZER_WEIGHTS
from recipe_engine.utils.helpers import safe_divide

# Configure logging
logger = logging.getLogger(__name__)


class SubstitutionOptimizer:
    """
    Single-pass greedy ingredient substitution.

    Attributes:
        synthesizer: Recipe synthesizer used to score trials and build the result
    """

    def __init__(self, synthesizer: RecipeSynthesizer):
        self.synthesizer = synthesizer
        self.data = synthesizer.data
        logger.info(
            f"SubstitutionOptimizer initialized with {len(self.data.substitutions)} "
            f"substitution entries"
        )

    def op_score(self, ingredients: Sequence[str], goal: str) -> float:
        """
        Optimization objective for an ingredient list.

        The health score plus a goal-weighted linear term on protein grams
        and calories of the goal-adjusted totals:

            score + protein_weight * protein + calorie_weight * calories

        Args:
            ingredients: Ingredient keys
            goal: Effective goal

        Returns:
            float: Objective value, higher is better
        """
        _, totals, health = self.synthesizer.analyze(ingredients, goal)
        protein_weight, calorie_weight = OPTIMIZER_WEIGHTS.get(goal, OPTIMIZER_WEIGHTS["balanced"])
        return health.score + protein_weight * totals.protein + calorie_weight * totals.calories

    def optimize(
        self,
        context: RecipeContext,
        max_cost_per_serving: Optional[float] = None
    ) -> SynthesisResult:
        """
        Optimize a recipe context by greedy substitution.

        Algorithm:
        1. Resolve the context to its final ingredient list
        2. For each original ingredient, try its candidates in table order,
           skipping candidates already present, excluded or outside the
           dietary filter
        3. Reject a trial over the ceiling; accept it if it scores at least
           as well, or if a ceiling is set and it is strictly cheaper
        4. Re-synthesize the final list and attach the change log and the
           before/after cost and score

        Args:
            context: Recipe context
            max_cost_per_serving: Optional per-serving cost ceiling

        Returns:
            Recipe annotated with the optimization, or EmptyResult when the
            context resolves to no ingredients
        """
        effective = self.synthesizer.resolve_context(context)
        resolved = self.synthesizer.resolve_ingredients(context, effective.dietary)
        original = resolved.ingredients

        if not original:
            logger.warning("Nothing to optimize: no ingredients after filtering")
            return self.synthesizer.synthesize(context)

        goal, location = effective.goal, effective.location
        excluded = set(context.excluded)
        cost_of = self.synthesizer.cost.raw_cost

        logger.info(
            f"Optimizing {len(original)} ingredients (goal={goal}, "
            f"ceiling={max_cost_per_serving})"
        )

        best: List[str] = list(original)
        best_score = self.op_score(best, goal)
        best_cost = cost_of(best, location)
        changes: List[OptimizationChange] = []

        for ingredient in original:
            entry = self.data.substitutions.get(ingredient)
            if entry is None:
                continue

            position = best.index(ingredient)
            for candidate in entry.swaps:
                if candidate in best or candidate in excluded:
                    continue
                if not self.synthesizer.passes_dietary(candidate, effective.dietary):
                    continue

                trial = best[:position] + [candidate] + best[position + 1:]
                trial_cost = cost_of(trial, location)
                if max_cost_per_serving is not None and trial_cost > max_cost_per_serving:
                    logger.debug(f"Rejected {ingredient} -> {candidate}: {trial_cost} over ceiling")
                    continue

                trial_score = self.op_score(trial, goal)
                cheaper = max_cost_per_serving is not None and trial_cost < best_cost
                if trial_score >= best_score or cheaper:
                    logger.debug(
                        f"Accepted {ingredient} -> {candidate} "
                        f"(score {best_score:.1f} -> {trial_score:.1f}, cost {best_cost} -> {trial_cost})"
                    )
                    best, best_score, best_cost = trial, trial_score, trial_cost
                    changes.append(OptimizationChange(
                        original=ingredient,
                        swapped_to=candidate,
                        reason=entry.note or f"Swap {ingredient} for {candidate}",
                        saving_pct=round(entry.saving * 100),
                    ))
                    break

        result = self.synthesizer.synthesize(
            context.model_copy(update={"ingredients": best})
        )
        if isinstance(result, EmptyResult):
            return result

        _, _, health_before = self.synthesizer.analyze(original, goal)
        cost_before = cost_of(original, location)
        cost_after = cost_of(best, location)

        logger.info(
            f"Optimization made {len(changes)} change(s): cost {cost_before} -> {cost_after}, "
            f"score {health_before.score} -> {result.health.score}"
        )

        return result.model_copy(update={
            "is_optimized": True,
            "optimization_changes": changes,
            "cost_before": cost_before,
            "cost_after": cost_after,
            "cost_saving_pct": round(safe_divide(cost_before - cost_after, cost_before) * 100, 1),
            "score_before": health_before.score,
            "score_after": result.health.score,
        })
