"""
Rule-based health scoring engine.

This module scores a meal from its macro totals plus a few optional
extras (inflammatory average, glycemic load, fibre, iron, calcium). Every
rule is an explicit threshold or step function, so a score can always be
explained from its breakdown.

Total possible score: 100 points
- Macro balance: 0-35 points (closeness to a 30/40/30 P/C/F split)
- Protein bonus: 0-20 points
- Fat modifier: 0-15 points
- Calorie density: 0-10 points
- Inflammatory bonus: 0-10 points
- Glycemic modifier: -5 to 0 points (penalty only)
- Micronutrient bonus: 0-5 points

The scorer is pure: identical inputs always produce an identical score,
breakdown and advice.
"""

import logging
from typing import Dict, List, Optional

from recipe_engine.models.health_score import HealthExtras, HealthScore
from recipe_engine.utils.constants import (
    CALORIE_DENSITY_FLOOR,
    CALORIE_DENSITY_STEPS,
    FAT_MODIFIER_FLOOR,
    FAT_MODIFIER_STEPS,
    GLYCEMIC_PENALTY_STEPS,
    HEALTH_CATEGORIES,
    INFLAMMATORY_BONUS_STEPS,
    MACRO_BALANCE_MAX,
    MACRO_BALANCE_PENALTIES,
    MACRO_TARGET_RATIOS,
    MICRONUTRIENT_BONUS_MAX,
    NEUTRAL_BREAKDOWN,
    NEUTRAL_SCORE,
    PROTEIN_BONUS_FLOOR,
    PROTEIN_BONUS_STEPS,
)
from recipe_engine.utils.helpers import calculate_macro_ratios, macro_calories, round_values, step_value

# Configure logging
logger = logging.getLogger(__name__)


class HealthScorer:
    """
    Rule-based health scoring engine for meals.

    Attributes:
        max_advice: Maximum number of advice strings returned per score
    """

    def __init__(self, max_advice: int = 4):
        """Initialize the health scorer."""
        self.max_advice = max_advice
        logger.info(f"HealthScorer initialized (max_advice={self.max_advice})")

    def score(
        self,
        calories: float,
        protein: float,
        carbs: float,
        fat: float,
        goal: str = "balanced",
        extras: Optional[HealthExtras] = None
    ) -> HealthScore:
        """
        Calculate the health score for a meal.

        Algorithm:
        1. If protein, carbs and fat carry no calories, return the fixed
           neutral score (50) with a zeroed breakdown
        2. Compute the share of macro calories from each macro
        3. Score each component independently within its own bounds
        4. Sum, clamp to 0-100 and assign the category
        5. Collect advice in priority order, actionable tips first

        Args:
            calories: Total calories
            protein: Protein in grams
            carbs: Carbohydrates in grams
            fat: Fat in grams
            goal: balanced / weight_loss / muscle_gain
            extras: Optional inflammatory, glycemic and micronutrient inputs;
                missing values count as zero

        Returns:
            HealthScore: score, category, breakdown, advice and macro ratios

        Example:
            scorer = HealthScorer()
            result = scorer.score(520, 38, 55, 14, "muscle_gain")
            print(f"Score: {result.score} ({result.category})")
        """
        extras = extras or HealthExtras()
        goal = goal or "balanced"

        if macro_calories(protein, carbs, fat) == 0:
            logger.debug("No macro calories, returning neutral score")
            return HealthScore(
                score=NEUTRAL_SCORE,
                category=self.assign_category(NEUTRAL_SCORE),
                breakdown=dict(NEUTRAL_BREAKDOWN),
                advice=[],
                macro_ratios={"protein": 0.0, "carbs": 0.0, "fat": 0.0},
            )

        ratios = calculate_macro_ratios(protein, carbs, fat)

        breakdown = {
            "macro_balance": self.score_macro_balance(ratios),
            "protein_bonus": self.score_protein(protein, goal),
            "fat_modifier": step_value(ratios["fat"], FAT_MODIFIER_STEPS, FAT_MODIFIER_FLOOR, compare="lt"),
            "calorie_density": self.score_calorie_density(calories, goal),
            "inflammatory_bonus": step_value(extras.inflam or 0, INFLAMMATORY_BONUS_STEPS, 0.0, compare="le"),
            "glycemic_modifier": step_value(extras.total_gl or 0, GLYCEMIC_PENALTY_STEPS, 0.0),
            "micronutrient_bonus": self.score_micronutrients(extras),
        }

        total = max(0.0, min(100.0, sum(breakdown.values())))
        total = round(total, 2)
        category = self.assign_category(total)

        advice = self.generate_advice(protein, calories, goal, ratios, breakdown, extras)

        logger.debug(f"Health score: {total} ({category}), breakdown={breakdown}")

        return HealthScore(
            score=total,
            category=category,
            breakdown=round_values(breakdown),
            advice=advice,
            macro_ratios=round_values(ratios, 3),
        )

    def score_macro_balance(self, ratios: Dict[str, float]) -> float:
        """
        Reward closeness to the 30/40/30 protein/carb/fat calorie split.

        35 points minus a weighted distance from the target for each
        macro, floored at zero.
        """
        penalty = sum(
            MACRO_BALANCE_PENALTIES[macro] * abs(ratios[macro] - target)
            for macro, target in MACRO_TARGET_RATIOS.items()
        )
        return max(0.0, MACRO_BALANCE_MAX - penalty)

    def score_protein(self, protein: float, goal: str) -> float:
        """Goal-dependent step bonus on absolute protein grams."""
        steps = PROTEIN_BONUS_STEPS.get(goal, PROTEIN_BONUS_STEPS["default"])
        return step_value(protein, steps, PROTEIN_BONUS_FLOOR)

    def score_calorie_density(self, calories: float, goal: str) -> float:
        """Goal-dependent step bonus; weight loss uses lower calorie bounds."""
        steps = CALORIE_DENSITY_STEPS.get(goal, CALORIE_DENSITY_STEPS["default"])
        return step_value(calories, steps, CALORIE_DENSITY_FLOOR, compare="lt")

    def score_micronutrients(self, extras: HealthExtras) -> float:
        """
        Small bonus for fibre, iron and calcium.

        Scoring rules:
        - Fibre >5g: +2 points
        - Iron >3mg: +1 point
        - Calcium >200mg: +2 points
        - Capped at 5 points
        """
        bonus = 0.0
        if (extras.fibre or 0) > 5:
            bonus += 2
        if (extras.iron or 0) > 3:
            bonus += 1
        if (extras.calcium or 0) > 200:
            bonus += 2
        return min(bonus, MICRONUTRIENT_BONUS_MAX)

    def assign_category(self, score: float) -> str:
        """
        Convert a numeric score to its category label.

        Thresholds:
        - 85-100: "Excellent"
        - 70-84: "Good"
        - 50-69: "Balanced"
        - 0-49: "Needs Improvement"
        """
        for threshold, label in HEALTH_CATEGORIES:
            if score >= threshold:
                return label
        return HEALTH_CATEGORIES[-1][1]

    def generate_advice(
        self,
        protein: float,
        calories: float,
        goal: str,
        ratios: Dict[str, float],
        breakdown: Dict[str, float],
        extras: HealthExtras
    ) -> List[str]:
        """
        Build natural-language advice in a fixed priority order.

        Every applicable rule is evaluated, then the first ``max_advice``
        are kept. Corrective tips precede positive reinforcement. Tips
        that depend on an extra are only given when it was supplied.
        """
        advice = []

        if ratios["fat"] > 0.40:
            advice.append(
                f"Fat supplies {ratios['fat'] * 100:.0f}% of calories. "
                "Cut back on oil, butter or cream, or bulk up with vegetables."
            )

        protein_floor = 30 if goal == "muscle_gain" else 12
        if protein < protein_floor:
            advice.append(
                f"Only {protein:.0f}g protein. Add a lean source such as eggs, "
                "legumes, paneer or chicken."
            )

        if ratios["carbs"] > 0.60:
            advice.append(
                "Carbohydrates dominate this plate. Swap part of the starch "
                "for protein or vegetables."
            )

        if extras.total_gl is not None and extras.total_gl > 20:
            advice.append(
                "High glycemic load. Pair with fibre or protein, or use a "
                "whole-grain base to soften the blood sugar spike."
            )

        if goal == "weight_loss" and calories > 600:
            advice.append(
                f"At {calories:.0f} kcal this is heavy for a deficit. "
                "Trim the portion of the calorie-dense ingredients."
            )

        if extras.fibre is not None and extras.fibre < 3:
            advice.append("Low in fibre. Add greens, legumes or whole grains.")

        if extras.inflam is not None and extras.inflam <= -2:
            advice.append("Strongly anti-inflammatory ingredient mix.")

        if breakdown["macro_balance"] >= 28:
            advice.append("Macro split is close to the ideal 30/40/30 balance.")

        if breakdown["protein_bonus"] >= 20:
            advice.append("Excellent protein content for your goal.")

        if extras.fibre is not None and extras.fibre > 5:
            advice.append("Good fibre content supports digestion and satiety.")

        return advice[:self.max_advice]
