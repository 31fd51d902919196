"""
Nutrition aggregation.

This module sums per-ingredient nutrition into meal totals, scaling each
ingredient by an estimated use quantity, and derives the glycemic,
protein-quality, inflammatory, allergen, dietary and micronutrient
profiles of the meal.

Unknown ingredients contribute nothing and never raise: incomplete
reference data is a data-quality concern, not an algorithm failure.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

from recipe_engine.models.ingredient import NutritionProfile
from recipe_engine.models.nutrition import (
    DietaryProfile,
    GlycemicProfile,
    InflammatoryProfile,
    MicronutrientFlag,
    NutritionReport,
    NutritionTotals,
    ProteinQuality,
)
from recipe_engine.services.reference_data import ReferenceData
from recipe_engine.utils.constants import (
    COMPLETE_PROTEIN_THRESHOLD,
    DEFAULT_USE_GRAMS,
    DIETARY_RANK,
    FAT_DENSE_GRAMS,
    GLYCEMIC_INDEX_BANDS,
    GLYCEMIC_LOAD_BANDS,
    HEALTH_TAG_EXCLUDE_MARKERS,
    HIGH_CARB_GRAMS,
    HIGH_PROTEIN_GRAMS,
    INFLAMMATORY_BANDS,
    MAX_HEALTH_TAGS,
    MICRONUTRIENT_THRESHOLDS,
    PROTEIN_QUALITY_TIERS,
    PROTEIN_SOURCE_MIN_GRAMS,
    TOTAL_FIELDS,
)
from recipe_engine.utils.helpers import format_nutrition_value, to_phrase

# Configure logging
logger = logging.getLogger(__name__)


def _band(value: float, bands: Dict[str, float]) -> str:
    """Classify a value as low / medium / high against two upper bounds."""
    if value < bands["low"]:
        return "low"
    if value < bands["medium"]:
        return "medium"
    return "high"


class NutritionAggregator:
    """
    Meal-level nutrition calculator.

    Attributes:
        data: Reference datasets
        unknown_qty: Grams assumed for ingredients missing from the data
    """

    def __init__(self, data: ReferenceData, unknown_qty: float = 80.0):
        """Initialize the aggregator with its reference data."""
        self.data = data
        self.unknown_qty = unknown_qty
        logger.info(
            f"NutritionAggregator initialized with {len(data.nutrition)} profiles "
            f"(unknown ingredient qty={unknown_qty}g)"
        )

    def profile(self, ingredient: str) -> Optional[NutritionProfile]:
        """Nutrition profile of an ingredient, or None when unknown."""
        return self.data.nutrition.get(ingredient)

    def estimate_quantity(self, ingredient: str) -> float:
        """
        Estimate the grams of an ingredient used in one serving.

        Policy, in priority order:
        1. The ingredient's typical-use override from the reference data
        2. Macro-density heuristic: fat >50g/100g -> 10g (oils, nuts);
           protein >15g/100g -> 150g; carbs >40g/100g -> 120g
           (grains, legumes); otherwise 100g
        3. Unknown ingredients -> the configured fallback (80g)

        Args:
            ingredient: Ingredient key

        Returns:
            float: Grams per serving

        Example:
            >>> aggregator.estimate_quantity("olive_oil")
            10.0
        """
        profile = self.profile(ingredient)
        if profile is None:
            return self.unknown_qty
        if profile.typical_use_qty:
            return float(profile.typical_use_qty)
        if profile.fat > 50:
            return FAT_DENSE_GRAMS
        if profile.protein > 15:
            return HIGH_PROTEIN_GRAMS
        if profile.carbs > 40:
            return HIGH_CARB_GRAMS
        return DEFAULT_USE_GRAMS

    def compute_totals(self, ingredients: Sequence[str]) -> NutritionTotals:
        """
        Sum nutrition across ingredients, scaled by estimated quantity.

        Each numeric field of an ingredient's per-100g profile is
        multiplied by ``qty / 100`` before summing. Unknown ingredients
        contribute zero.

        Args:
            ingredients: Ingredient keys (already deduplicated)

        Returns:
            NutritionTotals: Plain sums, rounded to 2 decimals
        """
        totals = {name: 0.0 for name in TOTAL_FIELDS}

        for ingredient in ingredients:
            profile = self.profile(ingredient)
            if profile is None:
                logger.debug(f"No nutrition data for '{ingredient}', contributing zero")
                continue

            factor = self.estimate_quantity(ingredient) / 100
            for name in TOTAL_FIELDS:
                totals[name] += getattr(profile, name) * factor

        return NutritionTotals(**{name: round(value, 2) for name, value in totals.items()})

    def glycemic_profile(self, ingredients: Sequence[str]) -> Optional[GlycemicProfile]:
        """
        Glycemic summary over ingredients with a positive glycemic index.

        Averages GI across those ingredients, sums their glycemic loads and
        lists high-GI (>=70) and low-GI (<55) items.

        Returns:
            GlycemicProfile, or None when no ingredient has a GI
        """
        rated = [
            (ingredient, profile)
            for ingredient, profile in self._known(ingredients)
            if profile.glycemic_index > 0
        ]
        if not rated:
            return None

        average_gi = sum(p.glycemic_index for _, p in rated) / len(rated)
        total_load = sum(p.glycemic_load for _, p in rated)

        return GlycemicProfile(
            average_gi=round(average_gi, 1),
            gi_label=_band(average_gi, GLYCEMIC_INDEX_BANDS),
            total_load=round(total_load, 1),
            gl_label=_band(total_load, GLYCEMIC_LOAD_BANDS),
            high_gi_items=[i for i, p in rated if p.glycemic_index >= GLYCEMIC_INDEX_BANDS["medium"]],
            low_gi_items=[i for i, p in rated if p.glycemic_index < GLYCEMIC_INDEX_BANDS["low"]],
        )

    def protein_quality(self, ingredients: Sequence[str]) -> Optional[ProteinQuality]:
        """
        Protein completeness over protein-source ingredients.

        A protein source has more than 2g protein per 100g and a defined
        quality score. Complementary pairing is satisfied when another
        ingredient of the meal is named in a source's "complement with"
        hint (e.g. a legume alongside rice).

        Returns:
            ProteinQuality, or None when the meal has no protein source
        """
        sources = [
            (ingredient, profile)
            for ingredient, profile in self._known(ingredients)
            if profile.protein_quality is not None and profile.protein > PROTEIN_SOURCE_MIN_GRAMS
        ]
        if not sources:
            return None

        average = sum(p.protein_quality for _, p in sources) / len(sources)
        tier = "incomplete"
        for threshold, label in PROTEIN_QUALITY_TIERS:
            if average >= threshold:
                tier = label
                break

        hints = [p.complement_with for _, p in sources if p.complement_with]
        has_complements = any(
            to_phrase(other) in profile.complement_with.lower()
            for source, profile in sources if profile.complement_with
            for other in ingredients if other != source
        )

        limiting = sorted({
            p.limiting_amino_acid for _, p in sources
            if p.limiting_amino_acid and p.limiting_amino_acid != "none"
        })
        is_complete = average >= COMPLETE_PROTEIN_THRESHOLD

        if is_complete:
            note = "Complete protein: all essential amino acids are well covered."
        elif has_complements:
            note = "Complementary proteins are already paired in this meal."
        elif hints:
            note = f"Pair with {hints[0]} to complete the amino acid profile."
        else:
            note = "Add a second protein source to round out the amino acid profile."

        return ProteinQuality(
            average_score=round(average, 2),
            tier=tier,
            is_complete=is_complete,
            sources=[i for i, _ in sources],
            limiting_amino_acids=limiting,
            has_complements=has_complements,
            complement_hint=None if has_complements or not hints else hints[0],
            note=note,
        )

    def inflammatory_profile(self, ingredients: Sequence[str]) -> InflammatoryProfile:
        """
        Average inflammatory index and its band.

        Ingredients without an index are ignored; with no data at all the
        profile is neutral (score 0).
        """
        scores = [
            profile.inflammatory
            for _, profile in self._known(ingredients)
            if profile.inflammatory is not None
        ]
        if not scores:
            return InflammatoryProfile(score=0.0, label="Neutral")

        average = sum(scores) / len(scores)
        label = "Pro-inflammatory"
        for upper, band in INFLAMMATORY_BANDS:
            if average <= upper:
                label = band
                break
        return InflammatoryProfile(score=round(average, 1), label=label)

    def allergens(self, ingredients: Sequence[str]) -> List[str]:
        """Sorted union of allergen tags."""
        return sorted({
            allergen
            for _, profile in self._known(ingredients)
            for allergen in profile.allergens
        })

    def dietary_profile(self, ingredients: Sequence[str]) -> DietaryProfile:
        """
        Dietary class of the meal.

        Non-veg if any ingredient is non-veg, else vegetarian if any is
        vegetarian, else vegan. Ingredients without data count as vegan.
        """
        non_veg = []
        vegetarian = []
        for ingredient, profile in self._known(ingredients):
            if profile.dietary_group == "non-veg":
                non_veg.append(ingredient)
            elif profile.dietary_group == "vegetarian":
                vegetarian.append(ingredient)

        rank = DIETARY_RANK["vegan"]
        if vegetarian:
            rank = DIETARY_RANK["vegetarian"]
        if non_veg:
            rank = DIETARY_RANK["non-veg"]
        classification = next(name for name, value in DIETARY_RANK.items() if value == rank)

        return DietaryProfile(
            classification=classification,
            non_veg_items=non_veg,
            vegetarian_items=vegetarian,
        )

    def micronutrient_flags(self, totals: NutritionTotals) -> List[MicronutrientFlag]:
        """
        Flag nutrients whose meal total falls under a flat floor.

        Args:
            totals: Meal totals (not goal-adjusted)

        Returns:
            List[MicronutrientFlag]: One entry per nutrient under its floor
        """
        flags = []
        for nutrient, (field_name, minimum, unit, reference, concern) in MICRONUTRIENT_THRESHOLDS.items():
            value = getattr(totals, field_name)
            if value < minimum:
                flags.append(MicronutrientFlag(
                    nutrient=nutrient,
                    value=format_nutrition_value(value, unit),
                    concern=concern,
                    daily_reference=reference,
                ))
        return flags

    def health_tags(self, ingredients: Sequence[str], limit: int = MAX_HEALTH_TAGS) -> List[str]:
        """Most frequent descriptive tags; ties keep first-seen order."""
        counts: Counter = Counter()
        for _, profile in self._known(ingredients):
            for tag in profile.tags:
                if not any(marker in tag.lower() for marker in HEALTH_TAG_EXCLUDE_MARKERS):
                    counts[tag] += 1
        # Counter.most_common keeps insertion order for equal counts
        return [tag for tag, _ in counts.most_common(limit)]

    def build_report(self, ingredients: Sequence[str]) -> NutritionReport:
        """
        Totals plus every derived profile for an ingredient list.

        An empty list yields all-zero totals and no profiles.
        """
        if not ingredients:
            return NutritionReport()

        totals = self.compute_totals(ingredients)
        report = NutritionReport(
            totals=totals,
            glycemic=self.glycemic_profile(ingredients),
            protein_quality=self.protein_quality(ingredients),
            inflammatory=self.inflammatory_profile(ingredients),
            dietary=self.dietary_profile(ingredients),
            allergens=self.allergens(ingredients),
            micronutrient_flags=self.micronutrient_flags(totals),
            health_tags=self.health_tags(ingredients),
        )
        logger.debug(
            f"Nutrition report for {len(ingredients)} ingredients: "
            f"{totals.calories} kcal, {totals.protein}g protein"
        )
        return report

    def _known(self, ingredients: Sequence[str]):
        """Yield (key, profile) for ingredients present in the data."""
        for ingredient in ingredients:
            profile = self.profile(ingredient)
            if profile is not None:
                yield ingredient, profile
