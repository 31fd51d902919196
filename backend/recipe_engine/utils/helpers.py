"""
Common utility helper functions.

This module provides reusable functions for text cleanup, key formatting
and numeric calculations used throughout the engine.
"""

import re
import logging
from typing import Dict, List, Optional, Sequence, TypeVar

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")

# Calories per gram for each macronutrient
CALORIE_FACTORS: Dict[str, float] = {
    "protein": 4.0,
    "carbs": 4.0,
    "fat": 9.0,
}


def clean_text(text: str, keep_commas: bool = False) -> str:
    """
    Lowercase text and reduce it to words made of letters, digits and underscores.

    Apostrophes are dropped so contractions stay one word ("don't" becomes
    "dont"); every other symbol becomes a space.

    Args:
        text: Raw text
        keep_commas: Preserve commas so the caller can split on them

    Returns:
        str: Cleaned text with single spaces

    Example:
        >>> clean_text("Non-Veg, DON'T add onions!", keep_commas=True)
        "non veg, dont add onions"
    """
    if not text:
        return ""

    cleaned = text.lower().replace("'", "").replace("’", "")
    allowed = r"[^a-z0-9_,\s]" if keep_commas else r"[^a-z0-9_\s]"
    cleaned = re.sub(allowed, " ", cleaned)
    cleaned = re.sub(r"[ \t\r\n]+", " ", cleaned)
    if keep_commas:
        cleaned = re.sub(r"\s*,\s*", ", ", cleaned)
    return cleaned.strip(" ,") if keep_commas else cleaned.strip()


def to_key(phrase: str) -> str:
    """Convert a phrase to an underscore-joined ingredient key."""
    return "_".join(phrase.split())


def to_phrase(key: str) -> str:
    """Convert an ingredient key back to a space-separated phrase."""
    return key.replace("_", " ")


def display_name(key: str) -> str:
    """
    Format an ingredient key for display.

    Example:
        >>> display_name("basmati_rice")
        "Basmati rice"
    """
    if not key:
        return ""
    phrase = to_phrase(key)
    return phrase[0].upper() + phrase[1:]


def dedupe(items: Sequence[T]) -> List[T]:
    """Remove duplicates while keeping the first occurrence of each item."""
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def pick(pool: Sequence[T], seed: int) -> T:
    """Deterministically choose an element of ``pool`` from an integer seed."""
    return pool[abs(seed) % len(pool)]


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is zero.

    Example:
        >>> safe_divide(10, 2)
        5.0
        >>> safe_divide(10, 0)
        0.0
    """
    if denominator == 0:
        return default
    return numerator / denominator


def macro_calories(protein: float, carbs: float, fat: float) -> float:
    """Total calories contributed by protein, carbs and fat."""
    return (
        protein * CALORIE_FACTORS["protein"]
        + carbs * CALORIE_FACTORS["carbs"]
        + fat * CALORIE_FACTORS["fat"]
    )


def calculate_macro_ratios(protein: float, carbs: float, fat: float) -> Dict[str, float]:
    """
    Share of macro calories supplied by each macronutrient.

    Args:
        protein: Protein grams
        carbs: Carbohydrate grams
        fat: Fat grams

    Returns:
        Dict: {"protein": ratio, "carbs": ratio, "fat": ratio}, each 0-1.
        All ratios are zero when there are no macro calories.
    """
    total = macro_calories(protein, carbs, fat)
    return {
        "protein": safe_divide(protein * CALORIE_FACTORS["protein"], total),
        "carbs": safe_divide(carbs * CALORIE_FACTORS["carbs"], total),
        "fat": safe_divide(fat * CALORIE_FACTORS["fat"], total),
    }


def step_value(value: float, steps: Sequence, floor: float, compare: str = "gt") -> float:
    """
    Evaluate a step function given as (threshold, points) pairs.

    Steps are checked in order and the first matching threshold wins;
    ``floor`` is returned when none match.

    Args:
        value: Input to classify
        steps: Sequence of (threshold, points)
        floor: Result when no threshold matches
        compare: "gt" (value > threshold), "lt" (value < threshold) or
            "le" (value <= threshold)
    """
    for threshold, points in steps:
        if compare == "gt" and value > threshold:
            return points
        if compare == "lt" and value < threshold:
            return points
        if compare == "le" and value <= threshold:
            return points
    return floor


def round_values(values: Dict[str, float], places: int = 2) -> Dict[str, float]:
    """Round every numeric value in a flat dictionary."""
    return {key: round(value, places) for key, value in values.items()}


def format_nutrition_value(value: float, unit: str) -> str:
    """
    Format nutrition value for display.

    Args:
        value: Numeric nutrition value
        unit: Unit of measurement (g, mg, mcg, etc.)

    Returns:
        str: Formatted string (e.g., "25.5g", "450mg")
    """
    if value == 0:
        return f"0{unit}"

    # Round to appropriate decimal places
    if value >= 100:
        formatted_value = f"{value:.0f}"
    elif value >= 10:
        formatted_value = f"{value:.1f}"
    else:
        formatted_value = f"{value:.2f}"

    # Remove trailing zeros
    formatted_value = formatted_value.rstrip('0').rstrip('.')

    return f"{formatted_value}{unit}"


def format_cost(amount: float, symbol: str) -> str:
    """Format a cost with its currency symbol, rounded to whole units."""
    return f"{symbol}{round(amount)}"


def base_location(location: Optional[str]) -> Optional[str]:
    """
    Strip a regional suffix from a location tag.

    Example:
        >>> base_location("India-South")
        "India"
    """
    if not location:
        return location
    return location.split("-", 1)[0]
