"""
Centralized constants for the recipe engine.

This module holds the fixed thresholds, weights, and word pools used by
the services. Reference tables that describe ingredients, dishes, and
prices live in the JSON datasets under ``recipe_engine/data``; only
algorithm parameters belong here.

Categories:
- Goals, spice levels, skill levels and dietary filters
- Goal-based macro adjustments and optimizer weights
- Health scoring thresholds and category labels
- Micronutrient warning thresholds
- Cost tiers and bulk-cooking scale factors
- Title and description word pools
- Cooking-method indicator sets
"""

from typing import Dict, List, Tuple

# ==============================================================================
# CONTEXT VOCABULARY
# ==============================================================================

GOALS: List[str] = ["balanced", "weight_loss", "muscle_gain"]

SPICE_LEVELS: List[str] = ["mild", "medium", "hot"]

SKILL_LEVELS: List[str] = ["beginner", "intermediate", "advanced"]

DIETARY_FILTERS: List[str] = ["vegan", "vegetarian", "gluten-free", "non-veg"]

# Dietary class ordering used when classifying a whole meal
DIETARY_RANK: Dict[str, int] = {
    "vegan": 0,
    "vegetarian": 1,
    "non-veg": 2,
}

# Grain-based items dropped by the gluten-free filter
GLUTEN_DENYLIST: List[str] = [
    "flour", "whole_wheat_flour", "semolina", "pasta", "noodles",
    "ramen_noodles", "bread", "buns", "pita_bread", "croutons",
    "pizza_dough",
]


# ==============================================================================
# GOAL ADJUSTMENTS
# ==============================================================================

# Multipliers applied to nutrition totals after aggregation
GOAL_MACRO_ADJUSTMENTS: Dict[str, Dict[str, float]] = {
    "weight_loss": {"calories": 0.85, "fat": 0.75, "protein": 1.10},
    "muscle_gain": {"protein": 1.25, "calories": 1.15},
    "balanced": {},
}

# Weights for the optimizer objective: (protein per gram, calories per kcal)
OPTIMIZER_WEIGHTS: Dict[str, Tuple[float, float]] = {
    "muscle_gain": (3.0, 0.0),
    "weight_loss": (1.5, -0.05),
    "balanced": (1.0, -0.01),
}


# ==============================================================================
# HEALTH SCORING
# ==============================================================================

# Ideal share of macro calories (protein, carbs, fat)
MACRO_TARGET_RATIOS: Dict[str, float] = {
    "protein": 0.30,
    "carbs": 0.40,
    "fat": 0.30,
}

# Penalty per unit of distance from the target ratio
MACRO_BALANCE_PENALTIES: Dict[str, float] = {
    "protein": 80.0,
    "carbs": 70.0,
    "fat": 70.0,
}

MACRO_BALANCE_MAX: float = 35.0

# (threshold grams, points), checked top-down with a strict ">"
PROTEIN_BONUS_STEPS: Dict[str, List[Tuple[float, float]]] = {
    "muscle_gain": [(40, 20), (30, 15), (20, 10)],
    "default": [(30, 20), (20, 15), (12, 10)],
}
PROTEIN_BONUS_FLOOR: float = 5.0

# (fat ratio upper bound, points), checked top-down with a strict "<"
FAT_MODIFIER_STEPS: List[Tuple[float, float]] = [(0.25, 15), (0.35, 12), (0.45, 7)]
FAT_MODIFIER_FLOOR: float = 2.0

# (calorie upper bound, points), checked top-down with a strict "<"
CALORIE_DENSITY_STEPS: Dict[str, List[Tuple[float, float]]] = {
    "weight_loss": [(400, 10), (550, 7), (700, 4)],
    "default": [(500, 10), (750, 7), (1000, 4)],
}
CALORIE_DENSITY_FLOOR: float = 1.0

# (inflammatory average upper bound, points), checked top-down with "<="
INFLAMMATORY_BONUS_STEPS: List[Tuple[float, float]] = [(-4, 10), (-2, 7), (0, 4), (2, 1)]

# (glycemic load lower bound, penalty), checked top-down with a strict ">"
GLYCEMIC_PENALTY_STEPS: List[Tuple[float, float]] = [(30, -5), (20, -3), (10, -1)]

MICRONUTRIENT_BONUS_MAX: float = 5.0

# Fixed breakdown returned when a meal has no macro calories
NEUTRAL_SCORE: float = 50.0
NEUTRAL_BREAKDOWN: Dict[str, float] = {
    "macro_balance": 0.0,
    "protein_bonus": 0.0,
    "fat_modifier": 0.0,
    "calorie_density": 0.0,
    "inflammatory_bonus": 0.0,
    "glycemic_modifier": 0.0,
    "micronutrient_bonus": 0.0,
}

HEALTH_CATEGORIES: List[Tuple[float, str]] = [
    (85, "Excellent"),
    (70, "Good"),
    (50, "Balanced"),
    (0, "Needs Improvement"),
]


# ==============================================================================
# NUTRITION PROFILES
# ==============================================================================

# Fields summed into meal totals, each scaled by use quantity / 100
TOTAL_FIELDS: List[str] = [
    "calories", "protein", "carbs", "fat", "fibre",
    "omega3", "omega6", "sodium", "potassium", "magnesium", "zinc",
    "iron", "calcium", "vitamin_c", "vitamin_a", "vitamin_b12",
    "vitamin_d", "folate",
]

GLYCEMIC_INDEX_BANDS: Dict[str, float] = {"low": 55, "medium": 70}
GLYCEMIC_LOAD_BANDS: Dict[str, float] = {"low": 10, "medium": 20}

PROTEIN_SOURCE_MIN_GRAMS: float = 2.0
COMPLETE_PROTEIN_THRESHOLD: float = 0.85

PROTEIN_QUALITY_TIERS: List[Tuple[float, str]] = [
    (0.90, "excellent"),
    (0.70, "good"),
    (0.50, "moderate"),
]

# (average upper bound, label), checked top-down with "<="
INFLAMMATORY_BANDS: List[Tuple[float, str]] = [
    (-4, "Strongly anti-inflammatory"),
    (-2, "Anti-inflammatory"),
    (0, "Mildly anti-inflammatory"),
    (3, "Mildly pro-inflammatory"),
]

# nutrient -> (total field, minimum, unit, daily reference, concern)
MICRONUTRIENT_THRESHOLDS: Dict[str, Tuple[str, float, str, str, str]] = {
    "Vitamin B12": (
        "vitamin_b12", 0.5, "mcg", "2.4 mcg/day",
        "Low B12. Add dairy, eggs, fish or a fortified food.",
    ),
    "Vitamin D": (
        "vitamin_d", 50, "IU", "600 IU/day",
        "Low vitamin D. Add fish, egg or UV-exposed mushroom.",
    ),
    "Iron": (
        "iron", 3, "mg", "8–18 mg/day",
        "Low iron. Add spinach, legumes or meat.",
    ),
    "Calcium": (
        "calcium", 200, "mg", "1000 mg/day",
        "Low calcium. Add dairy, tofu, almonds or sesame.",
    ),
    "Folate": (
        "folate", 50, "mcg", "400 mcg/day",
        "Low folate. Add spinach, legumes or fortified grain.",
    ),
    "Omega-3": (
        "omega3", 0.5, "g", "1.1–1.6 g/day",
        "Low omega-3. Add fish, walnuts or chia seeds.",
    ),
}

MAX_HEALTH_TAGS: int = 6

# Tags carrying usage notes rather than descriptions
HEALTH_TAG_EXCLUDE_MARKERS: List[str] = ["note:", "use-", "add-", "check-"]


# ==============================================================================
# QUANTITY ESTIMATION
# ==============================================================================

FAT_DENSE_GRAMS: float = 10.0
HIGH_PROTEIN_GRAMS: float = 150.0
HIGH_CARB_GRAMS: float = 120.0
DEFAULT_USE_GRAMS: float = 100.0


# ==============================================================================
# COST
# ==============================================================================

# Per-serving base-currency thresholds, checked top-down with a strict "<"
BUDGET_TIER_THRESHOLDS: List[Tuple[float, str]] = [
    (60, "budget"),
    (150, "moderate"),
    (300, "premium"),
]
BUDGET_TIER_CEILING: str = "luxury"

VOLATILE_LEVELS: List[str] = ["high", "extreme"]

# Share of the single-serving cost added per extra serving
BULK_SCALE_CATEGORY: Dict[str, float] = {
    "spice": 0.30,
    "luxury_spice": 0.40,
    "premium_spice": 0.35,
    "fresh_herb": 0.50,
    "cooking_fat": 0.45,
    "premium_oil": 0.45,
    "packaged": 0.70,
    "staple_grain": 0.80,
    "premium_grain": 0.80,
    "local_produce": 0.85,
    "meat": 0.90,
    "seafood": 0.88,
    "dairy_eggs": 0.82,
    "specialty_dairy": 0.85,
    "nuts_seeds": 0.75,
    "exotic_import": 0.80,
    "specialty_condiment": 0.40,
}
DEFAULT_BULK_SCALE: float = 0.80

# Value score weights per 10 currency units: (protein, fibre, calories)
EFFICIENCY_WEIGHTS: Dict[str, Tuple[float, float, float]] = {
    "muscle_gain": (3.0, 0.0, 0.0),
    "weight_loss": (2.0, 1.5, -0.01),
    "balanced": (1.5, 0.5, -0.01),
}

# Value score floors, checked top-down with a strict ">"
EFFICIENCY_VERDICTS: List[Tuple[float, str]] = [
    (8, "Excellent value for your goal"),
    (4, "Good value"),
    (1, "Moderate value"),
]
EFFICIENCY_VERDICT_FLOOR: str = "Low value, consider swapping"

# A swap keeps the protein for muscle gain if the candidate has this share of it
SWAP_PROTEIN_KEEP_RATIO: float = 0.9


# ==============================================================================
# RECIPE SYNTHESIS
# ==============================================================================

BASE_PREP_MINUTES: int = 15
PREP_MINUTES_PER_INGREDIENT: int = 4
HIGH_PROTEIN_PREP_MINUTES: int = 5
HIGH_PROTEIN_PER_100G: float = 15.0
MAX_DISH_IDEAS: int = 5

DIFFICULTY_BY_COUNT: List[Tuple[int, str]] = [
    (4, "beginner"),
    (7, "intermediate"),
]

GOAL_WORDS: Dict[str, List[str]] = {
    "muscle_gain": ["Power", "Anabolic", "Strength", "Protein-Packed", "Bulk"],
    "weight_loss": ["Lean", "Light", "Clean", "Stripped", "Slimline"],
    "balanced": ["Balanced", "Classic", "Everyday", "Wholesome", "Hearty"],
}

SPICE_WORDS: Dict[str, List[str]] = {
    "hot": ["Fiery", "Blazing", "Inferno", "Scorched"],
    "medium": ["Spiced", "Robust", "Warm"],
    "mild": ["Delicate", "Gentle", "Subtle"],
}

SPICE_SEED_BONUS: Dict[str, int] = {"hot": 3, "mild": 1}

CUISINE_SUFFIXES: Dict[str, List[str]] = {
    "India": ["Masala", "Bhuna", "Tadka", "Curry"],
    "Italy": ["Rustica", "della Nonna", "al Forno", "Primavera"],
    "Mexico": ["Adobo", "Criollo", "Asado", "de la Casa"],
    "USA": ["Smokehouse", "Skillet", "Griddle", "Backyard"],
    "China": ["Wok-Fired", "Imperial", "Szechuan", "Canton"],
    "Japan": ["Teishoku", "Umami", "Izakaya", "Bento"],
    "Thailand": ["Pad", "Gaeng", "Tom", "Street-Style"],
}
DEFAULT_CUISINE_SUFFIXES: List[str] = ["Style"]

GOAL_CONTEXT: Dict[str, str] = {
    "muscle_gain": (
        "optimised for hypertrophy: protein-dense, calorie-sufficient and "
        "built to support post-workout recovery"
    ),
    "weight_loss": (
        "engineered for a caloric deficit, high in fibre and lean protein "
        "to keep you full on fewer calories"
    ),
    "balanced": (
        "calibrated for steady-state nutrition with balanced macros to fuel "
        "daily activity"
    ),
}


# ==============================================================================
# COOKING METHODS
# ==============================================================================

STIR_FRY_INDICATORS: List[str] = [
    "soy_sauce", "sesame_oil", "noodles", "rice_noodles", "ramen_noodles",
    "oyster_sauce", "bamboo_shoots", "spring_onion",
]
BRAISE_INDICATORS: List[str] = ["lamb", "beef", "pork", "turkey"]
BAKE_INDICATORS: List[str] = ["flour", "whole_wheat_flour", "baking_powder"]
NO_COOK_INDICATORS: List[str] = ["avocado", "cucumber", "lettuce", "blueberries"]
BIRYANI_INDICATORS: List[str] = ["saffron", "ghee", "curd"]
BIRYANI_GRAINS: List[str] = ["rice", "brown_rice", "basmati_rice"]

SKILL_TASTE: Dict[str, str] = {
    "beginner": "Taste before serving and add a pinch of salt if it seems flat.",
    "intermediate": "Season in layers. Taste at every stage and adjust salt, acid and heat.",
    "advanced": (
        "Balance salt, acid, sweetness, umami and heat. A flat dish usually "
        "needs acid before it needs salt."
    ),
}
