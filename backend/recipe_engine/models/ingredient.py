"""
Pydantic models for reference dataset rows.

This module defines the immutable per-ingredient, per-dish and
per-substitution records loaded from the JSON reference datasets.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class NutritionProfile(BaseModel):
    """
    Nutrition profile for one ingredient, per 100g.

    Attributes:
        calories, protein, carbs, fat, fibre: Macronutrients per 100g
        glycemic_index: 0-100, zero when the food has no meaningful GI
        glycemic_load: Glycemic load of a typical portion
        protein_quality: PDCAAS-style score 0-1, None if not a protein source
        limiting_amino_acid: Essential amino acid in shortest supply
        complement_with: Free-text hint naming complementary foods
        inflammatory: Heuristic index, negative = anti-inflammatory
        dietary_group: vegan / vegetarian / non-veg
        tags: Descriptive health tags
        allergens: Allergen tags
        typical_use_qty: Realistic single-serving grams, overriding the heuristic
    """
    calories: float = Field(..., ge=0, description="Calories per 100g")
    protein: float = Field(..., ge=0, description="Protein grams per 100g")
    carbs: float = Field(..., ge=0, description="Carbohydrate grams per 100g")
    fat: float = Field(..., ge=0, description="Fat grams per 100g")
    fibre: float = Field(0.0, ge=0, description="Fibre grams per 100g")
    glycemic_index: float = Field(0.0, ge=0, le=100, description="Glycemic index")
    glycemic_load: float = Field(0.0, ge=0, description="Glycemic load")
    protein_quality: Optional[float] = Field(None, ge=0, le=1, description="Protein quality score")
    limiting_amino_acid: Optional[str] = None
    complement_with: Optional[str] = None
    omega3: float = Field(0.0, ge=0)
    omega6: float = Field(0.0, ge=0)
    sodium: float = Field(0.0, ge=0)
    potassium: float = Field(0.0, ge=0)
    magnesium: float = Field(0.0, ge=0)
    zinc: float = Field(0.0, ge=0)
    iron: float = Field(0.0, ge=0)
    calcium: float = Field(0.0, ge=0)
    vitamin_c: float = Field(0.0, ge=0)
    vitamin_a: float = Field(0.0, ge=0)
    vitamin_b12: float = Field(0.0, ge=0)
    vitamin_d: float = Field(0.0, ge=0)
    folate: float = Field(0.0, ge=0)
    satiety: Optional[float] = Field(None, ge=0, description="Satiety index")
    inflammatory: Optional[float] = Field(None, ge=-10, le=10, description="Inflammatory index")
    dietary_group: str = Field("vegan", description="Dietary classification")
    tags: List[str] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    typical_use_qty: Optional[float] = Field(None, gt=0, description="Typical grams per serving")

    @field_validator('dietary_group')
    @classmethod
    def validate_dietary_group(cls, v: str) -> str:
        """Ensure the dietary class is one of the three known classes."""
        valid_groups = ["vegan", "vegetarian", "non-veg"]
        if v not in valid_groups:
            raise ValueError(f'dietary_group must be one of: {", ".join(valid_groups)}')
        return v

    model_config = {"frozen": True}


class CostEntry(BaseModel):
    """
    Price of one ingredient in the base currency.

    Attributes:
        price_per_100: Price per 100 standard units (g or ml)
        unit: Unit label
        category: Price category, selects the location multiplier
        tier: budget / mid / premium / luxury
        waste_factor: Usable fraction after trimming (0-1]
        volatility: stable / moderate / high / extreme
        price_range: Seasonal [min, max] per 100 units
    """
    price_per_100: float = Field(..., ge=0)
    unit: str = "100g"
    category: str = "packaged"
    tier: str = "mid"
    waste_factor: float = Field(1.0, gt=0, le=1)
    volatility: str = "stable"
    price_range: Optional[List[float]] = None

    model_config = {"frozen": True}


class DishMetadata(BaseModel):
    """Descriptive metadata for a known dish."""
    cuisine: Optional[str] = None
    meal_types: List[str] = Field(default_factory=list)
    cook_method: Optional[str] = None
    dietary: List[str] = Field(default_factory=list)
    prep_minutes: Optional[int] = Field(None, gt=0)
    difficulty: Optional[str] = None
    served_with: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class DishExpansion(BaseModel):
    """
    Default composition of a named dish.

    Attributes:
        ingredients: Ordered ingredient keys making up the dish
        metadata: Optional dish metadata; None when the dataset has none
    """
    ingredients: List[str] = Field(..., min_length=1)
    metadata: Optional[DishMetadata] = None

    model_config = {"frozen": True}


class SubstitutionEntry(BaseModel):
    """
    Replacement candidates for one ingredient.

    The relationship is one-directional: listing B as a swap for A says
    nothing about swapping B for A.
    """
    swaps: List[str] = Field(..., min_length=1)
    saving: float = Field(0.0, description="Approximate fractional cost saving")
    note: str = ""

    model_config = {"frozen": True}
