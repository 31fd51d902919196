"""
Pydantic models for aggregated nutrition.

This module defines meal-level nutrition totals and the derived profiles
(glycemic, protein quality, inflammatory, dietary, micronutrient) that
the nutrition aggregator computes from an ingredient list.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class NutritionTotals(BaseModel):
    """
    Meal-level nutrient sums.

    Each value is the sum over ingredients of the per-100g value scaled
    by the ingredient's estimated use quantity.
    """
    calories: float = Field(0.0, ge=0, description="Total calories")
    protein: float = Field(0.0, ge=0, description="Protein in grams")
    carbs: float = Field(0.0, ge=0, description="Carbohydrates in grams")
    fat: float = Field(0.0, ge=0, description="Fat in grams")
    fibre: float = Field(0.0, ge=0, description="Fibre in grams")
    omega3: float = Field(0.0, ge=0, description="Omega-3 in grams")
    omega6: float = Field(0.0, ge=0, description="Omega-6 in grams")
    sodium: float = Field(0.0, ge=0, description="Sodium in milligrams")
    potassium: float = Field(0.0, ge=0, description="Potassium in milligrams")
    magnesium: float = Field(0.0, ge=0, description="Magnesium in milligrams")
    zinc: float = Field(0.0, ge=0, description="Zinc in milligrams")
    iron: float = Field(0.0, ge=0, description="Iron in milligrams")
    calcium: float = Field(0.0, ge=0, description="Calcium in milligrams")
    vitamin_c: float = Field(0.0, ge=0, description="Vitamin C in milligrams")
    vitamin_a: float = Field(0.0, ge=0, description="Vitamin A in micrograms")
    vitamin_b12: float = Field(0.0, ge=0, description="Vitamin B12 in micrograms")
    vitamin_d: float = Field(0.0, ge=0, description="Vitamin D in IU")
    folate: float = Field(0.0, ge=0, description="Folate in micrograms")

    model_config = {"frozen": True}


class GlycemicProfile(BaseModel):
    """Glycemic summary over ingredients that have a glycemic index."""
    average_gi: float
    gi_label: str
    total_load: float
    gl_label: str
    high_gi_items: List[str] = Field(default_factory=list)
    low_gi_items: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ProteinQuality(BaseModel):
    """Protein completeness summary over protein-source ingredients."""
    average_score: float = Field(..., ge=0, le=1)
    tier: str
    is_complete: bool
    sources: List[str] = Field(default_factory=list)
    limiting_amino_acids: List[str] = Field(default_factory=list)
    has_complements: bool = False
    complement_hint: Optional[str] = None
    note: str = ""

    model_config = {"frozen": True}


class InflammatoryProfile(BaseModel):
    """Average inflammatory index and its band label."""
    score: float = 0.0
    label: str = "Neutral"

    model_config = {"frozen": True}


class DietaryProfile(BaseModel):
    """Dietary class of the whole meal and the ingredients that decided it."""
    classification: str
    non_veg_items: List[str] = Field(default_factory=list)
    vegetarian_items: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class MicronutrientFlag(BaseModel):
    """Warning for a nutrient whose meal total is below its floor."""
    nutrient: str
    value: str
    concern: str
    daily_reference: str

    model_config = {"frozen": True}


class NutritionReport(BaseModel):
    """
    Totals plus every derived nutrition profile.

    Profiles are None when the ingredient list carries no data for them
    (for example no ingredient has a glycemic index).
    """
    totals: NutritionTotals = Field(default_factory=NutritionTotals)
    glycemic: Optional[GlycemicProfile] = None
    protein_quality: Optional[ProteinQuality] = None
    inflammatory: Optional[InflammatoryProfile] = None
    dietary: Optional[DietaryProfile] = None
    allergens: List[str] = Field(default_factory=list)
    micronutrient_flags: List[MicronutrientFlag] = Field(default_factory=list)
    health_tags: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}
