"""
Pydantic models for health scoring.

This module defines the score request extras, the score record with its
component breakdown, and the advice strings produced by the scorer.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional

from recipe_engine.utils.constants import HEALTH_CATEGORIES


class HealthExtras(BaseModel):
    """
    Optional inputs to the health score beyond the macros.

    Missing values count as zero in the score components; advice that
    depends on a value is only given when the value is supplied.
    """
    inflam: Optional[float] = Field(None, description="Average inflammatory index")
    total_gl: Optional[float] = Field(None, ge=0, description="Total glycemic load")
    fibre: Optional[float] = Field(None, ge=0, description="Fibre in grams")
    iron: Optional[float] = Field(None, ge=0, description="Iron in milligrams")
    calcium: Optional[float] = Field(None, ge=0, description="Calcium in milligrams")


class HealthScore(BaseModel):
    """
    Health score model.

    Represents the calculated health score for a meal with a detailed
    breakdown of component scores.

    Attributes:
        score: Overall health score (0-100)
        category: Excellent / Good / Balanced / Needs Improvement
        breakdown: Points awarded per component
        advice: At most a handful of natural-language tips, actionable ones first
        macro_ratios: Share of macro calories from protein, carbs and fat
    """
    score: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Overall health score (0-100)"
    )
    category: str = Field(
        ...,
        description="Health category"
    )
    breakdown: Dict[str, float] = Field(
        default_factory=dict,
        description="Points per score component"
    )
    advice: List[str] = Field(default_factory=list)
    macro_ratios: Dict[str, float] = Field(default_factory=dict)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Ensure category is one of the valid labels."""
        valid_categories = [label for _, label in HEALTH_CATEGORIES]
        if v not in valid_categories:
            raise ValueError(f'Category must be one of: {", ".join(valid_categories)}')
        return v

    @model_validator(mode='after')
    def validate_score_category_consistency(self):
        """Ensure score and category are consistent."""
        for threshold, label in HEALTH_CATEGORIES:
            if self.score >= threshold:
                if self.category != label:
                    raise ValueError(
                        f'Score {self.score} should have category "{label}", got "{self.category}"'
                    )
                break
        return self

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "score": 78.0,
                "category": "Good",
                "breakdown": {
                    "macro_balance": 24.5,
                    "protein_bonus": 20.0,
                    "fat_modifier": 12.0,
                    "calorie_density": 10.0,
                    "inflammatory_bonus": 4.0,
                    "glycemic_modifier": -1.0,
                    "micronutrient_bonus": 3.0
                },
                "advice": [
                    "Macro split is close to the ideal 30/40/30 balance."
                ],
                "macro_ratios": {"protein": 0.34, "carbs": 0.38, "fat": 0.28}
            }
        }
    }
