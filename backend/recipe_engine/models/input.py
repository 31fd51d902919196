"""
Pydantic models for parsed user input.

This module defines the result of normalizing free text into canonical
ingredient keys, and the input-mode mismatch check built on top of it.
"""

from pydantic import BaseModel, Field, model_validator
from typing import List, Optional


class Signals(BaseModel):
    """
    Hints inferred from free text.

    Signals never remove words from the ingredient stream; they only
    suggest context values the caller did not set explicitly.
    """
    goal: Optional[str] = None
    cuisine: Optional[str] = None
    dietary: Optional[str] = None
    meal_type: Optional[str] = None
    max_prep_time: Optional[int] = Field(None, gt=0, description="Minutes")


class TokenSuggestion(BaseModel):
    """Closest known keys for a word that could not be resolved."""
    token: str
    candidates: List[str] = Field(default_factory=list)


class NormalizedInput(BaseModel):
    """
    Result of normalizing raw text.

    Attributes:
        ingredients: Unique canonical keys in first-seen order; may include
            dish keys and best-effort keys for unknown words
        excluded: Keys the user asked to leave out
        signals: Goal, cuisine, dietary, meal-type and time hints
        unknown: Words that did not resolve to a known key
        suggestions: "Did you mean" candidates for unknown words
    """
    ingredients: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)
    signals: Signals = Field(default_factory=Signals)
    unknown: List[str] = Field(default_factory=list)
    suggestions: List[TokenSuggestion] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_disjoint(self):
        """Ensure no key is both requested and excluded."""
        overlap = set(self.ingredients) & set(self.excluded)
        if overlap:
            raise ValueError(f"Keys cannot be both included and excluded: {sorted(overlap)}")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "ingredients": ["chicken", "rice", "garlic"],
                "excluded": ["onion"],
                "signals": {"goal": "muscle_gain", "max_prep_time": 30},
                "unknown": [],
                "suggestions": []
            }
        }
    }


class ModeMismatch(BaseModel):
    """
    Warning that the text looks like the other input mode.

    Attributes:
        mismatch: True when the declared mode looks wrong
        confidence: 0-1 strength of the signal
        reason: Human-readable explanation
        suggested_mode: The mode the input looks like ("dish" or "ingredients")
        dish_count: Number of dish keys in the parse
        ingredient_count: Number of known raw ingredient keys in the parse
    """
    mismatch: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str = ""
    suggested_mode: Optional[str] = None
    dish_count: int = 0
    ingredient_count: int = 0
