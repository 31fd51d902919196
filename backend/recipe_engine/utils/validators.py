"""
Input validation utilities.

This module provides validation functions for request parameters so that
contract violations are rejected at the API boundary instead of inside
the scoring and aggregation algorithms.
"""

import re
import logging
from typing import List, Optional

from recipe_engine.utils.constants import (
    DIETARY_FILTERS,
    GOALS,
    SKILL_LEVELS,
    SPICE_LEVELS,
)

# Configure logging
logger = logging.getLogger(__name__)


def validate_free_text(text: str, max_length: int = 2000) -> bool:
    """
    Validate free-text ingredient input.

    Empty text is valid (it normalizes to an empty ingredient list), but
    oversized text and markup are rejected.

    Args:
        text: Raw user text
        max_length: Maximum accepted length

    Returns:
        bool: True if valid

    Raises:
        ValueError: If validation fails with specific error message
    """
    if text is None:
        raise ValueError("Input text cannot be null")

    if len(text) > max_length:
        raise ValueError(f"Input text cannot exceed {max_length} characters")

    # Check for dangerous characters (basic sanitization)
    dangerous_patterns = [
        r'<script',  # Script tags
        r'javascript:',  # JavaScript protocol
        r'on\w+\s*=',  # Event handlers (onclick, onload, etc)
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, text, re.IGNORECASE):
            raise ValueError("Input text contains invalid characters or patterns")

    logger.debug(f"Free text validated ({len(text)} chars)")
    return True


def validate_choice(value: Optional[str], allowed: List[str], field: str) -> Optional[str]:
    """
    Validate an optional categorical value.

    Returns:
        The lowercased value, or None when the value is absent

    Raises:
        ValueError: If the value is not one of ``allowed``
    """
    if value is None or value == "":
        return None

    normalized = value.strip().lower()
    if normalized not in allowed:
        raise ValueError(f"{field} must be one of: {', '.join(allowed)}")
    return normalized


def validate_goal(goal: Optional[str]) -> Optional[str]:
    """Validate a user goal."""
    return validate_choice(goal, GOALS, "goal")


def validate_spice(spice: Optional[str]) -> Optional[str]:
    """Validate a spice level."""
    return validate_choice(spice, SPICE_LEVELS, "spice")


def validate_skill(skill: Optional[str]) -> Optional[str]:
    """Validate a skill level."""
    return validate_choice(skill, SKILL_LEVELS, "skill")


def validate_dietary(dietary: Optional[str]) -> Optional[str]:
    """Validate a dietary filter."""
    return validate_choice(dietary, DIETARY_FILTERS, "dietary")

