"""
Application configuration.

This module defines the engine settings as a Pydantic model populated
from environment variables (optionally loaded from ``backend/.env``),
and configures logging for the whole application.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from typing import List
import os
from dotenv import load_dotenv

from recipe_engine.utils.constants import GOALS, SKILL_LEVELS, SPICE_LEVELS

# Load .env from backend directory (works regardless of cwd when running uvicorn)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

_DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


def _env_list(name: str, default: List[str]) -> List[str]:
    """Read a comma-separated list from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """
    Engine configuration settings.

    Can be configured via environment variables or .env file.
    Environment variable names match the field names (e.g., DEFAULT_LOCATION).

    Attributes:
        DATA_DIR: Directory holding the reference datasets
        DEFAULT_GOAL: Goal used when neither the request nor the text gives one
        DEFAULT_LOCATION: Location used when neither the request nor the text gives one
        DEFAULT_SPICE: Spice level used for titles and steps
        DEFAULT_SKILL: Skill level used for step wording
        DEFAULT_SERVINGS: Servings used for cost rendering
        UNKNOWN_INGREDIENT_QTY: Grams assumed for an ingredient missing from the data
        UNKNOWN_INGREDIENT_COST: Base-currency cost assumed for an unpriced ingredient
        MISMATCH_CONFIDENCE_THRESHOLD: Confidence needed before warning about input mode
        FUZZY_MAX_DISTANCE: Maximum edit distance for typo correction
        MAX_SUGGESTIONS: Maximum "add this" suggestions per recipe
        MAX_MISTAKES: Maximum common-mistake warnings per recipe
        MAX_ADVICE: Maximum health advice strings per score
        NEGATION_MARKERS: Single words that start an exclusion
        NEGATION_PHRASES: Multi-word phrases that start an exclusion
        NEGATION_RESETS: Words that end an exclusion
        MAX_INPUT_LENGTH: Longest accepted free-text input
        LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)
    """

    # Reference data
    DATA_DIR: Path = Field(
        default_factory=lambda: Path(os.getenv("DATA_DIR", str(_DEFAULT_DATA_DIR))),
        description="Directory holding the reference datasets"
    )

    # Context defaults
    DEFAULT_GOAL: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_GOAL", "balanced"),
        description="Goal used when none is given"
    )

    DEFAULT_LOCATION: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_LOCATION", "India"),
        description="Location used when none is given"
    )

    DEFAULT_SPICE: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_SPICE", "medium"),
        description="Spice level used when none is given"
    )

    DEFAULT_SKILL: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_SKILL", "intermediate"),
        description="Skill level used when none is given"
    )

    DEFAULT_SERVINGS: int = Field(
        default=1,
        ge=1,
        le=50,
        description="Servings used when none is given"
    )

    # Fallbacks for ingredients missing from the reference data
    UNKNOWN_INGREDIENT_QTY: float = Field(
        default=80.0,
        gt=0.0,
        description="Grams assumed for an unknown ingredient"
    )

    UNKNOWN_INGREDIENT_COST: float = Field(
        default=12.0,
        gt=0.0,
        description="Base-currency cost per serving assumed for an unpriced ingredient"
    )

    # Input normalizer
    MISMATCH_CONFIDENCE_THRESHOLD: float = Field(
        default_factory=lambda: float(os.getenv("MISMATCH_CONFIDENCE_THRESHOLD", "0.65")),
        ge=0.0,
        le=1.0,
        description="Confidence needed before surfacing an input-mode warning"
    )

    FUZZY_MAX_DISTANCE: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Maximum edit distance for typo correction"
    )

    NEGATION_MARKERS: List[str] = Field(
        default_factory=lambda: _env_list("NEGATION_MARKERS", [
            "no", "not", "without", "except", "excluding", "exclude",
            "minus", "skip", "avoid", "hold", "sans", "dont", "cant",
            "hate", "dislike", "allergic", "intolerant",
        ]),
        description="Single words that start an exclusion"
    )

    NEGATION_PHRASES: List[str] = Field(
        default_factory=lambda: _env_list("NEGATION_PHRASES", [
            "leave out", "except for", "allergic to", "intolerant to",
            "free from", "other than",
        ]),
        description="Multi-word phrases that start an exclusion"
    )

    NEGATION_RESETS: List[str] = Field(
        default_factory=lambda: _env_list("NEGATION_RESETS", [
            "but", "with", "plus", "also", "include", "including",
        ]),
        description="Words that end an exclusion"
    )

    # Output limits
    MAX_SUGGESTIONS: int = Field(default=4, ge=1, le=10, description="Maximum suggestions")
    MAX_MISTAKES: int = Field(default=6, ge=1, le=20, description="Maximum common mistakes")
    MAX_ADVICE: int = Field(default=4, ge=1, le=10, description="Maximum advice strings")

    MAX_INPUT_LENGTH: int = Field(
        default=2000,
        ge=10,
        le=20000,
        description="Longest accepted free-text input"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        description="Logging level (DEBUG/INFO/WARNING/ERROR)"
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @field_validator('DEFAULT_GOAL')
    @classmethod
    def validate_default_goal(cls, v: str) -> str:
        """Ensure the default goal is a known goal."""
        if v not in GOALS:
            raise ValueError(f"DEFAULT_GOAL must be one of: {', '.join(GOALS)}")
        return v

    @field_validator('DEFAULT_SPICE')
    @classmethod
    def validate_default_spice(cls, v: str) -> str:
        """Ensure the default spice level is known."""
        if v not in SPICE_LEVELS:
            raise ValueError(f"DEFAULT_SPICE must be one of: {', '.join(SPICE_LEVELS)}")
        return v

    @field_validator('DEFAULT_SKILL')
    @classmethod
    def validate_default_skill(cls, v: str) -> str:
        """Ensure the default skill level is known."""
        if v not in SKILL_LEVELS:
            raise ValueError(f"DEFAULT_SKILL must be one of: {', '.join(SKILL_LEVELS)}")
        return v

    # Environment-derived defaults go through the validators too
    model_config = {"validate_default": True}


# Create global settings instance
settings = Settings()


# Configure logging based on settings
def configure_logging():
    """Configure application logging based on settings."""
    import logging

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")
    logger.info(f"Reference data directory: {settings.DATA_DIR}")
    logger.info(
        f"Defaults: goal={settings.DEFAULT_GOAL}, location={settings.DEFAULT_LOCATION}, "
        f"servings={settings.DEFAULT_SERVINGS}"
    )


# Initialize logging on import
configure_logging()
