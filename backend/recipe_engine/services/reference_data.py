"""
Reference dataset loading.

This module loads the static, versioned JSON datasets (nutrition, cost,
dishes, substitutions, lexicon and kitchen guide) into one immutable
ReferenceData object that is built once at startup and injected into
every service.

Integrity rules enforced at load time:
- A JSON object with a repeated key is a fatal error, never a silent
  last-write-wins overwrite
- Every row must pass its Pydantic schema
- Dish ingredients, dish aliases and substitution candidates must point
  at keys that exist
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from recipe_engine.models.cost import Currency
from recipe_engine.models.ingredient import (
    CostEntry,
    DishExpansion,
    DishMetadata,
    NutritionProfile,
    SubstitutionEntry,
)
from recipe_engine.utils.helpers import clean_text

# Configure logging
logger = logging.getLogger(__name__)

DATASET_FILES: Dict[str, str] = {
    "nutrition": "nutrition.json",
    "costs": "costs.json",
    "dishes": "dishes.json",
    "substitutions": "substitutions.json",
    "lexicon": "lexicon.json",
    "kitchen": "kitchen_guide.json",
}


class ReferenceDataError(Exception):
    """Raised when a reference dataset is missing or inconsistent."""


class DuplicateKeyError(ReferenceDataError):
    """Raised when a reference dataset defines the same key twice."""

    def __init__(self, source: str, key: str):
        self.source = source
        self.key = key
        super().__init__(f"Duplicate key '{key}' in {source}")


def _freeze(value: Any) -> Any:
    """Recursively wrap dicts as read-only mappings and lists as tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class Lexicon:
    """
    Word tables used by the input normalizer.

    All entries are stored in cleaned form (lowercase, apostrophes
    dropped, symbols replaced by spaces) so they compare directly with
    cleaned user text.
    """
    units: FrozenSet[str] = frozenset()
    quantity_words: FrozenSet[str] = frozenset()
    cooking_adjectives: FrozenSet[str] = frozenset()
    stopwords: FrozenSet[str] = frozenset()
    brand_words: FrozenSet[str] = frozenset()
    regional: Mapping[str, Optional[str]] = field(default_factory=dict)
    phrases: Mapping[str, str] = field(default_factory=dict)
    variants: Mapping[str, str] = field(default_factory=dict)
    signals: Mapping[str, Mapping[str, Tuple[str, ...]]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Lexicon":
        """Build a lexicon from the raw lexicon.json content."""
        def words(name: str) -> FrozenSet[str]:
            return frozenset(clean_text(w) for w in raw.get(name, []) if clean_text(w))

        def mapping(name: str) -> Mapping[str, Any]:
            return MappingProxyType({
                clean_text(k): v for k, v in raw.get(name, {}).items() if clean_text(k)
            })

        signals = MappingProxyType({
            category: MappingProxyType({
                value: tuple(clean_text(t) for t in triggers if clean_text(t))
                for value, triggers in table.items()
            })
            for category, table in raw.get("signals", {}).items()
        })

        return cls(
            units=words("units"),
            quantity_words=words("quantity_words"),
            cooking_adjectives=words("cooking_adjectives"),
            stopwords=words("stopwords"),
            brand_words=words("brand_words"),
            regional=mapping("regional"),
            phrases=mapping("phrases"),
            variants=mapping("variants"),
            signals=signals,
        )


@dataclass(frozen=True)
class ReferenceData:
    """
    Immutable bundle of every reference table.

    Attributes:
        nutrition: Ingredient key -> NutritionProfile
        costs: Ingredient key -> CostEntry
        location_multipliers: Price category -> location -> factor
        currencies: Location -> Currency
        volatility: Volatility level -> {"label", "note"}
        dishes: Dish key -> DishExpansion
        dish_aliases: Alternate dish name -> dish key
        substitutions: Ingredient key -> SubstitutionEntry
        lexicon: Normalizer word tables
        kitchen: Cooking knowledge base used for steps and tips
        base_currency: Currency code of all base prices
        version: Dataset version string
    """
    nutrition: Mapping[str, NutritionProfile] = field(default_factory=dict)
    costs: Mapping[str, CostEntry] = field(default_factory=dict)
    location_multipliers: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    currencies: Mapping[str, Currency] = field(default_factory=dict)
    volatility: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    dishes: Mapping[str, DishExpansion] = field(default_factory=dict)
    dish_aliases: Mapping[str, str] = field(default_factory=dict)
    substitutions: Mapping[str, SubstitutionEntry] = field(default_factory=dict)
    lexicon: Lexicon = field(default_factory=Lexicon)
    kitchen: Mapping[str, Any] = field(default_factory=dict)
    base_currency: str = "INR"
    version: str = "unversioned"

    def __post_init__(self):
        # Plain dicts handed in by callers become read-only views
        for name in (
            "nutrition", "costs", "currencies", "dishes", "dish_aliases",
            "substitutions",
        ):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        for name in ("location_multipliers", "volatility", "kitchen"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _freeze(dict(value)))

    def is_dish(self, key: str) -> bool:
        """True when the key names a dish rather than a raw ingredient."""
        return key in self.dishes

    def is_known(self, key: str) -> bool:
        """True when the key is a known ingredient or dish."""
        return key in self.nutrition or key in self.dishes

    def find_dishes(
        self,
        cuisine: Optional[str] = None,
        meal_type: Optional[str] = None,
        dietary: Optional[str] = None,
        max_prep_minutes: Optional[int] = None,
    ) -> List[str]:
        """
        Dish keys whose metadata passes every given filter, in table order.

        A cuisine matches itself and its sub-regions ("India" matches
        "India-South"). A vegetarian filter also accepts vegan dishes.
        Dishes without metadata only match when no filter is given.
        """
        accepted = {dietary, "vegan"} if dietary == "vegetarian" else {dietary}
        matches = []
        for key, dish in self.dishes.items():
            meta = dish.metadata
            if meta is None:
                if cuisine is None and meal_type is None and dietary is None and max_prep_minutes is None:
                    matches.append(key)
                continue
            if cuisine and not (meta.cuisine or "").startswith(cuisine):
                continue
            if meal_type and meal_type not in meta.meal_types:
                continue
            if dietary and not accepted & set(meta.dietary):
                continue
            if max_prep_minutes is not None and (meta.prep_minutes is None or meta.prep_minutes > max_prep_minutes):
                continue
            matches.append(key)
        return matches

    def summary(self) -> Dict[str, Union[str, int]]:
        """Row counts per table, for health checks and logging."""
        return {
            "version": self.version,
            "ingredients": len(self.nutrition),
            "priced_ingredients": len(self.costs),
            "dishes": len(self.dishes),
            "dish_aliases": len(self.dish_aliases),
            "substitutions": len(self.substitutions),
        }

    def validate_references(self) -> None:
        """
        Check cross-table references.

        Raises:
            ReferenceDataError: If a dish, alias or substitution points at a
                key that does not exist
        """
        problems: List[str] = []

        for dish_key, dish in self.dishes.items():
            for ingredient in dish.ingredients:
                if ingredient not in self.nutrition:
                    problems.append(f"dish '{dish_key}' uses unknown ingredient '{ingredient}'")

        for alias, dish_key in self.dish_aliases.items():
            if dish_key not in self.dishes:
                problems.append(f"alias '{alias}' points at unknown dish '{dish_key}'")

        for key, entry in self.substitutions.items():
            if key not in self.nutrition:
                problems.append(f"substitution source '{key}' is not a known ingredient")
            for swap in entry.swaps:
                if swap not in self.nutrition:
                    problems.append(f"substitution '{key}' -> '{swap}' is not a known ingredient")

        if problems:
            raise ReferenceDataError(
                f"{len(problems)} reference problem(s): " + "; ".join(problems[:10])
            )


def _reject_duplicates(source: str):
    """Build a json object_pairs_hook that fails on repeated keys."""
    def hook(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in pairs:
            if key in result:
                raise DuplicateKeyError(source, key)
            result[key] = value
        return result
    return hook


def load_json_strict(path: Path) -> Dict[str, Any]:
    """
    Load a JSON file, failing on duplicate keys at any depth.

    Raises:
        ReferenceDataError: If the file is missing or not valid JSON
        DuplicateKeyError: If any object repeats a key
    """
    if not path.is_file():
        raise ReferenceDataError(f"Reference dataset not found: {path}")

    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle, object_pairs_hook=_reject_duplicates(path.name))
    except json.JSONDecodeError as e:
        raise ReferenceDataError(f"Invalid JSON in {path.name}: {e}") from e


def _parse_rows(source: str, rows: Dict[str, Any], model) -> Dict[str, Any]:
    """Validate every row of a table against its Pydantic model."""
    parsed = {}
    for key, row in rows.items():
        try:
            parsed[key] = model.model_validate(row)
        except ValidationError as e:
            raise ReferenceDataError(f"Invalid row '{key}' in {source}: {e}") from e
    return parsed


def _parse_dishes(rows: Dict[str, Any]) -> Dict[str, DishExpansion]:
    """Split flat dish rows into ingredient lists and optional metadata."""
    dishes = {}
    for key, row in rows.items():
        meta_fields = {k: v for k, v in row.items() if k != "ingredients"}
        try:
            dishes[key] = DishExpansion(
                ingredients=row.get("ingredients", []),
                metadata=DishMetadata.model_validate(meta_fields) if meta_fields else None,
            )
        except ValidationError as e:
            raise ReferenceDataError(f"Invalid dish '{key}' in dishes.json: {e}") from e
    return dishes


def load_reference_data(data_dir: Union[str, Path]) -> ReferenceData:
    """
    Load and validate every reference dataset from a directory.

    Args:
        data_dir: Directory containing the JSON dataset files

    Returns:
        ReferenceData: Immutable, cross-validated reference tables

    Raises:
        ReferenceDataError: On a missing file, schema violation or
            dangling reference
        DuplicateKeyError: On a repeated key in any dataset

    Example:
        data = load_reference_data(settings.DATA_DIR)
        print(data.summary())
    """
    data_dir = Path(data_dir)
    logger.info(f"Loading reference data from {data_dir}")

    raw = {name: load_json_strict(data_dir / filename) for name, filename in DATASET_FILES.items()}

    nutrition = _parse_rows("nutrition.json", raw["nutrition"].get("ingredients", {}), NutritionProfile)
    costs = _parse_rows("costs.json", raw["costs"].get("items", {}), CostEntry)
    currencies = _parse_rows("costs.json", raw["costs"].get("currencies", {}), Currency)
    substitutions = _parse_rows(
        "substitutions.json", raw["substitutions"].get("candidates", {}), SubstitutionEntry
    )
    dishes = _parse_dishes(raw["dishes"].get("dishes", {}))
    aliases = {clean_text(name): key for name, key in raw["dishes"].get("aliases", {}).items()}

    data = ReferenceData(
        nutrition=nutrition,
        costs=costs,
        location_multipliers=raw["costs"].get("location_multipliers", {}),
        currencies=currencies,
        volatility=raw["costs"].get("volatility", {}),
        dishes=dishes,
        dish_aliases=aliases,
        substitutions=substitutions,
        lexicon=Lexicon.from_dict(raw["lexicon"]),
        kitchen=raw["kitchen"],
        base_currency=raw["costs"].get("base_currency", "INR"),
        version=raw["nutrition"].get("version", "unversioned"),
    )
    data.validate_references()

    logger.info(f"Reference data loaded: {data.summary()}")
    return data
