"""
Free-text input normalization.

This module turns whatever the user typed ("2 cups aloo, no onion,
something spicy and high protein under 30 mins") into canonical
ingredient keys, an excluded list, context signals, and feedback for
words it could not understand.

Parsing is lenient by design: unknown words never fail a request. They
are kept as best-effort underscore keys (downstream lookups simply miss)
and reported back in ``unknown`` with "did you mean" suggestions.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from recipe_engine.models.input import ModeMismatch, NormalizedInput, Signals, TokenSuggestion
from recipe_engine.services.reference_data import ReferenceData
from recipe_engine.utils.helpers import clean_text, dedupe, safe_divide, to_key

# Configure logging
logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"(\d+)\s*(min|mins|minute|minutes|hour|hours|hr|hrs)\b")
NUMBER_PATTERN = re.compile(r"\d+")
NUMBER_UNIT_PATTERN = re.compile(r"(\d+)([a-z]+)")

# Share of the parse one side must reach to count as dominant
MODE_DOMINANCE_RATIO = 0.6
MAX_MISMATCH_CONFIDENCE = 0.95
MAX_TOKEN_SUGGESTIONS = 3

SIGNAL_FIELDS: Dict[str, str] = {
    "goal": "goal",
    "dietary": "dietary",
    "cuisine": "cuisine",
    "meal_type": "meal_type",
}


@dataclass(frozen=True)
class NegationRules:
    """
    Configurable exclusion grammar.

    A marker word or phrase opens an exclusion scope; every ingredient
    resolved inside the scope goes to ``excluded``. The scope closes at a
    reset word or at the end of the comma segment.

    Attributes:
        markers: Single words that open a scope ("no", "without")
        phrases: Word sequences that open a scope ("leave out")
        resets: Words that close a scope ("but", "with")
    """
    markers: FrozenSet[str] = frozenset({"no", "without"})
    phrases: Tuple[Tuple[str, ...], ...] = ()
    resets: FrozenSet[str] = frozenset({"but", "with"})

    @classmethod
    def from_lists(
        cls,
        markers: Iterable[str],
        phrases: Iterable[str] = (),
        resets: Iterable[str] = (),
    ) -> "NegationRules":
        """Build rules from plain word lists, cleaning each entry."""
        cleaned_phrases = [tuple(clean_text(p).split()) for p in phrases]
        return cls(
            markers=frozenset(clean_text(m) for m in markers if clean_text(m)),
            # Longest phrase first so "allergic to" beats "allergic"
            phrases=tuple(sorted((p for p in cleaned_phrases if p), key=len, reverse=True)),
            resets=frozenset(clean_text(r) for r in resets if clean_text(r)),
        )

    @classmethod
    def from_settings(cls, config) -> "NegationRules":
        """Build rules from the application settings."""
        return cls.from_lists(config.NEGATION_MARKERS, config.NEGATION_PHRASES, config.NEGATION_RESETS)

    def phrase_length(self, words: Sequence[str], start: int) -> int:
        """Number of words of a negation phrase starting at ``start`` (0 if none)."""
        for phrase in self.phrases:
            if tuple(words[start:start + len(phrase)]) == phrase:
                return len(phrase)
        return 0


@dataclass
class _ScanResult:
    """Accumulator for one greedy scan."""
    ingredients: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)
    suggestions: List[TokenSuggestion] = field(default_factory=list)

    def extend(self, other: "_ScanResult") -> None:
        self.ingredients.extend(other.ingredients)
        self.excluded.extend(other.excluded)
        self.unknown.extend(other.unknown)
        self.suggestions.extend(other.suggestions)


class InputNormalizer:
    """
    Converts raw text into a NormalizedInput.

    Word resolution order for a single word:
    1. Single-word entries of the phrase table (dish aliases such as "dal")
    2. Variant / plural table ("tomatoes" -> "tomato")
    3. Regional table ("aloo" -> "potato"; a null mapping means "ignore")
    4. Direct ingredient or dish key
    5. Fuzzy match within a small edit distance
    6. Fallback: the word itself, reported as unknown

    Attributes:
        data: Reference datasets
        negation: Exclusion grammar
        fuzzy_max_distance: Largest edit distance accepted as a typo
    """

    def __init__(
        self,
        data: ReferenceData,
        negation: Optional[NegationRules] = None,
        fuzzy_max_distance: int = 2,
    ):
        """
        Initialize the normalizer and precompute its lookup tables.

        Args:
            data: Reference datasets
            negation: Exclusion grammar; defaults to "no"/"without"
            fuzzy_max_distance: Largest edit distance accepted as a typo
        """
        self.data = data
        self.lexicon = data.lexicon
        self.negation = negation or NegationRules()
        self.fuzzy_max_distance = fuzzy_max_distance

        self.phrase_map = self._build_phrase_map()
        self.max_phrase_words = max((len(p.split()) for p in self.phrase_map), default=1)
        self.fuzzy_pool = self._build_fuzzy_pool()
        self.fuzzy_surfaces = [surface for surface, _ in self.fuzzy_pool]
        self.noise_words = (
            self.lexicon.units
            | self.lexicon.quantity_words
            | self.lexicon.brand_words
            | self.lexicon.cooking_adjectives
            | self.lexicon.stopwords
            | self._signal_words()
        )

        logger.info(
            f"InputNormalizer initialized: {len(self.phrase_map)} phrases, "
            f"{len(self.fuzzy_pool)} fuzzy keys, "
            f"{len(self.negation.markers)} negation markers"
        )

    def _build_phrase_map(self) -> Dict[str, str]:
        """
        Merge every multi-word name into one phrase -> key table.

        Sources in priority order (the first mapping of a phrase wins):
        ingredient phrases, dish keys written with spaces, multi-word
        ingredient keys written with spaces, dish aliases.
        """
        phrase_map: Dict[str, str] = {}

        def add(phrase: str, key: str) -> None:
            phrase = clean_text(phrase)
            if phrase and phrase not in phrase_map:
                phrase_map[phrase] = key

        for phrase, key in self.lexicon.phrases.items():
            add(phrase, key)
        for key in self.data.dishes:
            if "_" in key:
                add(key.replace("_", " "), key)
        for key in self.data.nutrition:
            if "_" in key:
                add(key.replace("_", " "), key)
        for alias, key in self.data.dish_aliases.items():
            add(alias, key)

        return phrase_map

    def _build_fuzzy_pool(self) -> List[Tuple[str, str]]:
        """Single-word keys eligible for typo matching, as (surface, target)."""
        pool: Dict[str, str] = {}
        for key in list(self.data.nutrition) + list(self.data.dishes):
            pool.setdefault(key, key)
        for surface, target in self.lexicon.variants.items():
            pool.setdefault(surface, target)
        return sorted(
            (surface, target) for surface, target in pool.items()
            if len(surface) >= 4 and "_" not in surface and " " not in surface
        )

    def _signal_words(self) -> FrozenSet[str]:
        """Words used by signal keywords ("lose", "weight"), which are hints, not ingredients."""
        words = set()
        for table in self.lexicon.signals.values():
            for triggers in table.values():
                for trigger in triggers:
                    words.update(trigger.split())
        return frozenset(words)

    def _max_distance(self, word: str) -> int:
        """Typo allowance for a word; short words get at most one edit."""
        if len(word) >= 6:
            return self.fuzzy_max_distance
        return min(1, self.fuzzy_max_distance)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def normalize(self, raw: Optional[str]) -> NormalizedInput:
        """
        Parse free text into canonical ingredient keys.

        Algorithm:
        1. Clean the text (lowercase, drop symbols, keep commas)
        2. Extract signals from the whole text
        3. Split on commas when present, otherwise treat the text as one
           segment; each segment has its own negation scope
        4. Greedy longest-phrase scan of each segment
        5. Deduplicate (first occurrence wins) and remove excluded keys
           from the ingredient list

        Args:
            raw: Text as typed by the user

        Returns:
            NormalizedInput: Ingredients, exclusions, signals and feedback.
            Empty or whitespace-only text returns an empty result.

        Example:
            >>> normalizer.normalize("chicken rice garlic spinach").ingredients
            ["chicken", "rice", "garlic", "spinach"]
        """
        if not raw or not raw.strip():
            return NormalizedInput()

        text = clean_text(raw, keep_commas=True)
        signals = self.extract_signals(text)

        if "," in text:
            segments = [segment.split() for segment in text.split(",")]
        else:
            segments = [text.split()]

        result = _ScanResult()
        for words in segments:
            if words:
                result.extend(self._scan(words))

        excluded = dedupe(result.excluded)
        excluded_set = set(excluded)
        ingredients = [key for key in dedupe(result.ingredients) if key not in excluded_set]

        suggestions: List[TokenSuggestion] = []
        seen_tokens = set()
        for suggestion in result.suggestions:
            if suggestion.token not in seen_tokens:
                seen_tokens.add(suggestion.token)
                suggestions.append(suggestion)

        normalized = NormalizedInput(
            ingredients=ingredients,
            excluded=excluded,
            signals=signals,
            unknown=dedupe(result.unknown),
            suggestions=suggestions,
        )

        logger.info(
            f"Normalized input: {len(ingredients)} ingredients, "
            f"{len(excluded)} excluded, {len(normalized.unknown)} unknown"
        )
        return normalized

    def extract_signals(self, text: str) -> Signals:
        """
        Find goal, dietary, cuisine, meal-type and time hints in text.

        Keywords match on word boundaries. Within a category the longest
        matching keyword wins, so "non veg" is not read as "veg"; ties go
        to the first entry of the keyword table.

        Args:
            text: Raw or cleaned text

        Returns:
            Signals: Detected hints (unset fields stay None)
        """
        text = clean_text(text)
        values: Dict[str, Union[str, int]] = {}

        for category, field_name in SIGNAL_FIELDS.items():
            best_value = None
            best_length = 0
            for value, triggers in self.lexicon.signals.get(category, {}).items():
                for trigger in triggers:
                    if len(trigger) > best_length and self._contains_phrase(text, trigger):
                        best_value = value
                        best_length = len(trigger)
            if best_value is not None:
                values[field_name] = best_value

        time_match = TIME_PATTERN.search(text)
        if time_match:
            amount = int(time_match.group(1))
            if amount > 0:
                values["max_prep_time"] = amount * 60 if time_match.group(2).startswith("h") else amount

        logger.debug(f"Extracted signals: {values}")
        return Signals(**values)

    def detect_mismatch(
        self,
        parsed: Union[NormalizedInput, Sequence[str]],
        declared_mode: str,
    ) -> Optional[ModeMismatch]:
        """
        Check whether the input looks like the other entry mode.

        Counts dish keys and known raw-ingredient keys in the parse. A
        side dominates when it makes up at least 60% of the keys.

        - Declared "dish" but dominated by at least two raw ingredients:
          mismatch, suggest "ingredients"
        - Declared "ingredients" but dominated by dish names: mismatch,
          suggest "dish"

        Confidence is the dominant ratio capped at 0.95, so callers can
        gate the warning on a threshold.

        Args:
            parsed: NormalizedInput or its ingredient key list
            declared_mode: "dish" or "ingredients"

        Returns:
            ModeMismatch, or None when there is nothing to judge
        """
        keys = list(parsed.ingredients if isinstance(parsed, NormalizedInput) else parsed)
        if not keys:
            return None

        dish_keys = [k for k in keys if self.data.is_dish(k)]
        raw_keys = [k for k in keys if k in self.data.nutrition and not self.data.is_dish(k)]
        total = len(keys)
        dish_ratio = safe_divide(len(dish_keys), total)
        raw_ratio = safe_divide(len(raw_keys), total)

        if declared_mode == "dish" and raw_ratio >= MODE_DOMINANCE_RATIO and len(raw_keys) >= 2:
            return ModeMismatch(
                mismatch=True,
                confidence=round(min(MAX_MISMATCH_CONFIDENCE, raw_ratio), 2),
                reason=(
                    f"Looks like you entered raw ingredients ({', '.join(raw_keys)}). "
                    f"Switch to ingredients mode for the best results."
                ),
                suggested_mode="ingredients",
                dish_count=len(dish_keys),
                ingredient_count=len(raw_keys),
            )

        if declared_mode == "ingredients" and dish_ratio >= MODE_DOMINANCE_RATIO and dish_keys:
            return ModeMismatch(
                mismatch=True,
                confidence=round(min(MAX_MISMATCH_CONFIDENCE, dish_ratio), 2),
                reason=(
                    f"Looks like you entered a dish name ({', '.join(dish_keys)}). "
                    f"Switch to dish mode for the best results."
                ),
                suggested_mode="dish",
                dish_count=len(dish_keys),
                ingredient_count=len(raw_keys),
            )

        return ModeMismatch(
            mismatch=False,
            confidence=0.0,
            dish_count=len(dish_keys),
            ingredient_count=len(raw_keys),
        )

    def guess_input_type(self, raw: str) -> str:
        """Classify text as "dish", "ingredients" or "unknown"."""
        keys = self.normalize(raw).ingredients
        if not keys:
            return "unknown"
        dish_count = sum(1 for k in keys if self.data.is_dish(k))
        ingredient_count = len(keys) - dish_count
        if dish_count > ingredient_count:
            return "dish"
        if ingredient_count > dish_count:
            return "ingredients"
        return "unknown"

    def resolve_token(self, word: str) -> Optional[str]:
        """
        Resolve one cleaned word to a canonical key.

        Returns:
            The key, or None when the word is unknown or mapped to "ignore"
        """
        if len(word) < 2:
            return None
        if word in self.phrase_map:
            return self.phrase_map[word]
        if word in self.lexicon.variants:
            return self.lexicon.variants[word]
        if word in self.lexicon.regional:
            return self.lexicon.regional[word]
        if self.data.is_known(word):
            return word
        return self._fuzzy_match(word)

    def suggest(self, word: str) -> List[str]:
        """Closest known keys for an unresolved word, nearest first."""
        if len(word) < 3:
            return []
        matches = process.extract(
            word,
            self.fuzzy_surfaces,
            scorer=Levenshtein.distance,
            score_cutoff=self._max_distance(word) + 1,
            limit=None,
        )
        targets = [self.fuzzy_pool[index][1] for _, _, index in matches]
        return dedupe(targets)[:MAX_TOKEN_SUGGESTIONS]

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan(self, words: List[str]) -> _ScanResult:
        """
        Greedy left-to-right scan of one segment.

        At each position: negation grammar, then the longest multi-word
        phrase, then a two-word regional name, then noise filtering, then
        single-word resolution.
        """
        result = _ScanResult()
        negated = False
        i = 0

        def emit(key: str) -> None:
            (result.excluded if negated else result.ingredients).append(key)

        while i < len(words):
            word = words[i]

            span = self.negation.phrase_length(words, i)
            if span:
                negated = True
                i += span
                continue
            if word in self.negation.markers:
                negated = True
                i += 1
                continue
            if word in self.negation.resets:
                negated = False
                i += 1
                continue

            key, span = self._match_phrase(words, i)
            if key:
                emit(key)
                i += span
                continue

            if i + 1 < len(words):
                two_words = f"{word} {words[i + 1]}"
                if two_words in self.lexicon.regional:
                    target = self.lexicon.regional[two_words]
                    if target:
                        emit(target)
                    i += 2
                    continue

            if self._is_noise(word):
                i += 1
                continue

            key = self.resolve_token(word)
            if key:
                emit(key)
            elif len(word) >= 2:
                emit(to_key(word))
                if not negated:
                    result.unknown.append(word)
                    candidates = self.suggest(word)
                    if candidates:
                        result.suggestions.append(TokenSuggestion(token=word, candidates=candidates))
                    logger.debug(f"Unresolved word kept as key: '{word}'")
            i += 1

        return result

    def _match_phrase(self, words: List[str], start: int) -> Tuple[Optional[str], int]:
        """Longest multi-word phrase starting at ``start``, as (key, length)."""
        longest = min(self.max_phrase_words, len(words) - start)
        for length in range(longest, 1, -1):
            candidate = " ".join(words[start:start + length])
            if candidate in self.phrase_map:
                return self.phrase_map[candidate], length
        return None, 0

    def _is_noise(self, word: str) -> bool:
        """
        True for words that carry no ingredient meaning.

        Quantities, units, brand and cut names, cooking adjectives and
        stopwords are noise unless the word itself resolves to a key.
        """
        if word in self.phrase_map or word in self.lexicon.variants or self.data.is_known(word):
            return False
        if len(word) < 2:
            return True
        if NUMBER_PATTERN.fullmatch(word):
            return True
        number_unit = NUMBER_UNIT_PATTERN.fullmatch(word)
        if number_unit and number_unit.group(2) in self.lexicon.units:
            return True
        if word in self.lexicon.regional and self.lexicon.regional[word] is None:
            return True
        return word in self.noise_words

    def _fuzzy_match(self, word: str) -> Optional[str]:
        """Closest key within the typo distance, or None."""
        max_distance = self._max_distance(word)
        if len(word) < 3 or max_distance <= 0:
            return None

        match = process.extractOne(
            word,
            self.fuzzy_surfaces,
            scorer=Levenshtein.distance,
            score_cutoff=max_distance,
        )
        if match is None:
            return None

        _, distance, index = match
        target = self.fuzzy_pool[index][1]
        logger.debug(f"Fuzzy matched '{word}' -> '{target}' (distance {distance})")
        return target

    @staticmethod
    def _contains_phrase(text: str, phrase: str) -> bool:
        """Word-boundary containment test."""
        return re.search(rf"(?<![a-z0-9_]){re.escape(phrase)}(?![a-z0-9_])", text) is not None
