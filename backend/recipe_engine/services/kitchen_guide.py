"""
Kitchen guidance.

Deterministic lookups and templating over the kitchen knowledge base
(kitchen_guide.json): cuisine profiles, cooking-method detection, ordered
cooking steps, ingredient suggestions, common mistakes, side pairings and
the recipe title and description.

Every function here is a pure function of its arguments and the
reference data, so identical input always gives identical text.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from recipe_engine.services.reference_data import ReferenceData
from recipe_engine.utils.constants import (
    BAKE_INDICATORS,
    BIRYANI_GRAINS,
    BIRYANI_INDICATORS,
    BRAISE_INDICATORS,
    CUISINE_SUFFIXES,
    DEFAULT_CUISINE_SUFFIXES,
    GOAL_CONTEXT,
    GOAL_WORDS,
    NO_COOK_INDICATORS,
    SKILL_TASTE,
    SPICE_SEED_BONUS,
    SPICE_WORDS,
    STIR_FRY_INDICATORS,
)
from recipe_engine.utils.helpers import base_location, dedupe, display_name, pick

# Configure logging
logger = logging.getLogger(__name__)

GENERIC_PROFILE: Dict[str, Any] = {
    "fat": "oil of your choice",
    "tempering": ["garlic", "onion"],
    "aromatics": ["salt", "pepper"],
    "acid": "lemon juice",
    "herbs": ["fresh parsley"],
    "cook_style": "standard saute",
    "technique": "Cook over medium heat, building flavour in layers.",
    "finish": "season to taste and garnish before serving",
}

# Acid ingredients, in the order they name the acid step
ACID_NAMES = [
    ("tamarind", "tamarind water"),
    ("lime", "lime juice"),
    ("vinegar", "vinegar"),
    ("lemon", "lemon juice"),
]

TIER_LABELS = {
    1: "dense vegetables",
    2: "medium-firm vegetables",
    3: "delicate vegetables",
    4: "leafy and raw vegetables",
}

METHOD_HEAT = {
    "saute": "Heat {fat} over medium-high until shimmering.",
    "stirfry": "Get the wok smoking hot before adding {fat}. Keep everything moving.",
    "braise": "Heat {fat} in a heavy pot with a lid over medium heat.",
    "onepotdal": "Heat {fat} in a deep pot over medium heat.",
    "bake": "Preheat the oven to 200°C and grease the tray with {fat}.",
    "biryani": "Heat {fat} in a heavy-bottomed pot that has a tight lid.",
}


class KitchenGuide:
    """
    Cooking knowledge collaborator for the recipe synthesizer.

    Attributes:
        kitchen: The kitchen knowledge base
        groups: Ingredient group name -> set of ingredient keys
        max_suggestions: Cap on suggested extra ingredients
        max_mistakes: Cap on common-mistake tips
    """

    def __init__(self, data: ReferenceData, max_suggestions: int = 4, max_mistakes: int = 6):
        self.kitchen: Mapping[str, Any] = data.kitchen
        self.groups = {
            name: frozenset(keys) for name, keys in self.kitchen.get("groups", {}).items()
        }
        self.max_suggestions = max_suggestions
        self.max_mistakes = max_mistakes
        logger.info(
            f"KitchenGuide initialized with {len(self.kitchen.get('cuisine_profiles', {}))} "
            f"cuisine profiles"
        )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def in_group(self, ingredients: Sequence[str], group: str) -> List[str]:
        """Ingredients belonging to a named group, in input order."""
        members = self.groups.get(group, frozenset())
        return [i for i in ingredients if i in members]

    def get_cuisine_profile(self, location: str, dish_keys: Sequence[str] = ()) -> Mapping[str, Any]:
        """
        Cuisine profile for a location.

        Plain "India" picks a regional profile from the dishes involved
        (North Indian unless a dish belongs to another region). Unknown
        locations get a generic profile.
        """
        profiles = self.kitchen.get("cuisine_profiles", {})
        if location == "India":
            for dish in dish_keys:
                for region, dishes in self.kitchen.get("sub_regions", {}).items():
                    if dish in dishes and region in profiles:
                        return profiles[region]
            return profiles.get("India-North", GENERIC_PROFILE)
        if location in profiles:
            return profiles[location]
        logger.warning(f"No cuisine profile for '{location}', using generic profile")
        return GENERIC_PROFILE

    def vegetable_tier(self, ingredient: str) -> int:
        """Cooking-order tier of a vegetable: 1 = longest cook, 4 = barely cooked."""
        info = self.kitchen.get("vegetable_tiers", {}).get(ingredient)
        return int(info["tier"]) if info else 2

    def detect_cooking_method(self, ingredients: Sequence[str], location: str) -> str:
        """
        Pick the cooking method for an ingredient list.

        Rules, first match wins:
        1. biryani: rice + meat or vegetables + saffron, ghee or curd
        2. bake: flour or baking powder
        3. stirfry: wok ingredients, Chinese cuisine, or Thai meat + veg
        4. nocook: only raw-friendly produce
        5. onepotdal: legumes without meat
        6. braise: tough red meats
        7. saute (default)
        """
        present = set(ingredients)
        meats = self.in_group(ingredients, "meat")
        veggies = self.in_group(ingredients, "vegetable")
        location = base_location(location) or ""

        if present & set(BIRYANI_GRAINS) and (meats or veggies) and present & set(BIRYANI_INDICATORS):
            return "biryani"
        if present & set(BAKE_INDICATORS):
            return "bake"
        if (
            present & set(STIR_FRY_INDICATORS)
            or location == "China"
            or (location == "Thailand" and meats and veggies)
        ):
            return "stirfry"

        needs_cooking = (
            meats
            or self.in_group(ingredients, "grain")
            or self.in_group(ingredients, "legume")
            or self.in_group(ingredients, "veg_protein")
            or any(self.vegetable_tier(v) < 4 for v in veggies if v not in NO_COOK_INDICATORS)
        )
        if not needs_cooking and present & set(NO_COOK_INDICATORS):
            return "nocook"
        if self.in_group(ingredients, "legume") and not meats:
            return "onepotdal"
        if present & set(BRAISE_INDICATORS):
            return "braise"
        return "saute"

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def generate_steps(
        self,
        ingredients: Sequence[str],
        goal: str,
        spice: str,
        location: str,
        skill: str = "intermediate",
        dish_keys: Sequence[str] = ()
    ) -> List[str]:
        """
        Ordered cooking steps for an ingredient list.

        The sequence follows the detected method: prep, heat and bloom,
        aromatics, the main protein, legume or grain, vegetables staggered
        by cooking time, simmer, acid, seasoning, finish and plating.

        Args:
            ingredients: Ingredient keys in recipe order
            goal: Nutrition goal, shapes the plating advice
            spice: Spice level, shapes the tempering
            location: Cuisine location
            skill: Skill level, shapes how much detail each step carries
            dish_keys: Dishes the ingredients came from

        Returns:
            List[str]: Step texts, each prefixed with its stage name
        """
        profile = self.get_cuisine_profile(location, dish_keys)
        method = self.detect_cooking_method(ingredients, location)

        proteins = self.in_group(ingredients, "meat") + self.in_group(ingredients, "veg_protein")
        legumes = self.in_group(ingredients, "legume")
        grains = self.in_group(ingredients, "grain")
        veggies = self.in_group(ingredients, "vegetable")

        def named(items: Sequence[str]) -> str:
            return ", ".join(display_name(i) for i in items)

        steps = []

        if method == "nocook":
            steps.append(f"PREP: Wash and dry {named(ingredients)}. Cut into bite-sized pieces just before serving.")
            steps.append(f"ASSEMBLE: Toss everything gently in a wide bowl with {profile['fat']} and {profile['acid']}.")
            steps.append(f"SEASON: {SKILL_TASTE.get(skill, SKILL_TASTE['intermediate'])}")
            steps.append(f"FINISH: {profile['finish'].capitalize()}.")
            steps.append(self._plate_step(proteins, grains, legumes, veggies, goal))
            return steps

        steps.append(self._prep_step(proteins, legumes, grains, skill, method))

        tempering = list(profile["tempering"])
        if spice == "mild":
            tempering = tempering[:2]
        heat = METHOD_HEAT.get(method, METHOD_HEAT["saute"]).format(fat=profile["fat"])
        bloom = f"FAT AND BLOOM: {heat} Add {', '.join(tempering)} and cook until fragrant."
        if spice == "hot":
            bloom += " Add extra dried chili for heat."
        steps.append(bloom)

        steps.append(
            f"AROMATICS: Add {', '.join(profile['aromatics'])} and cook until soft and glossy, "
            "3 to 4 minutes."
        )

        if proteins:
            cook = {
                "braise": "Brown on all sides, add a cup of water, cover and cook low for 40 to 60 minutes",
                "stirfry": "Spread in one layer and sear without moving for 1 minute, then toss",
                "bake": "Arrange on the tray and roast for 20 to 25 minutes",
                "biryani": "Cook in the masala until just done, then set aside with the gravy",
            }.get(method, "Sear over medium-high until golden, 4 to 6 minutes")
            steps.append(f"PROTEIN: Add {named(proteins)}. {cook}.")
        elif legumes:
            steps.append(
                f"COOK: Pressure cook {named(legumes)} with turmeric and water until completely soft, "
                "then whisk smooth."
            )
        elif grains:
            steps.append(f"COOK: Cook {named(grains)} until just tender and drain well.")

        for tier in sorted({self.vegetable_tier(v) for v in veggies}):
            batch = [v for v in veggies if self.vegetable_tier(v) == tier]
            cues = self._cues(batch) if skill != "beginner" else ""
            if tier == 4:
                steps.append(f"VEGETABLES ({TIER_LABELS[tier]}): Add {named(batch)} off the heat. {cues}".rstrip())
            else:
                steps.append(f"VEGETABLES ({TIER_LABELS[tier]}): Add {named(batch)}. {cues}".rstrip())

        if method == "biryani" and grains:
            steps.append(
                f"LAYER: Layer par-cooked {named(grains)} over the masala, seal the lid and cook on the "
                "lowest heat for 20 minutes."
            )
        elif proteins or (legumes and veggies):
            minutes = "10 to 15" if self.in_group(ingredients, "meat") else "5 to 8"
            steps.append(f"SIMMER: Cover and simmer {minutes} minutes until the sauce coats a spoon.")

        acid = self._acid_name(ingredients)
        if acid:
            steps.append(f"ACID: Stir in {acid} off the heat. {display_name(profile['acid'])} brightens the dish.")

        steps.append(f"SEASON: {SKILL_TASTE.get(skill, SKILL_TASTE['intermediate'])}")
        steps.append(f"FINISH: {profile['finish'].capitalize()}.")
        steps.append(self._plate_step(proteins, grains, legumes, veggies, goal))

        logger.debug(f"Generated {len(steps)} {method} steps for {len(ingredients)} ingredients")
        return steps

    def _prep_step(
        self,
        proteins: List[str],
        legumes: List[str],
        grains: List[str],
        skill: str,
        method: str
    ) -> str:
        parts = []
        if legumes:
            parts.append(f"Rinse {', '.join(display_name(item).lower() for item in legumes)} until the water runs clear.")
        if grains and method != "bake":
            parts.append(f"Wash {', '.join(display_name(item).lower() for item in grains)}.")
        if proteins:
            if skill == "beginner":
                parts.append(f"Cut {display_name(proteins[0]).lower()} into even pieces so it cooks at the same rate.")
            else:
                parts.append(f"Cut {display_name(proteins[0]).lower()} against the grain and pat dry before cooking.")
        if not parts:
            parts.append("Wash, peel and cut all vegetables into evenly sized pieces.")
        return "PREP: " + " ".join(parts)

    def _cues(self, batch: Sequence[str]) -> str:
        tiers = self.kitchen.get("vegetable_tiers", {})
        cues = [
            f"{display_name(v)}: {tiers[v]['cue']} ({tiers[v]['time']})"
            for v in batch if v in tiers
        ]
        return "; ".join(cues) + "." if cues else ""

    def _acid_name(self, ingredients: Sequence[str]) -> Optional[str]:
        present = set(ingredients)
        for key, name in ACID_NAMES:
            if key in present:
                return name
        return None

    def _plate_step(
        self,
        proteins: List[str],
        grains: List[str],
        legumes: List[str],
        veggies: List[str],
        goal: str
    ) -> str:
        main = display_name((proteins or legumes or ["the main"])[0])
        carb = display_name((grains or legumes or ["carbs"])[0])
        veg = display_name((veggies or ["vegetables"])[0])
        if goal == "muscle_gain":
            return f"PLATE: Make {main} the centre of a generous plate with {carb} and {veg} alongside."
        if goal == "weight_loss":
            return f"PLATE: Fill half the plate with {veg}, a quarter with {main} and a quarter with {carb}."
        return f"PLATE: Serve in balanced thirds of {main}, {carb} and {veg}."

    # ------------------------------------------------------------------
    # Suggestions, mistakes and pairings
    # ------------------------------------------------------------------

    def generate_suggestions(self, ingredients: Sequence[str], goal: str, location: str) -> List[str]:
        """
        Extra ingredients that would suit the dish.

        Scoring:
        - +3 for a classic base partner of an ingredient
        - +2 for a pairing partner
        - +2 for the cuisine's tempering, +1 for its aromatics
        - +4 for items boosted by the goal (only for items already scored)

        Ingredients already present are never suggested. Ties keep
        first-scored order.
        """
        profile = self.get_cuisine_profile(location)
        present = set(ingredients)
        table = self.kitchen.get("suggestions", {})
        boosted = set(self.kitchen.get("goal_boost", {}).get(goal, ()))
        scores: Dict[str, int] = {}

        def add(item: str, points: int):
            if item not in present:
                scores[item] = scores.get(item, 0) + points

        for ingredient in ingredients:
            entry = table.get(ingredient)
            if not entry:
                continue
            for item in entry.get("base", ()):
                add(item.split(" ")[0], 3)
            for item in entry.get("pair", ()):
                add(item, 2)

        for item in profile["tempering"]:
            add(item.split(" ")[0], 2)
        for item in profile["aromatics"]:
            add(item.split(" ")[0], 1)

        for item in scores:
            if item in boosted:
                scores[item] += 4

        ranked = sorted(scores.items(), key=lambda pair: -pair[1])
        return [display_name(item) for item, _ in ranked[:self.max_suggestions]]

    def get_common_mistakes(self, ingredients: Sequence[str], location: str) -> List[str]:
        """Ingredient-specific then cuisine-specific pitfalls, de-duplicated."""
        by_ingredient = self.kitchen.get("ingredient_mistakes", {})
        by_cuisine = self.kitchen.get("cuisine_mistakes", {})

        tips = [tip for i in ingredients for tip in by_ingredient.get(i, ())]
        cuisine = by_cuisine.get(location) or by_cuisine.get(base_location(location)) or by_cuisine.get("India", ())
        return dedupe(tips + list(cuisine))[:self.max_mistakes]

    def get_pairings(self, location: str, goal: str) -> List[str]:
        """Side dishes for a location and goal, falling back to India and balanced."""
        table = self.kitchen.get("pairings", {})
        by_goal = table.get(location) or table.get(base_location(location)) or table.get("India", {})
        return list(by_goal.get(goal) or by_goal.get("balanced", ()))

    # ------------------------------------------------------------------
    # Title and description
    # ------------------------------------------------------------------

    def generate_title(
        self,
        ingredients: Sequence[str],
        goal: str,
        spice: str,
        location: str,
        primary: str
    ) -> str:
        """
        Deterministic recipe title.

        Words are drawn from fixed pools with a seed derived from the
        ingredient count and spice level, so the same input always gets
        the same title.

        Example:
            >>> guide.generate_title(["chicken", "rice"], "muscle_gain", "hot", "India", "chicken")
            "Fiery Protein-Packed Chicken & Rice Tadka"
        """
        seed = len(ingredients) * 7 + SPICE_SEED_BONUS.get(spice, 0)
        heat = pick(SPICE_WORDS.get(spice, SPICE_WORDS["medium"]), seed)
        goal_word = pick(GOAL_WORDS.get(goal, GOAL_WORDS["balanced"]), seed + 1)
        suffix = pick(
            CUISINE_SUFFIXES.get(base_location(location) or "", DEFAULT_CUISINE_SUFFIXES), seed + 2
        )

        name = display_name(primary)
        if len(ingredients) > 1 and ingredients[1] != primary:
            name += f" & {display_name(ingredients[1])}"
        return f"{heat} {goal_word} {name} {suffix}"

    def generate_description(
        self,
        ingredients: Sequence[str],
        goal: str,
        location: str,
        totals: Mapping[str, float],
        dish_keys: Sequence[str] = ()
    ) -> str:
        """
        One-paragraph description of the dish and its nutrition.

        Args:
            ingredients: Ingredient keys in recipe order
            goal: Nutrition goal
            location: Cuisine location
            totals: Goal-adjusted calories, protein, carbs and fat
            dish_keys: Dishes the ingredients came from

        Returns:
            str: Description text
        """
        profile = self.get_cuisine_profile(location, dish_keys)
        lead = ", ".join(display_name(i).lower() for i in ingredients[:3])
        more = f" and {len(ingredients) - 3} more" if len(ingredients) > 3 else ""

        protein_kcal = totals["protein"] * 4
        carbs_kcal = totals["carbs"] * 4
        fat_kcal = totals["fat"] * 9
        if protein_kcal >= carbs_kcal and protein_kcal >= fat_kcal:
            character = "protein-forward"
        elif carbs_kcal >= fat_kcal:
            character = "carbohydrate-led"
        else:
            character = "fat-dominant"

        technique = profile["technique"].split(".")[0].strip().lower()
        return (
            f"A {location}-inspired {profile['cook_style']} dish built around {lead}{more}. "
            f"This {character} plate is {GOAL_CONTEXT.get(goal, GOAL_CONTEXT['balanced'])}. "
            f"Delivers ~{totals['calories']:.0f} kcal | {totals['protein']:.0f}g protein | "
            f"{totals['carbs']:.0f}g carbs | {totals['fat']:.0f}g fat, prepared via {technique}."
        )
