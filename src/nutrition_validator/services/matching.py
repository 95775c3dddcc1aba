"""Search term mapping and best-match scoring for FDC candidates."""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from nutrition_validator.domain.nutrition import FoodCandidate

_logger = logging.getLogger(__name__)

SPELLING_CORRECTIONS: dict[str, str] = {
    "jalopeno": "jalapeno",
    "jalapino": "jalapeno",
    "jalepeno": "jalapeno",
    "parmesean": "parmesan",
    "parmasan": "parmesan",
    "mozerella": "mozzarella",
    "mozarella": "mozzarella",
    "brocoli": "broccoli",
    "brocolli": "broccoli",
    "califlower": "cauliflower",
    "calliflower": "cauliflower",
    "zuchini": "zucchini",
    "zuchinni": "zucchini",
    "letuce": "lettuce",
    "tomatoe": "tomato",
    "tomatos": "tomatoes",
    "potatoe": "potato",
    "potatos": "potatoes",
    "aspargus": "asparagus",
    "avacado": "avocado",
    "avocato": "avocado",
    "bannana": "banana",
    "straberry": "strawberry",
    "strawbery": "strawberry",
    "bluberry": "blueberry",
    "rasberry": "raspberry",
    "pinapple": "pineapple",
    "brocolini": "broccolini",
    "yoghurt": "yogurt",
    "cinammon": "cinnamon",
    "tumeric": "turmeric",
}

SEARCH_TERMS: dict[str, str] = {
    # Proteins
    "chicken breast": "chicken broilers breast meat raw",
    "chicken thigh": "chicken broilers thigh meat raw",
    "chicken thighs": "chicken broilers thigh meat raw",
    "ground beef": "beef ground raw",
    "ground turkey": "turkey ground raw",
    "salmon": "salmon atlantic raw",
    "salmon fillet": "salmon atlantic raw",
    "cod": "fish cod atlantic raw",
    "cod fillet": "fish cod atlantic raw",
    "cod filet": "fish cod atlantic raw",
    "tilapia": "fish tilapia raw",
    "tilapia fillet": "fish tilapia raw",
    "tuna": "fish tuna raw",
    "shrimp": "crustaceans shrimp raw",
    "tofu": "tofu raw firm",
    "turkey breast": "turkey breast meat raw",
    "pork chop": "pork loin raw",
    "pork tenderloin": "pork tenderloin raw",
    "steak": "beef steak raw",
    "beef steak": "beef steak raw",
    # Grains and starches
    "brown rice": "rice brown long-grain raw",
    "white rice": "rice white long-grain raw",
    "quinoa": "quinoa uncooked",
    "pasta": "pasta dry unenriched",
    "bread": "bread whole wheat",
    "whole wheat bread": "bread whole wheat",
    "oats": "oats regular or quick",
    "rolled oats": "oats regular or quick",
    "sweet potato": "sweet potatoes raw unprepared",
    "sweet potatoes": "sweet potatoes raw unprepared",
    "yam": "yam raw",
    "potato": "potatoes flesh and skin raw",
    "potatoes": "potatoes flesh and skin raw",
    "russet potato": "potatoes russet raw",
    "red potato": "potatoes red raw",
    # Vegetables
    "broccoli": "broccoli raw",
    "spinach": "spinach raw",
    "kale": "kale raw",
    "lettuce": "lettuce raw",
    "tomato": "tomato raw",
    "tomatoes": "tomato raw",
    "onion": "onion raw",
    "garlic": "garlic raw",
    "bell pepper": "peppers sweet raw",
    "carrot": "carrot raw",
    "carrots": "carrot raw",
    "zucchini": "squash zucchini raw",
    "cucumber": "cucumber raw",
    "asparagus": "asparagus raw",
    "green beans": "beans snap green raw",
    "mushrooms": "mushrooms raw",
    "cauliflower": "cauliflower raw",
    # Fruits
    "banana": "banana raw",
    "apple": "apple raw",
    "orange": "orange raw",
    "strawberries": "strawberries raw",
    "blueberries": "blueberries raw",
    "avocado": "avocado raw",
    # Dairy and eggs
    "greek yogurt": "yogurt greek plain",
    "yogurt": "yogurt plain",
    "milk": "milk whole",
    "egg": "egg whole raw",
    "eggs": "egg whole raw",
    "cheese": "cheese cheddar",
    # Fats and oils
    "olive oil": "oil olive salad or cooking",
    "coconut oil": "oil coconut",
    "butter": "butter salted",
    # Nuts and seeds
    "almond butter": "almond butter plain",
    "peanut butter": "peanut butter smooth",
    "almonds": "almonds raw",
    "walnuts": "walnuts raw",
    "cashews": "cashews raw",
    "peanuts": "peanuts raw",
    "chia seeds": "seeds chia dried",
    "flax seeds": "seeds flaxseed",
    # Legumes
    "black beans": "beans black cooked",
    "chickpeas": "chickpeas cooked",
    "lentils": "lentils cooked",
}

PROCESSING_TERMS = (
    "oil",
    "flour",
    "powder",
    "extract",
    "juice",
    "sauce",
    "syrup",
    "dried",
    "canned",
    "frozen",
)
PREPARATION_TERMS = ("canned", "mashed")
PLANT_PART_TERMS = (
    "leaves",
    "leaf",
    "stems",
    "stem",
    "seeds",
    "seed",
    "peel",
    "tops",
    "greens",
)
SNACK_TERMS = (
    "chips",
    "snacks",
    "candy",
    "crackers",
    "cookies",
    "cake",
    "pie",
    "pudding",
    "fried",
    "fries",
    "puffs",
    "roll",
    "breaded",
    "battered",
    "nuggets",
    "tenders",
    "babyfood",
    "baby food",
    "infant",
    "strained",
    "puree",
    "pureed",
    "purée",
)
ORGAN_TERMS = ("liver", "organ")

_PLURAL_SUFFIX = re.compile(r"e?s$")


def normalize_name(name: str) -> str:
    """Return the cache key form of an ingredient name."""
    return name.lower().strip()


def search_term_for(name: str) -> str:
    """Map a recipe phrasing to an FDC-friendly search term."""
    normalized = normalize_name(name)
    corrected = " ".join(
        SPELLING_CORRECTIONS.get(word, word) for word in normalized.split()
    )
    return SEARCH_TERMS.get(corrected, corrected)


@dataclass(frozen=True)
class ScoringRule:
    """A weighted heuristic; ``hits`` counts how often the weight applies."""

    name: str
    weight: float
    hits: Callable[[str, str], int]


def _query_words(query: str, description: str) -> int:
    return sum(1 for word in query.split() if len(word) > 2 and word in description)


def _raw_preferred(query: str, description: str) -> int:
    return int("raw" in description and "cooked" not in query)


def _unrequested(terms: Sequence[str]) -> Callable[[str, str], int]:
    def count(query: str, description: str) -> int:
        return sum(1 for term in terms if term in description and term not in query)

    return count


def _unless_any_requested(terms: Sequence[str]) -> Callable[[str, str], int]:
    def count(query: str, description: str) -> int:
        if any(term in query for term in terms):
            return 0
        return sum(1 for term in terms if term in description)

    return count


def _shared_stem(query: str, description: str) -> int:
    query_base = _PLURAL_SUFFIX.sub("", query)
    description_base = _PLURAL_SUFFIX.sub("", description)
    return int(query_base in description_base or description_base in query_base)


def _description_length(query: str, description: str) -> int:
    return len(description)


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("query_word", 50, _query_words),
    ScoringRule("raw", 30, _raw_preferred),
    ScoringRule("processing", -400, _unrequested(PROCESSING_TERMS)),
    ScoringRule("preparation", -300, _unrequested(PREPARATION_TERMS)),
    ScoringRule("plant_part", -500, _unless_any_requested(PLANT_PART_TERMS)),
    ScoringRule("snack", -500, _unless_any_requested(SNACK_TERMS)),
    ScoringRule("organ", -300, _unrequested(ORGAN_TERMS)),
    ScoringRule("plural_stem", 100, _shared_stem),
    ScoringRule("length", -0.5, _description_length),
)


def score_candidate(
    query: str,
    candidate: FoodCandidate,
    rules: Sequence[ScoringRule] = SCORING_RULES,
) -> float:
    """Score a candidate description against a free-text query."""
    query_lower = normalize_name(query)
    description = candidate.description.lower()
    return candidate.score + sum(
        rule.weight * rule.hits(query_lower, description) for rule in rules
    )


def rank_candidates(
    query: str,
    candidates: Sequence[FoodCandidate],
    rules: Sequence[ScoringRule] = SCORING_RULES,
) -> list[tuple[FoodCandidate, float]]:
    """Return candidates with scores, best first; ties keep database order."""
    scored = [
        (candidate, score_candidate(query, candidate, rules))
        for candidate in candidates
    ]
    return sorted(scored, key=lambda entry: entry[1], reverse=True)


def select_best_match(
    query: str,
    candidates: Sequence[FoodCandidate],
    rules: Sequence[ScoringRule] = SCORING_RULES,
) -> FoodCandidate | None:
    """Pick the highest scoring candidate, or None when there are none."""
    if not candidates:
        return None
    ranked = rank_candidates(query, candidates, rules)
    for position, (candidate, score) in enumerate(ranked[:3], start=1):
        _logger.debug(
            "Match %s for %r: %r score=%.1f fdc_id=%s",
            position,
            query,
            candidate.description,
            score,
            candidate.fdc_id,
        )
    return ranked[0][0]
