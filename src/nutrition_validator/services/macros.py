"""Macro arithmetic: portion scaling, sums and category estimates."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from nutrition_validator.domain.nutrition import (
    ZERO_MACROS,
    MacroProfile,
    ResolvedIngredient,
)
from nutrition_validator.domain.plans import (
    IngredientCategory,
    IngredientDetail,
    ValidatedDayPlan,
    ValidatedMeal,
)

CATEGORY_ESTIMATES_PER_100G: dict[IngredientCategory, MacroProfile] = {
    IngredientCategory.PROTEIN: MacroProfile(165, 25, 0, 7),
    IngredientCategory.PRODUCE: MacroProfile(35, 2, 7, 0.3),
    IngredientCategory.DAIRY: MacroProfile(100, 8, 5, 6),
    IngredientCategory.GRAINS: MacroProfile(130, 4, 27, 1),
    IngredientCategory.PANTRY: MacroProfile(100, 3, 20, 2),
    IngredientCategory.FROZEN: MacroProfile(80, 4, 15, 1),
    IngredientCategory.OTHER: MacroProfile(100, 5, 15, 3),
}


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a pocket calculator (0.5 goes up)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_macros(macros: MacroProfile) -> MacroProfile:
    """Round calories to whole numbers and grams to one decimal."""
    return MacroProfile(
        calories=round_half_up(macros.calories),
        protein_g=round_half_up(macros.protein_g, 1),
        carbs_g=round_half_up(macros.carbs_g, 1),
        fat_g=round_half_up(macros.fat_g, 1),
    )


def scale_macros(macros: MacroProfile, factor: float) -> MacroProfile:
    """Multiply every macro by factor and round at the leaf."""
    return round_macros(
        MacroProfile(
            calories=macros.calories * factor,
            protein_g=macros.protein_g * factor,
            carbs_g=macros.carbs_g * factor,
            fat_g=macros.fat_g * factor,
        )
    )


def macros_for_amount(resolved: ResolvedIngredient, grams: float) -> MacroProfile:
    """Absolute macros for grams of an ingredient with per-100g data."""
    per_100g = MacroProfile(
        calories=resolved.calories_per_100g,
        protein_g=resolved.protein_per_100g,
        carbs_g=resolved.carbs_per_100g,
        fat_g=resolved.fat_per_100g,
    )
    return scale_macros(per_100g, grams / 100)


def estimate_for_category(category: IngredientCategory, grams: float) -> MacroProfile:
    """Rough macros for grams of an ingredient known only by its category."""
    base = CATEGORY_ESTIMATES_PER_100G.get(
        category, CATEGORY_ESTIMATES_PER_100G[IngredientCategory.OTHER]
    )
    return scale_macros(base, grams / 100)


def share_of_estimate(
    meal_estimate: MacroProfile, ingredient_count: int
) -> MacroProfile:
    """Split a meal-level estimate evenly across its ingredients."""
    if ingredient_count <= 0:
        return ZERO_MACROS
    return scale_macros(meal_estimate, 1 / ingredient_count)


def sum_macros(items: Iterable[MacroProfile]) -> MacroProfile:
    """Add macro profiles without rounding."""
    total = ZERO_MACROS
    for item in items:
        total = MacroProfile(
            calories=total.calories + item.calories,
            protein_g=total.protein_g + item.protein_g,
            carbs_g=total.carbs_g + item.carbs_g,
            fat_g=total.fat_g + item.fat_g,
        )
    return total


def build_meal(
    name: str, meal_type: str | None, ingredients: list[IngredientDetail]
) -> ValidatedMeal:
    """Create a meal whose macros are the sum of its ingredients."""
    return ValidatedMeal(
        name=name,
        meal_type=meal_type,
        ingredients=ingredients,
        macros=sum_macros(ingredient.macros for ingredient in ingredients),
    )


def build_day(day: str, meals: list[ValidatedMeal]) -> ValidatedDayPlan:
    """Create a day whose totals are the sum of its meals."""
    return ValidatedDayPlan(
        day=day,
        meals=meals,
        daily_totals=sum_macros(meal.macros for meal in meals),
    )
