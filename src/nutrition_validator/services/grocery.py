"""Grocery list consolidation from validated day plans."""

from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_validator.domain.plans import (
    GroceryItem,
    IngredientCategory,
    ValidatedDayPlan,
)
from nutrition_validator.services.conversions import parse_amount
from nutrition_validator.services.macros import round_half_up

REPEATED_MEAL_THRESHOLD = 7
REPEATED_MEAL_SUFFIX = " (x7)"


@dataclass
class _GroceryEntry:
    name: str
    unit: str
    category: IngredientCategory
    first_amount: str
    total: float = 0.0
    numeric: bool = False
    occurrences: int = 0


def format_amount(total: float) -> str:
    """Format a summed quantity for display."""
    if total >= 10:
        return str(int(round_half_up(total)))
    if total >= 1:
        return f"{round_half_up(total, 1):g}"
    return f"{round_half_up(total, 2):g}"


def consolidate(days: Iterable[ValidatedDayPlan]) -> list[GroceryItem]:
    """Merge ingredient occurrences across a plan into a shopping list."""
    entries: dict[tuple[str, str], _GroceryEntry] = {}
    for day in days:
        for meal in day.meals:
            for ingredient in meal.ingredients:
                key = (ingredient.name.lower(), ingredient.unit.lower())
                entry = entries.get(key)
                if entry is None:
                    entry = _GroceryEntry(
                        name=ingredient.name,
                        unit=ingredient.unit,
                        category=ingredient.category,
                        first_amount=ingredient.amount,
                    )
                    entries[key] = entry
                entry.occurrences += 1
                quantity = parse_amount(ingredient.amount)
                if quantity is not None:
                    entry.total += quantity
                    entry.numeric = True

    items = [_to_item(entry) for entry in entries.values()]
    return sorted(items, key=lambda item: (item.category.value, item.name.lower()))


def _to_item(entry: _GroceryEntry) -> GroceryItem:
    name = entry.name
    if entry.occurrences >= REPEATED_MEAL_THRESHOLD:
        name = f"{name}{REPEATED_MEAL_SUFFIX}"
    amount = format_amount(entry.total) if entry.numeric else entry.first_amount
    return GroceryItem(
        name=name,
        amount=amount,
        unit=entry.unit,
        category=entry.category,
    )
