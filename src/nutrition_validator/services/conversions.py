"""Conversion of free-text ingredient amounts to grams."""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nutrition_validator.domain.nutrition import ConversionConfidence, ConversionResult

_logger = logging.getLogger(__name__)

UNIT_TO_GRAMS: dict[str, float] = {
    "g": 1,
    "gram": 1,
    "grams": 1,
    "kg": 1000,
    "kilogram": 1000,
    "kilograms": 1000,
    "oz": 28.3495,
    "ounce": 28.3495,
    "ounces": 28.3495,
    "lb": 453.592,
    "lbs": 453.592,
    "pound": 453.592,
    "pounds": 453.592,
    # Volumes assume water density before the ingredient multiplier.
    "ml": 1,
    "milliliter": 1,
    "milliliters": 1,
    "l": 1000,
    "liter": 1000,
    "liters": 1000,
    "cup": 240,
    "cups": 240,
    "tbsp": 15,
    "tablespoon": 15,
    "tablespoons": 15,
    "tsp": 5,
    "teaspoon": 5,
    "teaspoons": 5,
    "fl oz": 29.5735,
    "fluid ounce": 29.5735,
    "fluid ounces": 29.5735,
}

VOLUME_UNITS = frozenset(
    {
        "ml",
        "milliliter",
        "milliliters",
        "l",
        "liter",
        "liters",
        "cup",
        "cups",
        "tbsp",
        "tablespoon",
        "tablespoons",
        "tsp",
        "teaspoon",
        "teaspoons",
        "fl oz",
        "fluid ounce",
        "fluid ounces",
    }
)

COUNTABLE_UNITS = frozenset(
    {
        "",
        "large",
        "medium",
        "small",
        "whole",
        "piece",
        "pieces",
        "slice",
        "slices",
        "clove",
        "cloves",
        "fillet",
        "fillets",
        "breast",
        "breasts",
        "thigh",
        "thighs",
    }
)

DENSITY_MULTIPLIERS: dict[str, float] = {
    "water": 1,
    "milk": 1.03,
    "olive oil": 0.92,
    "oil": 0.92,
    "honey": 1.42,
    "maple syrup": 1.37,
    "flour": 0.53,
    "almond flour": 0.48,
    "coconut flour": 0.45,
    "protein powder": 0.4,
    "cocoa powder": 0.45,
    "sugar": 0.85,
    "brown sugar": 0.83,
    "rice": 0.75,
    "oats": 0.35,
    "rolled oats": 0.35,
    "quinoa": 0.73,
    "granola": 0.45,
    "cereal": 0.4,
    "muesli": 0.45,
    "spinach": 0.25,
    "lettuce": 0.2,
    "kale": 0.25,
    "mixed greens": 0.22,
    "berries": 0.6,
    "blueberries": 0.65,
    "strawberries": 0.55,
    "raspberries": 0.5,
    "blackberries": 0.55,
    "mixed berries": 0.6,
    "almonds": 0.6,
    "walnuts": 0.55,
    "peanut butter": 1.05,
    "almond butter": 1.05,
    "greek yogurt": 1.05,
    "yogurt": 1.03,
    "cottage cheese": 0.95,
    "cheese": 0.9,
    "butter": 0.91,
}

ITEM_WEIGHTS_GRAMS: dict[str, float] = {
    "egg": 50,
    "eggs": 50,
    "large egg": 50,
    "large eggs": 50,
    "banana": 118,
    "bananas": 118,
    "apple": 182,
    "apples": 182,
    "orange": 131,
    "oranges": 131,
    "avocado": 150,
    "avocados": 150,
    "chicken breast": 174,
    "chicken breasts": 174,
    "salmon fillet": 170,
    "salmon fillets": 170,
    "sweet potato": 130,
    "sweet potatoes": 130,
    "potato": 150,
    "potatoes": 150,
    "tomato": 123,
    "tomatoes": 123,
    "onion": 110,
    "onions": 110,
    "garlic": 3,
    "garlic clove": 3,
    "garlic cloves": 3,
    "clove": 3,
    "cloves": 3,
    "lemon": 58,
    "lemons": 58,
    "lime": 44,
    "limes": 44,
    "slice": 30,
    "slices": 30,
    "piece": 100,
    "pieces": 100,
}

DEFAULT_GRAMS_PER_UNIT = 100.0

_LEADING_NUMBER = re.compile(
    r"^\s*(?:(?P<whole>\d+)\s+)?(?P<num>\d+)\s*/\s*(?P<den>\d+)"
    r"|^\s*(?P<decimal>\d+(?:\.\d+)?|\.\d+)"
)


def parse_amount(amount: str) -> float | None:
    """Parse the leading number of an amount such as "1.5", "1/2" or "1 1/2"."""
    match = _LEADING_NUMBER.match(amount)
    if match is None:
        return None
    if match.group("decimal") is not None:
        return float(match.group("decimal"))
    denominator = int(match.group("den"))
    if denominator == 0:
        return None
    whole = int(match.group("whole") or 0)
    return whole + int(match.group("num")) / denominator


class UnitConverter(Protocol):
    """Converts a textual amount and unit into grams."""

    async def convert(
        self, amount: str, unit: str, ingredient_name: str
    ) -> ConversionResult:
        """Return grams and a confidence level."""


class ConversionTableRepository(Protocol):
    """Source of maintained density and item-weight tables."""

    def load_densities(self) -> dict[str, float]:
        """Return volume density multipliers keyed by lower-case ingredient."""

    def load_item_weights(self) -> dict[str, float]:
        """Return per-item weights in grams keyed by lower-case ingredient."""


@dataclass
class StaticUnitConverter(UnitConverter):
    """Table-driven converter using unit factors, densities and item weights.

    With a ``tables`` repository the density and item-weight tables are
    reloaded once ``refresh_seconds`` have passed. An empty table or a failed
    load falls back to the built-in values.
    """

    densities: dict[str, float] = field(
        default_factory=lambda: dict(DENSITY_MULTIPLIERS)
    )
    item_weights: dict[str, float] = field(
        default_factory=lambda: dict(ITEM_WEIGHTS_GRAMS)
    )
    tables: ConversionTableRepository | None = None
    refresh_seconds: int = 300
    _expires_at: datetime | None = field(default=None, init=False, repr=False)

    async def convert(
        self, amount: str, unit: str, ingredient_name: str
    ) -> ConversionResult:
        """Convert an amount to grams."""
        self.refresh_tables()
        return self.convert_sync(amount, unit, ingredient_name)

    def refresh_tables(self) -> None:
        """Reload densities and item weights when the loaded copy has expired."""
        if self.tables is None:
            return
        now = datetime.now(tz=UTC)
        if self._expires_at is not None and now < self._expires_at:
            return
        try:
            densities = self.tables.load_densities()
            item_weights = self.tables.load_item_weights()
        except Exception:
            _logger.exception("Failed to load conversion tables, using built-ins")
            densities, item_weights = {}, {}
        self.densities = densities or dict(DENSITY_MULTIPLIERS)
        self.item_weights = item_weights or dict(ITEM_WEIGHTS_GRAMS)
        self._expires_at = now + timedelta(seconds=self.refresh_seconds)

    def convert_sync(
        self, amount: str, unit: str, ingredient_name: str
    ) -> ConversionResult:
        """Convert an amount to grams without awaiting."""
        quantity = parse_amount(amount)
        if quantity is None:
            return ConversionResult(DEFAULT_GRAMS_PER_UNIT, ConversionConfidence.LOW)

        normalized_unit = unit.lower().strip()
        normalized_name = ingredient_name.lower().strip()

        if _is_countable(normalized_unit):
            item_weight = _lookup(self.item_weights, normalized_name)
            if item_weight is not None:
                return ConversionResult(
                    quantity * item_weight, ConversionConfidence.HIGH
                )

        factor = UNIT_TO_GRAMS.get(normalized_unit)
        if factor is not None:
            if normalized_unit not in VOLUME_UNITS:
                return ConversionResult(quantity * factor, ConversionConfidence.HIGH)
            density = _lookup(self.densities, normalized_name)
            if density is None:
                return ConversionResult(quantity * factor, ConversionConfidence.MEDIUM)
            return ConversionResult(
                quantity * factor * density, ConversionConfidence.HIGH
            )

        item_weight = _lookup(self.item_weights, normalized_name)
        if item_weight is not None:
            return ConversionResult(quantity * item_weight, ConversionConfidence.MEDIUM)

        return ConversionResult(
            quantity * DEFAULT_GRAMS_PER_UNIT, ConversionConfidence.LOW
        )


def _is_countable(unit: str) -> bool:
    return unit in COUNTABLE_UNITS or parse_amount(unit) is not None


def _lookup(table: dict[str, float], name: str) -> float | None:
    """Exact match first, then the longest key sharing whole words with name.

    "eggplant" does not match "egg"; "extra virgin olive oil" matches
    "olive oil" before "oil".
    """
    if not name:
        return None
    if name in table:
        return table[name]
    for key in sorted(table, key=len, reverse=True):
        if _has_phrase(name, key) or _has_phrase(key, name):
            return table[key]
    return None


def _has_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None
