"""Meal plan models: draft input from the generator and validated output."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from nutrition_validator.domain.nutrition import MacroProfile


class IngredientCategory(StrEnum):
    """Grocery category assigned by the plan generator."""

    PROTEIN = "protein"
    PRODUCE = "produce"
    DAIRY = "dairy"
    GRAINS = "grains"
    PANTRY = "pantry"
    FROZEN = "frozen"
    OTHER = "other"


_CATEGORY_VALUES = frozenset(category.value for category in IngredientCategory)


class MacroTargets(BaseModel):
    """Macro values as written by the generator or the user profile."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)

    def to_profile(self) -> MacroProfile:
        """Convert to the internal macro representation."""
        return MacroProfile(
            calories=self.calories,
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
        )


class RawIngredient(BaseModel):
    """Ingredient line as produced by the plan generator."""

    name: str
    amount: str
    unit: str = ""
    category: IngredientCategory = IngredientCategory.OTHER

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _unknown_category_is_other(cls, value: object) -> object:
        if isinstance(value, str) and value.lower() in _CATEGORY_VALUES:
            return value.lower()
        return IngredientCategory.OTHER


class DraftMeal(BaseModel):
    """Meal with the generator's macro estimate."""

    name: str = ""
    type: str | None = None
    ingredients: list[RawIngredient]
    macros: MacroTargets


class DraftDay(BaseModel):
    """One day of a draft plan."""

    day: str = ""
    meals: list[DraftMeal]


class DraftPlan(BaseModel):
    """Draft meal plan to validate."""

    days: list[DraftDay]


@dataclass(frozen=True)
class IngredientDetail:
    """Per-occurrence ingredient with grams, macros and provenance."""

    name: str
    amount: str
    unit: str
    category: IngredientCategory
    grams: float
    macros: MacroProfile
    verified: bool


@dataclass(frozen=True)
class ValidatedMeal:
    """Meal whose macros are the sum of its ingredient macros."""

    name: str
    meal_type: str | None
    ingredients: list[IngredientDetail]
    macros: MacroProfile


@dataclass(frozen=True)
class ValidatedDayPlan:
    """Day whose totals are the sum of its meal macros."""

    day: str
    meals: list[ValidatedMeal]
    daily_totals: MacroProfile


@dataclass(frozen=True)
class GroceryItem:
    """Consolidated shopping list line."""

    name: str
    amount: str
    unit: str
    category: IngredientCategory


@dataclass(frozen=True)
class ValidationSummary:
    """Counts of verified and fallback ingredients for a run."""

    ingredients_validated: int
    ingredients_fallback: int
    adjustments_made: bool


@dataclass(frozen=True)
class ValidatedMealPlan:
    """Result of validating and adjusting a draft plan."""

    days: list[ValidatedDayPlan]
    grocery_list: list[GroceryItem]
    validation_summary: ValidationSummary
