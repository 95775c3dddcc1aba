"""Nutrition domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient totals for a portion, meal or day."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


ZERO_MACROS = MacroProfile(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class FoodCandidate:
    """A search hit from FoodData Central."""

    fdc_id: int
    description: str
    score: float = 0.0


@dataclass(frozen=True)
class FoodDetails:
    """Per-100g macros for a single FDC food."""

    fdc_id: int
    description: str
    macros: MacroProfile


@dataclass(frozen=True)
class ResolvedIngredient:
    """Verified per-100g macros for a normalized ingredient name."""

    name: str
    fdc_id: int
    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float


@dataclass(frozen=True)
class CachedIngredient:
    """A resolved ingredient as stored in the cache."""

    ingredient: ResolvedIngredient
    updated_at: datetime


class ConversionConfidence(StrEnum):
    """How much an amount-to-grams conversion can be trusted."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ConversionResult:
    """Grams for an ingredient amount with a confidence level."""

    grams: float
    confidence: ConversionConfidence
