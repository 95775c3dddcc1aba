"""Tolerance checks and iterative portion adjustment for a day plan."""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from nutrition_validator.domain.nutrition import MacroProfile
from nutrition_validator.domain.plans import IngredientDetail, ValidatedDayPlan
from nutrition_validator.services.conversions import parse_amount
from nutrition_validator.services.macros import build_day, build_meal, scale_macros

_logger = logging.getLogger(__name__)


def within_tolerance(
    actual: MacroProfile, target: MacroProfile, tolerance_percent: float = 10.0
) -> bool:
    """Return True when every macro is inside the symmetric tolerance band."""
    pairs = (
        (actual.calories, target.calories),
        (actual.protein_g, target.protein_g),
        (actual.carbs_g, target.carbs_g),
        (actual.fat_g, target.fat_g),
    )
    for actual_value, target_value in pairs:
        if target_value == 0:
            if actual_value != 0:
                return False
            continue
        deviation = abs(actual_value - target_value) / target_value * 100
        if deviation > tolerance_percent:
            return False
    return True


def adjustment_factor(actual: MacroProfile, target: MacroProfile) -> float:
    """Blend calorie and protein ratios; carbs and fat are allowed to drift."""
    calories_factor = target.calories / max(actual.calories, 1)
    protein_factor = target.protein_g / max(actual.protein_g, 1)
    return 0.5 * calories_factor + 0.5 * protein_factor


class AdjustmentState(Enum):
    """States of the per-day adjustment loop."""

    CHECKING = "checking"
    ADJUSTING = "adjusting"
    CONVERGED = "converged"
    GAVE_UP = "gave_up"


@dataclass(frozen=True)
class AdjustmentResult:
    """Outcome of adjusting one day."""

    day: ValidatedDayPlan
    state: AdjustmentState
    iterations: int
    factors: tuple[float, ...] = ()

    @property
    def adjusted(self) -> bool:
        """Whether any portion was rescaled."""
        return self.iterations > 0


@dataclass
class PortionAdjuster:
    """Rescales a day's portions until its totals fall within tolerance."""

    max_iterations: int = 5
    tolerance_percent: float = 10.0

    def adjust(self, day: ValidatedDayPlan, target: MacroProfile) -> AdjustmentResult:
        """Run the adjustment loop for one day."""
        state = AdjustmentState.CHECKING
        current = day
        factors: list[float] = []
        while state in (AdjustmentState.CHECKING, AdjustmentState.ADJUSTING):
            if state is AdjustmentState.CHECKING:
                if within_tolerance(
                    current.daily_totals, target, self.tolerance_percent
                ):
                    state = AdjustmentState.CONVERGED
                elif len(factors) >= self.max_iterations:
                    state = AdjustmentState.GAVE_UP
                else:
                    state = AdjustmentState.ADJUSTING
            else:
                factor = adjustment_factor(current.daily_totals, target)
                current = scale_day(current, factor)
                factors.append(factor)
                state = AdjustmentState.CHECKING

        if state is AdjustmentState.GAVE_UP:
            _logger.warning(
                "Day %r still out of tolerance after %s adjustments: %s",
                day.day,
                len(factors),
                current.daily_totals,
            )
        elif factors:
            _logger.info(
                "Day %r converged after %s adjustments", day.day, len(factors)
            )
        return AdjustmentResult(
            day=current, state=state, iterations=len(factors), factors=tuple(factors)
        )


def scale_day(day: ValidatedDayPlan, factor: float) -> ValidatedDayPlan:
    """Multiply every ingredient portion in a day and recompute totals."""
    meals = [
        build_meal(
            meal.name,
            meal.meal_type,
            [scale_ingredient(ingredient, factor) for ingredient in meal.ingredients],
        )
        for meal in day.meals
    ]
    return build_day(day.day, meals)


def scale_ingredient(ingredient: IngredientDetail, factor: float) -> IngredientDetail:
    """Multiply grams, amount and macros of one ingredient by factor."""
    quantity = parse_amount(ingredient.amount)
    amount = (
        f"{quantity * factor:.1f}" if quantity is not None else ingredient.amount
    )
    return replace(
        ingredient,
        amount=amount,
        grams=ingredient.grams * factor,
        macros=scale_macros(ingredient.macros, factor),
    )
