"""Meal plan validation: resolve, recompute, adjust and consolidate."""

import asyncio
import logging
from dataclasses import dataclass, field

from nutrition_validator.domain.nutrition import (
    ConversionConfidence,
    MacroProfile,
    ResolvedIngredient,
)
from nutrition_validator.domain.plans import (
    DraftDay,
    DraftMeal,
    DraftPlan,
    IngredientDetail,
    MacroTargets,
    RawIngredient,
    ValidatedDayPlan,
    ValidatedMeal,
    ValidatedMealPlan,
    ValidationSummary,
)
from nutrition_validator.services.conversions import UnitConverter
from nutrition_validator.services.grocery import consolidate
from nutrition_validator.services.ingredients import IngredientResolver
from nutrition_validator.services.macros import (
    build_day,
    build_meal,
    estimate_for_category,
    macros_for_amount,
    share_of_estimate,
)
from nutrition_validator.services.matching import normalize_name
from nutrition_validator.services.portions import PortionAdjuster

_logger = logging.getLogger(__name__)


@dataclass
class _RunLookups:
    """Shares one in-flight resolution per ingredient name within a run."""

    resolver: IngredientResolver
    tasks: dict[str, "asyncio.Task[ResolvedIngredient | None]"] = field(
        default_factory=dict
    )

    async def resolve(self, name: str) -> ResolvedIngredient | None:
        key = normalize_name(name)
        task = self.tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self.resolver.resolve(key))
            self.tasks[key] = task
        return await task


@dataclass
class MealPlanValidationService:
    """Validates a draft plan's macros against verified nutrition data."""

    resolver: IngredientResolver
    converter: UnitConverter
    adjuster: PortionAdjuster = field(default_factory=PortionAdjuster)

    async def validate_and_adjust(
        self, plan: DraftPlan, target: MacroTargets
    ) -> ValidatedMealPlan:
        """Recompute macros from verified data and rescale portions to target."""
        target_macros = target.to_profile()
        lookups = _RunLookups(self.resolver)
        days = await asyncio.gather(
            *(self._validate_day(day, lookups) for day in plan.days)
        )

        details = [
            ingredient
            for day in days
            for meal in day.meals
            for ingredient in meal.ingredients
        ]
        validated = sum(1 for ingredient in details if ingredient.verified)

        results = [self.adjuster.adjust(day, target_macros) for day in days]
        adjusted_days = [result.day for result in results]
        summary = ValidationSummary(
            ingredients_validated=validated,
            ingredients_fallback=len(details) - validated,
            adjustments_made=any(result.adjusted for result in results),
        )
        _logger.info(
            "Validated plan: days=%s verified=%s fallback=%s adjusted=%s",
            len(adjusted_days),
            summary.ingredients_validated,
            summary.ingredients_fallback,
            summary.adjustments_made,
        )
        return ValidatedMealPlan(
            days=adjusted_days,
            grocery_list=consolidate(adjusted_days),
            validation_summary=summary,
        )

    async def _validate_day(
        self, day: DraftDay, lookups: _RunLookups
    ) -> ValidatedDayPlan:
        meals = await asyncio.gather(
            *(self._validate_meal(meal, lookups) for meal in day.meals)
        )
        return build_day(day.day, list(meals))

    async def _validate_meal(
        self, meal: DraftMeal, lookups: _RunLookups
    ) -> ValidatedMeal:
        estimate_share = share_of_estimate(
            meal.macros.to_profile(), len(meal.ingredients)
        )
        details = await asyncio.gather(
            *(
                self._validate_ingredient(ingredient, estimate_share, lookups)
                for ingredient in meal.ingredients
            )
        )
        return build_meal(meal.name, meal.type, list(details))

    async def _validate_ingredient(
        self,
        ingredient: RawIngredient,
        estimate_share: MacroProfile,
        lookups: _RunLookups,
    ) -> IngredientDetail:
        resolved, conversion = await asyncio.gather(
            lookups.resolve(ingredient.name),
            self.converter.convert(ingredient.amount, ingredient.unit, ingredient.name),
        )

        low_confidence = conversion.confidence == ConversionConfidence.LOW
        verified = False
        if resolved is not None and not low_confidence:
            macros = macros_for_amount(resolved, conversion.grams)
            verified = True
        elif low_confidence:
            _logger.warning(
                "Using plan estimate for low-confidence amount: %r", ingredient.name
            )
            macros = estimate_share
        else:
            _logger.warning("Using category estimate for: %r", ingredient.name)
            macros = estimate_for_category(ingredient.category, conversion.grams)

        return IngredientDetail(
            name=ingredient.name,
            amount=ingredient.amount,
            unit=ingredient.unit,
            category=ingredient.category,
            grams=conversion.grams,
            macros=macros,
            verified=verified,
        )
