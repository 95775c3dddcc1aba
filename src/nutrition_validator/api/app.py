"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from nutrition_validator.api.admin import router as admin_router
from nutrition_validator.app_logging import configure_logging
from nutrition_validator.config import ConfigurationError
from nutrition_validator.containers import AppContainer
from nutrition_validator.domain.nutrition import MacroProfile
from nutrition_validator.domain.plans import (
    DraftPlan,
    GroceryItem,
    IngredientDetail,
    MacroTargets,
    ValidatedDayPlan,
    ValidatedMeal,
    ValidatedMealPlan,
)


class ValidatePlanRequest(BaseModel):
    """Draft plan plus the user's daily targets."""

    plan: DraftPlan
    target: MacroTargets


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/meal-plans/validate")
    async def validate_meal_plan(
        payload: ValidatePlanRequest, request: Request
    ) -> dict[str, object]:
        """Validate a draft plan and return adjusted days and a grocery list."""
        state_container: AppContainer = request.app.state.container
        try:
            result = await state_container.validation_service.validate_and_adjust(
                payload.plan, payload.target
            )
        except ConfigurationError as exc:
            logger.error("Meal plan validation unavailable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc
        return _serialize_plan(result)

    return app


def _serialize_macros(macros: MacroProfile) -> dict[str, float]:
    return {
        "calories": macros.calories,
        "protein": macros.protein_g,
        "carbs": macros.carbs_g,
        "fat": macros.fat_g,
    }


def _serialize_ingredient(ingredient: IngredientDetail) -> dict[str, object]:
    return {
        "name": ingredient.name,
        "amount": ingredient.amount,
        "unit": ingredient.unit,
        "category": ingredient.category.value,
        "grams": round(ingredient.grams, 1),
        "macros": _serialize_macros(ingredient.macros),
        "verified": ingredient.verified,
    }


def _serialize_meal(meal: ValidatedMeal) -> dict[str, object]:
    return {
        "name": meal.name,
        "type": meal.meal_type,
        "ingredients": [_serialize_ingredient(item) for item in meal.ingredients],
        "macros": _serialize_macros(meal.macros),
    }


def _serialize_day(day: ValidatedDayPlan) -> dict[str, object]:
    return {
        "day": day.day,
        "meals": [_serialize_meal(meal) for meal in day.meals],
        "daily_totals": _serialize_macros(day.daily_totals),
    }


def _serialize_grocery_item(item: GroceryItem) -> dict[str, str]:
    return {
        "name": item.name,
        "amount": item.amount,
        "unit": item.unit,
        "category": item.category.value,
    }


def _serialize_plan(plan: ValidatedMealPlan) -> dict[str, object]:
    summary = plan.validation_summary
    return {
        "days": [_serialize_day(day) for day in plan.days],
        "grocery_list": [_serialize_grocery_item(item) for item in plan.grocery_list],
        "validation_summary": {
            "ingredients_validated": summary.ingredients_validated,
            "ingredients_fallback": summary.ingredients_fallback,
            "adjustments_made": summary.adjustments_made,
        },
    }
