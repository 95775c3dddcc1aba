"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_validator.adapters.fdc_client import FdcClient
from nutrition_validator.config import Settings
from nutrition_validator.containers import AppContainer
from nutrition_validator.domain.nutrition import (
    ConversionConfidence,
    ConversionResult,
    MacroProfile,
)
from nutrition_validator.domain.plans import (
    IngredientCategory,
    IngredientDetail,
    ValidatedDayPlan,
)
from nutrition_validator.services.cache import InMemoryIngredientCache
from nutrition_validator.services.conversions import (
    StaticUnitConverter,
    UnitConverter,
)
from nutrition_validator.services.ingredients import IngredientResolver
from nutrition_validator.services.macros import build_day, build_meal
from nutrition_validator.services.nutrition import NutritionService
from nutrition_validator.services.portions import PortionAdjuster
from nutrition_validator.services.validation import MealPlanValidationService

RICE_FDC_ID = 169756


def nutrient_rows(
    calories: float, protein: float, carbs: float, fat: float
) -> list[dict[str, object]]:
    """FDC nutrient rows in the SR Legacy nested shape."""
    return [
        {"nutrient": {"number": "208", "name": "Energy"}, "amount": calories},
        {"nutrient": {"number": "203", "name": "Protein"}, "amount": protein},
        {"nutrient": {"number": "205", "name": "Carbohydrate"}, "amount": carbs},
        {"nutrient": {"number": "204", "name": "Total lipid"}, "amount": fat},
    ]


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    foods: list[dict[str, object]] = field(
        default_factory=lambda: [
            {
                "fdcId": RICE_FDC_ID,
                "description": "Rice, white, long-grain, regular, raw, enriched",
                "dataType": "SR Legacy",
            }
        ]
    )
    nutrients: dict[int, list[dict[str, object]]] = field(
        default_factory=lambda: {RICE_FDC_ID: nutrient_rows(130, 2.7, 28.2, 0.3)}
    )
    error: Exception | None = None
    search_queries: list[str] = field(default_factory=list)
    food_calls: list[int] = field(default_factory=list)

    async def search_foods(
        self,
        query: str,
        page_size: int = 10,
        data_types: list[str] | None = None,
    ) -> dict[str, object]:
        self.search_queries.append(query)
        if self.error is not None:
            raise self.error
        return {"foods": self.foods}

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls.append(fdc_id)
        if self.error is not None:
            raise self.error
        description = next(
            (food["description"] for food in self.foods if food["fdcId"] == fdc_id),
            "",
        )
        return {
            "fdcId": fdc_id,
            "description": description,
            "foodNutrients": self.nutrients.get(fdc_id, []),
        }


@dataclass
class FakeUnitConverter(UnitConverter):
    """Returns a fixed conversion, optionally overridden per ingredient name."""

    result: ConversionResult = ConversionResult(100.0, ConversionConfidence.HIGH)
    by_name: dict[str, ConversionResult] = field(default_factory=dict)

    async def convert(
        self, amount: str, unit: str, ingredient_name: str
    ) -> ConversionResult:
        return self.by_name.get(ingredient_name, self.result)


def make_resolver(
    fdc_client: FdcClient, cache: InMemoryIngredientCache | None = None
) -> IngredientResolver:
    return IngredientResolver(
        nutrition_service=NutritionService(fdc_client, retry_delay_seconds=0),
        cache=cache if cache is not None else InMemoryIngredientCache(),
    )


def make_detail(  # noqa: PLR0913
    name: str,
    amount: str = "100",
    unit: str = "g",
    category: IngredientCategory = IngredientCategory.OTHER,
    grams: float = 100.0,
    macros: MacroProfile | None = None,
    verified: bool = True,
) -> IngredientDetail:
    return IngredientDetail(
        name=name,
        amount=amount,
        unit=unit,
        category=category,
        grams=grams,
        macros=macros or MacroProfile(100, 10, 10, 5),
        verified=verified,
    )


def make_day(day: str, *ingredients: IngredientDetail) -> ValidatedDayPlan:
    """A day with a single meal holding the given ingredients."""
    return build_day(day, [build_meal("Meal", "lunch", list(ingredients))])


def make_container(
    settings: Settings,
    fdc_client: FdcClient,
    converter: UnitConverter | None = None,
) -> AppContainer:
    resolver = make_resolver(fdc_client)
    validation_service = MealPlanValidationService(
        resolver=resolver,
        converter=converter or StaticUnitConverter(),
        adjuster=PortionAdjuster(
            max_iterations=settings.max_adjustment_iterations,
            tolerance_percent=settings.tolerance_percent,
        ),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ingredient_resolver=resolver,
        validation_service=validation_service,
        close_resources=close_resources,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fdc_api_key="fdc-key",
        supabase_url=None,
        supabase_service_key=None,
        admin_token="admin-token",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(settings: Settings, fdc_client: FakeFdcClient) -> AppContainer:
    return make_container(settings, fdc_client)
