"""Dependency container wiring for the validation engine."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_validator.adapters.fdc_client import HttpxFdcClient
from nutrition_validator.adapters.supabase_conversion_table_repository import (
    SupabaseConversionTableRepository,
)
from nutrition_validator.adapters.supabase_ingredient_cache_repository import (
    SupabaseIngredientCacheRepository,
)
from nutrition_validator.config import Settings
from nutrition_validator.services.cache import InMemoryIngredientCache
from nutrition_validator.services.conversions import StaticUnitConverter
from nutrition_validator.services.ingredients import (
    IngredientCacheRepository,
    IngredientResolver,
)
from nutrition_validator.services.nutrition import NutritionService
from nutrition_validator.services.portions import PortionAdjuster
from nutrition_validator.services.validation import MealPlanValidationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_resolver: IngredientResolver
    validation_service: MealPlanValidationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    cache: IngredientCacheRepository
    converter = StaticUnitConverter(
        refresh_seconds=resolved_settings.conversion_tables_refresh_seconds
    )
    if resolved_settings.uses_supabase_cache:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        cache = SupabaseIngredientCacheRepository(supabase_client)
        converter.tables = SupabaseConversionTableRepository(supabase_client)
    else:
        cache = InMemoryIngredientCache()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        page_size=resolved_settings.fdc_page_size,
        data_types=resolved_settings.fdc_data_types,
    )
    resolver = IngredientResolver(
        nutrition_service=nutrition_service,
        cache=cache,
        freshness_days=resolved_settings.cache_freshness_days,
    )
    validation_service = MealPlanValidationService(
        resolver=resolver,
        converter=converter,
        adjuster=PortionAdjuster(
            max_iterations=resolved_settings.max_adjustment_iterations,
            tolerance_percent=resolved_settings.tolerance_percent,
        ),
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        ingredient_resolver=resolver,
        validation_service=validation_service,
        close_resources=close_resources,
    )
