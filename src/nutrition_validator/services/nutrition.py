"""Nutrition lookups against USDA FDC."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nutrition_validator.adapters.fdc_client import FdcClient
from nutrition_validator.config import ConfigurationError
from nutrition_validator.domain.nutrition import (
    FoodCandidate,
    FoodDetails,
    MacroProfile,
)

# SR Legacy reports nutrient numbers (208, 203, ...), newer datasets report
# nutrient ids (1008, 1003, ...) and Foundation foods report energy as Atwater
# factors (957/958, ids 2047/2048). The first code present wins.
NUTRIENT_CODES: dict[str, tuple[str, ...]] = {
    "calories": ("208", "1008", "957", "958", "2047", "2048"),
    "protein": ("203", "1003"),
    "carbs": ("205", "1005"),
    "fat": ("204", "1004"),
}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Service for FDC searches and per-100g macro extraction."""

    fdc_client: FdcClient
    page_size: int = 10
    data_types: list[str] = field(default_factory=lambda: ["SR Legacy", "Foundation"])
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str) -> list[FoodCandidate]:
        """Search FDC foods and return candidates in database order."""
        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(
                query, page_size=self.page_size, data_types=self.data_types
            ),
            action=f"search:{query}",
        )
        candidates = []
        for food in payload.get("foods") or []:
            fdc_id = food.get("fdcId")
            if fdc_id is None:
                continue
            candidates.append(
                FoodCandidate(
                    fdc_id=int(fdc_id),
                    description=str(food.get("description") or ""),
                    score=_to_float(food.get("score")),
                )
            )
        return candidates

    async def get_food(self, fdc_id: int) -> FoodDetails:
        """Retrieve per-100g macros for an FDC food."""
        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        macros = extract_macros(payload.get("foodNutrients") or [])
        if macros.carbs_g == 0 and macros.calories > 0:
            _logger.warning(
                "FDC food %s reports calories=%s but no carbohydrate value",
                fdc_id,
                macros.calories,
            )
        return FoodDetails(
            fdc_id=int(payload.get("fdcId") or fdc_id),
            description=str(payload.get("description") or ""),
            macros=macros,
        )

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except ConfigurationError:
                raise
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "FDC %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def extract_macros(food_nutrients: list[dict[str, object]]) -> MacroProfile:
    """Extract calories, protein, carbs and fat from FDC nutrient rows."""
    by_code: dict[str, float] = {}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        value = nutrient.get("amount")
        if value is None:
            value = nutrient.get("value")
        if value is None:
            continue
        codes = (
            nutrient_info.get("number"),
            nutrient_info.get("id"),
            nutrient.get("nutrientNumber"),
            nutrient.get("nutrientId"),
        )
        for code in codes:
            if code is not None and str(code) not in by_code:
                by_code[str(code)] = float(value)

    def first_present(macro: str) -> float:
        for code in NUTRIENT_CODES[macro]:
            if code in by_code:
                return by_code[code]
        return 0.0

    return MacroProfile(
        calories=first_present("calories"),
        protein_g=first_present("protein"),
        carbs_g=first_present("carbs"),
        fat_g=first_present("fat"),
    )


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _to_float(value: object) -> float:
    if isinstance(value, int | float):
        return float(value)
    return 0.0
