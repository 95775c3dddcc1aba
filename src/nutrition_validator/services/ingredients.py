"""Ingredient resolution against the cache and FoodData Central."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nutrition_validator.config import ConfigurationError
from nutrition_validator.domain.nutrition import CachedIngredient, ResolvedIngredient
from nutrition_validator.services.matching import (
    normalize_name,
    search_term_for,
    select_best_match,
)
from nutrition_validator.services.nutrition import NutritionService

_logger = logging.getLogger(__name__)


class IngredientCacheRepository(Protocol):
    """Persistence interface for resolved ingredients keyed by normalized name."""

    def get(self, name: str) -> CachedIngredient | None:
        """Return the cached ingredient, if present."""

    def upsert(self, record: CachedIngredient) -> None:
        """Insert or replace the cached ingredient."""

    def delete(self, name: str) -> None:
        """Delete a cached ingredient."""

    def delete_many(self, names: list[str]) -> int:
        """Delete the named ingredients and return how many were removed."""

    def delete_all(self) -> int:
        """Delete every cached ingredient and return how many were removed."""


def is_cache_entry_valid(ingredient: ResolvedIngredient) -> bool:
    """Return False when cached per-100g values look corrupted."""
    calories = ingredient.calories_per_100g
    protein = ingredient.protein_per_100g
    carbs = ingredient.carbs_per_100g
    fat = ingredient.fat_per_100g

    is_pure_fat = fat > 80 and calories > 800
    if calories > 50 and carbs == 0 and not is_pure_fat:
        _logger.warning(
            "Cache entry %r has calories=%s but carbs=0", ingredient.name, calories
        )
        return False

    if calories > 0 and protein == 0 and carbs == 0 and fat == 0:
        _logger.warning(
            "Cache entry %r has calories=%s but no macros", ingredient.name, calories
        )
        return False

    expected_calories = protein * 4 + carbs * 4 + fat * 9
    if expected_calories < 20 and calories > 80:
        _logger.warning(
            "Cache entry %r has calories=%s but macros imply %s",
            ingredient.name,
            calories,
            expected_calories,
        )
        return False

    return True


@dataclass
class IngredientResolver:
    """Resolves ingredient names to verified per-100g macros."""

    nutrition_service: NutritionService
    cache: IngredientCacheRepository
    freshness_days: int = 90

    async def resolve(self, name: str) -> ResolvedIngredient | None:
        """Return per-100g macros for an ingredient, or None without a match."""
        normalized = normalize_name(name)
        cached = self._read_fresh(normalized)
        if cached is not None:
            return cached

        try:
            resolved = await self._fetch(normalized)
        except ConfigurationError:
            raise
        except Exception:
            _logger.exception("FDC lookup failed for %r", name)
            return None
        if resolved is None:
            return None

        try:
            self.cache.upsert(
                CachedIngredient(ingredient=resolved, updated_at=datetime.now(tz=UTC))
            )
        except Exception:
            _logger.exception("Failed to cache ingredient %r", normalized)
        return resolved

    def clear_all(self) -> int:
        """Remove every cached ingredient."""
        cleared = self.cache.delete_all()
        _logger.info("Cleared %s cached ingredients", cleared)
        return cleared

    def clear(self, names: Iterable[str]) -> int:
        """Remove the named ingredients from the cache."""
        normalized = sorted({normalize_name(name) for name in names if name.strip()})
        if not normalized:
            return 0
        cleared = self.cache.delete_many(normalized)
        _logger.info("Cleared %s of %s named ingredients", cleared, len(normalized))
        return cleared

    def _read_fresh(self, normalized: str) -> ResolvedIngredient | None:
        try:
            entry = self.cache.get(normalized)
        except Exception:
            _logger.exception("Failed to read cached ingredient %r", normalized)
            return None
        if entry is None:
            return None

        age = datetime.now(tz=UTC) - entry.updated_at
        if age >= timedelta(days=self.freshness_days):
            _logger.info("Cached ingredient %r is stale, re-fetching", normalized)
            return None

        if not is_cache_entry_valid(entry.ingredient):
            _logger.info("Cached ingredient %r invalidated, re-fetching", normalized)
            try:
                self.cache.delete(normalized)
            except Exception:
                _logger.exception("Failed to delete cached ingredient %r", normalized)
            return None

        _logger.debug("Cache hit for %r", normalized)
        return entry.ingredient

    async def _fetch(self, normalized: str) -> ResolvedIngredient | None:
        candidates = await self.nutrition_service.search(search_term_for(normalized))
        best = select_best_match(normalized, candidates)
        if best is None:
            _logger.warning("No FDC results for %r", normalized)
            return None

        details = await self.nutrition_service.get_food(best.fdc_id)
        _logger.info(
            "Resolved %r to %r (fdc_id=%s)",
            normalized,
            best.description,
            details.fdc_id,
        )
        return ResolvedIngredient(
            name=normalized,
            fdc_id=details.fdc_id,
            calories_per_100g=details.macros.calories,
            protein_per_100g=details.macros.protein_g,
            carbs_per_100g=details.macros.carbs_g,
            fat_per_100g=details.macros.fat_g,
        )
