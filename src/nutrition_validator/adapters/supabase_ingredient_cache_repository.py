"""Supabase repository for the resolved ingredient cache."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_validator.domain.nutrition import CachedIngredient, ResolvedIngredient
from nutrition_validator.services.ingredients import IngredientCacheRepository

_TABLE = "usda_ingredients"


@dataclass
class SupabaseIngredientCacheRepository(IngredientCacheRepository):
    """Supabase-backed cache keyed by ``ingredient_name``."""

    client: Client

    def get(self, name: str) -> CachedIngredient | None:
        """Return a cached ingredient row, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("ingredient_name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def upsert(self, record: CachedIngredient) -> None:
        """Insert or update a cached ingredient row."""
        ingredient = record.ingredient
        self.client.table(_TABLE).upsert(
            {
                "ingredient_name": ingredient.name,
                "fdc_id": ingredient.fdc_id,
                "calories_per_100g": ingredient.calories_per_100g,
                "protein_per_100g": ingredient.protein_per_100g,
                "carbs_per_100g": ingredient.carbs_per_100g,
                "fat_per_100g": ingredient.fat_per_100g,
                "updated_at": record.updated_at.isoformat(),
            },
            on_conflict="ingredient_name",
        ).execute()

    def delete(self, name: str) -> None:
        """Delete a cached ingredient row."""
        self.client.table(_TABLE).delete().eq("ingredient_name", name).execute()

    def delete_many(self, names: list[str]) -> int:
        """Delete cached rows for the given names."""
        response = (
            self.client.table(_TABLE).delete().in_("ingredient_name", names).execute()
        )
        return len(response.data or [])

    def delete_all(self) -> int:
        """Delete every cached row."""
        response = (
            self.client.table(_TABLE).delete().neq("ingredient_name", "").execute()
        )
        return len(response.data or [])


def _parse_row(row: dict[str, object]) -> CachedIngredient:
    """Parse a cache row into a domain model."""
    updated_raw = row.get("updated_at")
    updated_at = (
        datetime.fromisoformat(updated_raw)
        if isinstance(updated_raw, str) and updated_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=UTC)
    return CachedIngredient(
        ingredient=ResolvedIngredient(
            name=str(row.get("ingredient_name", "")),
            fdc_id=int(row.get("fdc_id") or 0),
            calories_per_100g=float(row.get("calories_per_100g") or 0.0),
            protein_per_100g=float(row.get("protein_per_100g") or 0.0),
            carbs_per_100g=float(row.get("carbs_per_100g") or 0.0),
            fat_per_100g=float(row.get("fat_per_100g") or 0.0),
        ),
        updated_at=updated_at,
    )
