"""In-memory ingredient cache."""

from dataclasses import dataclass

from nutrition_validator.domain.nutrition import CachedIngredient
from nutrition_validator.services.ingredients import IngredientCacheRepository


@dataclass
class InMemoryIngredientCache(IngredientCacheRepository):
    """Process-local cache used when no database is configured."""

    _entries: dict[str, CachedIngredient]

    def __init__(self, entries: list[CachedIngredient] | None = None) -> None:
        self._entries = {}
        for entry in entries or []:
            self.upsert(entry)

    def get(self, name: str) -> CachedIngredient | None:
        """Return a cached ingredient by normalized name."""
        return self._entries.get(name)

    def upsert(self, record: CachedIngredient) -> None:
        """Store a cached ingredient, replacing any previous value."""
        self._entries[record.ingredient.name] = record

    def delete(self, name: str) -> None:
        """Drop a cached ingredient if present."""
        self._entries.pop(name, None)

    def delete_many(self, names: list[str]) -> int:
        """Drop the named ingredients."""
        removed = 0
        for name in names:
            if self._entries.pop(name, None) is not None:
                removed += 1
        return removed

    def delete_all(self) -> int:
        """Drop every cached ingredient."""
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def __len__(self) -> int:
        return len(self._entries)
