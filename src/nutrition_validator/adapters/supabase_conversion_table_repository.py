"""Supabase repository for maintained unit conversion tables."""

from dataclasses import dataclass

from supabase import Client

from nutrition_validator.services.conversions import ConversionTableRepository


@dataclass
class SupabaseConversionTableRepository(ConversionTableRepository):
    """Reads ``density_multipliers`` and ``item_weights`` rows."""

    client: Client

    def load_densities(self) -> dict[str, float]:
        """Return density multipliers keyed by lower-case ingredient name."""
        return _load(self.client, "density_multipliers", "multiplier")

    def load_item_weights(self) -> dict[str, float]:
        """Return item weights in grams keyed by lower-case ingredient name."""
        return _load(self.client, "item_weights", "weight_grams")


def _load(client: Client, table: str, column: str) -> dict[str, float]:
    response = client.table(table).select(f"ingredient_name, {column}").execute()
    values: dict[str, float] = {}
    for row in response.data or []:
        name = str(row.get("ingredient_name") or "").lower().strip()
        value = row.get(column)
        if name and value is not None:
            values[name] = float(value)
    return values
