"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at call time."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_page_size: int = 10
    fdc_data_types: list[str] = ["SR Legacy", "Foundation"]
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    admin_token: str | None = None
    cache_freshness_days: int = 90
    tolerance_percent: float = 10.0
    max_adjustment_iterations: int = 5
    conversion_tables_refresh_seconds: int = 300
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase_cache(self) -> bool:
        """Return True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)
