"""
Centralized configuration for the Safar backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, DEMO_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Safar"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase (client-side auth uses the anon key only)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Local durable store. Empty path keeps everything in memory.
    local_store_path: str = ""

    # Demo mode
    demo_email: str = "demo@safar.com"
    demo_display_name: str = "Demo User"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
