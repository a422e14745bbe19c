"""
Runtime configuration loaded from environment variables.

Detection thresholds are policy constants in ``personasense.features.thresholds``
and are not read from the environment.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PERSONASENSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "personasense"
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings object."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache (mainly for tests)."""
    get_settings.cache_clear()
