"""
Configuration Management for DietSplit

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The allocation engine itself needs none of it; only the collaborators
(text extraction, history storage) and presentation defaults do.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini configuration for the receipt text extractor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class HistorySettings(BaseSettings):
    """Split history storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HISTORY_",
        extra="ignore"
    )

    file_path: str = Field(
        default="dietsplit_history.json",
        description="Path of the JSON file holding saved splits"
    )
    max_entries: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Oldest splits beyond this count are dropped"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level, including ignored unknown ids"
    )

    currency_places: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Decimal places used when presenting money"
    )
    tax_percent_epsilon: float = Field(
        default=0.005,
        gt=0.0,
        description="Smallest tax change applied by percent mode"
    )
    max_dish_price: float = Field(
        default=100000.0,
        gt=0.0,
        description="Extracted dishes above this price are dropped as misreads"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Loaded lazily so the engine works without an API key

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def history(self) -> HistorySettings:
        return HistorySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    """
    results = {}

    settings = get_settings()

    for name in ("gemini", "history", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
