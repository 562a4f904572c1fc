"""
Configuration Management for SubTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external resource is the local SQLite file, but the
thresholds used by validation live here as well so they can be
tuned without touching code.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "subtrack" / "expenses.db"


class DatabaseSettings(BaseSettings):
    """Local SQLite database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUBTRACK_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: Path = Field(
        default=DEFAULT_DB_PATH,
        description="Path to the SQLite database file"
    )

    @field_validator('path')
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand ~ so the path can come straight from a .env file."""
        return Path(v).expanduser()


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Categories offered by the add-operation form
    categories: str = Field(
        default="Food,Transport,Housing,Entertainment,Other",
        description="Comma-separated list of operation categories"
    )

    # Validation thresholds
    max_operation_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amount above which an operation is flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=366,
        ge=0,
        description="How many days in the future an operation date can be"
    )

    # Month filter
    recurring_since_start: bool = Field(
        default=False,
        description="Only show recurring operations from their own month onwards"
    )

    @property
    def categories_list(self) -> list[str]:
        """Get categories as a list."""
        return [cat.strip() for cat in self.categories.split(",") if cat.strip()]


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

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

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

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failing section.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
