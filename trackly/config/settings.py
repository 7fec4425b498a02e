"""
Configuration Management for Trackly

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
File locations, retry behaviour and budget thresholds are all visible in
one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the key-value blobs and the backup fallback live."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".trackly",
        description="Directory holding all persisted files"
    )
    transactions_file: str = Field(
        default="transactions_prefs.json",
        description="Key-value file holding the transactions blob"
    )
    preferences_file: str = Field(
        default="app_prefs.json",
        description="Key-value file holding scalar preferences"
    )
    backup_file: str = Field(
        default="transactions_backup.json",
        description="Internal fallback copy written on every backup"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a local file write before giving up"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file

    @property
    def preferences_path(self) -> Path:
        return self.data_dir / self.preferences_file

    @property
    def backup_path(self) -> Path:
        return self.data_dir / self.backup_file


class BudgetSettings(BaseSettings):
    """Thresholds used to classify budget usage."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    budget_warning_percent: float = Field(
        default=80.0,
        ge=0.0,
        description="Usage at which the budget is flagged as a warning"
    )
    budget_exceeded_percent: float = Field(
        default=100.0,
        ge=0.0,
        description="Usage at which the budget is flagged as exceeded"
    )

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'BudgetSettings':
        if self.budget_warning_percent > self.budget_exceeded_percent:
            raise ValueError("Warning threshold cannot be above the exceeded threshold")
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency: str = Field(
        default="USD",
        min_length=1,
        max_length=8,
        description="Currency used until the user picks one"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

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
