"""Configuration package."""

from trackly.config.settings import (
    AppSettings,
    BudgetSettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
