"""
Preferences Store

Scalar user settings and the single retained Budget, persisted separately
from transactions. Each value sits under its own key as a small JSON blob.

DESIGN DECISION: Setting a value always succeeds (barring I/O failure).
Reading a value that cannot be coerced to its type falls back to the
default and logs a warning - preferences are never worth failing a
screen over.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from trackly.models.transaction import Budget, Preferences
from trackly.services.storage.interface import BlobStoreInterface


logger = structlog.get_logger(__name__)

KEY_CURRENCY = "currency"
KEY_BUDGET = "budget"
KEY_NOTIFICATION_ENABLED = "notification_enabled"
KEY_REMINDER_ENABLED = "reminder_enabled"


class PreferencesStore:
    """
    Get/set accessors for currency, the two notification toggles and
    the budget.

    One instance is constructed at startup and passed to whatever needs it.
    """

    def __init__(
        self,
        blobs: BlobStoreInterface,
        default_currency: str = "USD",
    ):
        self._blobs = blobs
        self._defaults = Preferences(currency=default_currency)

    def _read_json(self, key: str) -> Optional[Any]:
        raw = self._blobs.read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("preference_unreadable", key=key)
            return None

    def _write_json(self, key: str, value: Any) -> None:
        self._blobs.write(key, json.dumps(value))

    def _read_bool(self, key: str, default: bool) -> bool:
        value = self._read_json(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        if value is not None:
            logger.warning("preference_wrong_type", key=key, value=repr(value))
        return default

    # === Currency ===

    def get_currency(self) -> str:
        value = self._read_json(KEY_CURRENCY)
        if isinstance(value, str) and value.strip():
            return value
        return self._defaults.currency

    def set_currency(self, currency: str) -> None:
        self._write_json(KEY_CURRENCY, str(currency).strip())

    # === Notification toggles ===

    def is_notification_enabled(self) -> bool:
        return self._read_bool(KEY_NOTIFICATION_ENABLED, self._defaults.notifications_enabled)

    def set_notification_enabled(self, enabled: bool) -> None:
        self._write_json(KEY_NOTIFICATION_ENABLED, bool(enabled))

    def is_reminder_enabled(self) -> bool:
        return self._read_bool(KEY_REMINDER_ENABLED, self._defaults.reminders_enabled)

    def set_reminder_enabled(self, enabled: bool) -> None:
        self._write_json(KEY_REMINDER_ENABLED, bool(enabled))

    # === Budget ===

    def get_budget(self) -> Budget:
        """
        The retained budget.

        Returns Budget.unset() (amount 0, month 0, year 0) when none was
        ever set; use Budget.applies_to() before trusting the amount.
        """
        value = self._read_json(KEY_BUDGET)
        if value is None:
            return Budget.unset()
        try:
            return Budget(
                amount=Decimal(str(value["amount"])),
                month=int(value["month"]),
                year=int(value["year"]),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation, ValidationError):
            logger.warning("budget_unreadable", value=repr(value))
            return Budget.unset()

    def set_budget(self, budget: Budget) -> None:
        """Overwrite the retained budget, whatever period it was for."""
        self._write_json(KEY_BUDGET, {
            "amount": str(budget.amount),
            "month": budget.month,
            "year": budget.year,
        })

    # === Snapshot ===

    def get_preferences(self) -> Preferences:
        return Preferences(
            currency=self.get_currency(),
            notifications_enabled=self.is_notification_enabled(),
            reminders_enabled=self.is_reminder_enabled(),
        )
