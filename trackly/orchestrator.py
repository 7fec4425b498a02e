"""
Main Orchestrator for Trackly

This module ties the components together and defines the operations the
UI collaborators call:
1. Add / edit / delete transactions (each followed by a budget check)
2. List transactions and period summaries
3. Set the budget and preferences
4. Backup and restore

DESIGN DECISION: The orchestrator is the recoverable boundary. Components
raise typed errors; every operation here turns them into an
OperationResult with a short status and a message the UI can show as-is.
Nothing a user can trigger from a screen crashes the process.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from trackly.audit import AuditLogger, setup_logging
from trackly.config import Settings, get_settings
from trackly.models.transaction import (
    Budget,
    OperationResult,
    Transaction,
)
from trackly.queries import PeriodSummaryBuilder
from trackly.services.backup import (
    BackupError,
    BackupManager,
    ExternalTarget,
    InvalidBackupError,
    NoBackupFoundError,
    NothingToBackUpError,
)
from trackly.services.budget import AlertHandler, BudgetNotifier
from trackly.services.storage import (
    IOFailureError,
    JsonFileBlobStore,
    MalformedRecordError,
    PreferencesStore,
    StorageError,
    TransactionStore,
)


logger = structlog.get_logger(__name__)

# Failure type -> (status, user-facing message)
_FAILURES: list[tuple[type, str, str]] = [
    (MalformedRecordError, "malformed_record", "Saved data is damaged and could not be read"),
    (NothingToBackUpError, "nothing_to_back_up", "No transactions to back up"),
    (NoBackupFoundError, "no_backup_found", "No backup found to restore"),
    (InvalidBackupError, "invalid_backup", "The backup file is empty or invalid"),
    (IOFailureError, "io_failure", "Could not access the file"),
]


def failure_result(error: Exception) -> OperationResult:
    """Map a component error to an OperationResult."""
    for error_type, status, message in _FAILURES:
        if isinstance(error, error_type):
            return OperationResult.failed(status, message)
    return OperationResult.failed("error", "Something went wrong")


class TracklyService:
    """
    Collaborator-facing facade over the stores, backup and budget check.

    One instance per process, built by `create_app_components()`.
    """

    def __init__(
        self,
        transactions: TransactionStore,
        preferences: PreferencesStore,
        backups: BackupManager,
        notifier: BudgetNotifier,
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = date.today,
    ):
        self.transactions = transactions
        self.preferences = preferences
        self.backups = backups
        self.notifier = notifier
        self._summaries = PeriodSummaryBuilder(transactions)
        self._audit_logger = audit_logger
        self._today = today

    def _fail(self, operation: str, error: Exception) -> OperationResult:
        result = failure_result(error)
        logger.warning(
            "operation_failed",
            operation=operation,
            status=result.status,
            error=str(error),
        )
        if self._audit_logger and isinstance(error, (MalformedRecordError, IOFailureError)):
            self._audit_logger.log_error(type(error).__name__, str(error), {"operation": operation})
        return result

    def _check_budget(self) -> None:
        """Side check after every write; never fails the write itself."""
        today = self._today()
        try:
            self.notifier.check_and_alert(today.month, today.year)
        except StorageError as e:
            logger.warning("budget_check_failed", error=str(e))

    # === Transactions ===

    def add_transaction(
        self,
        title: str,
        amount: Decimal,
        category: str,
        is_expense: bool,
        when: Optional[datetime] = None,
    ) -> OperationResult:
        """Create a transaction with a fresh id and persist it."""
        try:
            transaction = Transaction(
                title=title,
                amount=amount,
                category=category,
                date=when if when is not None else datetime.now(),
                is_expense=is_expense,
            )
        except ValidationError as e:
            logger.info("transaction_rejected", errors=e.error_count())
            return OperationResult.failed("invalid_transaction", "Check the amount and details")
        return self.save_transaction(transaction, message="Transaction added")

    def update_transaction(self, transaction: Transaction) -> OperationResult:
        """Persist an edited transaction in place, keyed by its id."""
        return self.save_transaction(transaction, message="Transaction updated")

    def save_transaction(
        self,
        transaction: Transaction,
        message: str = "Transaction saved",
    ) -> OperationResult:
        try:
            self.transactions.save(transaction)
        except StorageError as e:
            return self._fail("save_transaction", e)

        if self._audit_logger:
            self._audit_logger.log_transaction_saved(
                transaction_id=transaction.id,
                title=transaction.title,
                amount=str(transaction.amount),
                is_expense=transaction.is_expense,
            )
        self._check_budget()
        return OperationResult.ok(message, data=transaction)

    def delete_transaction(self, transaction_id: str) -> OperationResult:
        try:
            removed = self.transactions.delete(transaction_id)
        except StorageError as e:
            return self._fail("delete_transaction", e)

        if self._audit_logger and removed:
            self._audit_logger.log_transaction_deleted(transaction_id, removed)
        self._check_budget()
        return OperationResult.ok("Transaction deleted", data=removed)

    def list_transactions(self, limit: Optional[int] = None) -> OperationResult:
        """All transactions, most recent first."""
        try:
            return OperationResult.ok(data=self.transactions.recent(limit))
        except StorageError as e:
            return self._fail("list_transactions", e)

    def period_summary(self, month: int, year: int) -> OperationResult:
        try:
            return OperationResult.ok(data=self._summaries.build(month, year))
        except ValueError:
            return OperationResult.failed("invalid_period", "Pick a month between 1 and 12")
        except StorageError as e:
            return self._fail("period_summary", e)

    # === Budget and preferences ===

    def set_budget(self, amount: Decimal, month: int, year: int) -> OperationResult:
        """Replace the retained budget with one for the given period."""
        if not 1 <= month <= 12:
            return OperationResult.failed("invalid_budget", "Pick a month for the budget")
        try:
            budget = Budget(amount=amount, month=month, year=year)
        except ValidationError:
            return OperationResult.failed("invalid_budget", "Enter a valid budget amount")
        try:
            self.preferences.set_budget(budget)
        except StorageError as e:
            return self._fail("set_budget", e)

        if self._audit_logger:
            self._audit_logger.log_budget_set(str(budget.amount), month, year)
        self._check_budget()
        return OperationResult.ok("Budget saved", data=budget)

    def budget_status(self, month: int, year: int) -> OperationResult:
        """Budget usage for a period; `data` is (BudgetCheck, BudgetLevel)."""
        try:
            check = self.notifier.should_warn(month, year)
        except StorageError as e:
            return self._fail("budget_status", e)
        level = self.notifier.classify(check)
        return OperationResult.ok(level.value, data=(check, level))

    def set_currency(self, currency: str) -> OperationResult:
        try:
            self.preferences.set_currency(currency)
        except StorageError as e:
            return self._fail("set_currency", e)
        if self._audit_logger:
            self._audit_logger.log_preference_updated("currency", currency)
        return OperationResult.ok("Currency updated")

    def set_notification_enabled(self, enabled: bool) -> OperationResult:
        try:
            self.preferences.set_notification_enabled(enabled)
        except StorageError as e:
            return self._fail("set_notification_enabled", e)
        if self._audit_logger:
            self._audit_logger.log_preference_updated("notification_enabled", enabled)
        return OperationResult.ok("Budget alerts updated")

    def set_reminder_enabled(self, enabled: bool) -> OperationResult:
        try:
            self.preferences.set_reminder_enabled(enabled)
        except StorageError as e:
            return self._fail("set_reminder_enabled", e)
        if self._audit_logger:
            self._audit_logger.log_preference_updated("reminder_enabled", enabled)
        return OperationResult.ok("Daily reminders updated")

    def should_send_reminder(self) -> bool:
        """Queried by the external reminder scheduler."""
        try:
            return self.preferences.is_reminder_enabled()
        except StorageError as e:
            logger.warning("reminder_check_failed", error=str(e))
            return False

    # === Backup / restore ===

    def backup(self, destination: ExternalTarget) -> OperationResult:
        try:
            size = self.backups.backup_to_destination(destination)
        except (BackupError, StorageError) as e:
            return self._fail("backup", e)
        return OperationResult.ok("Backup created", data=size)

    def restore_last_backup(self) -> OperationResult:
        try:
            count = self.backups.restore_from_internal_fallback()
        except (BackupError, StorageError) as e:
            return self._fail("restore_last_backup", e)
        return OperationResult.ok(f"Restored {count} transactions", data=count)

    def restore_from_file(self, source: ExternalTarget) -> OperationResult:
        try:
            count = self.backups.restore_from_external_source(source)
        except (BackupError, StorageError) as e:
            return self._fail("restore_from_file", e)
        return OperationResult.ok(f"Restored {count} transactions", data=count)


def create_app_components(
    settings: Optional[Settings] = None,
    alert_handler: Optional[AlertHandler] = None,
    today: Callable[[], date] = date.today,
) -> TracklyService:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings())
        alert_handler: Called when a budget warning should be shown
        today: Clock used for the post-write budget check

    Returns:
        The wired TracklyService
    """
    settings = settings or get_settings()
    storage = settings.storage
    app = settings.app

    setup_logging(app.log_level)
    audit_logger = AuditLogger()

    transactions = TransactionStore(
        JsonFileBlobStore(storage.transactions_path, storage.write_retry_attempts)
    )
    preferences = PreferencesStore(
        JsonFileBlobStore(storage.preferences_path, storage.write_retry_attempts),
        default_currency=app.default_currency,
    )
    backups = BackupManager(
        transactions,
        fallback_path=storage.backup_path,
        audit_logger=audit_logger,
        retry_attempts=storage.write_retry_attempts,
    )
    notifier = BudgetNotifier(
        transactions,
        preferences,
        settings=settings.budget,
        alert_handler=alert_handler,
        audit_logger=audit_logger,
    )

    logger.info("trackly_initialized", data_dir=str(storage.data_dir))
    return TracklyService(
        transactions=transactions,
        preferences=preferences,
        backups=backups,
        notifier=notifier,
        audit_logger=audit_logger,
        today=today,
    )
