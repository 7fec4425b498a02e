"""
Audit Logger

DESIGN DECISION: Every write to the user's records is logged.
This provides:
1. Traceability of every change
2. Debugging capability when a restore replaces data
3. A record of which budget alerts were raised

The audit logger:
- Is synchronous, like every other store operation
- Gracefully handles failures (never crashes the app if logging fails)
"""

import logging
from typing import Any, Optional

import structlog

from trackly.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def setup_logging(level: str = "INFO") -> None:
    """Route the structured log to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured log. Events are also kept in
    memory for the lifetime of the logger so a settings screen can show
    "what just happened".
    """

    def __init__(self, keep_history: int = 100):
        self._logger = structlog.get_logger("trackly.audit")
        self._keep_history = keep_history
        self._history: list[AuditEvent] = []

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be logged.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never break the main flow
            logging.getLogger(__name__).error("audit logging failed: %s", e)
            return False

        self._history.append(event)
        if len(self._history) > self._keep_history:
            del self._history[: len(self._history) - self._keep_history]
        return True

    def log_transaction_saved(
        self,
        transaction_id: str,
        title: str,
        amount: str,
        is_expense: bool,
    ) -> None:
        self.log(AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            title=title,
            amount=amount,
            is_expense=is_expense,
        ))

    def log_transaction_deleted(self, transaction_id: str, removed: int) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id, removed))

    def log_budget_set(self, amount: str, month: int, year: int) -> None:
        self.log(AuditEventBuilder.budget_set(amount, month, year))

    def log_preference_updated(self, key: str, value: Any) -> None:
        self.log(AuditEventBuilder.preference_updated(key, value))

    def log_backup_created(self, destination: str, size_bytes: int) -> None:
        self.log(AuditEventBuilder.backup_created(destination, size_bytes))

    def log_backup_refused(self, reason: str) -> None:
        self.log(AuditEventBuilder.backup_refused(reason))

    def log_backup_fallback_failed(self, location: str, error_message: str) -> None:
        self.log(AuditEventBuilder.backup_fallback_failed(location, error_message))

    def log_restore_completed(self, source: str, record_count: int) -> None:
        self.log(AuditEventBuilder.restore_completed(source, record_count))

    def log_restore_rejected(self, source: str, reason: str) -> None:
        self.log(AuditEventBuilder.restore_rejected(source, reason))

    def log_budget_threshold_reached(
        self,
        month: int,
        year: int,
        percentage_used: float,
        level: str,
    ) -> None:
        self.log(AuditEventBuilder.budget_threshold_reached(
            month=month,
            year=year,
            percentage_used=percentage_used,
            level=level,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
