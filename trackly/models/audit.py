"""
Audit Models for Trackly

Every write to the store is recorded as an audit event. This provides:
1. Traceability of every change to the user's money records
2. Debugging information when a backup or restore goes wrong
3. Ability to reconstruct what happened before data was replaced

DESIGN DECISION: Audit events are append-only log records. They are
emitted to the structured log, never edited.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_DELETED = "transaction_deleted"

    # Preferences
    BUDGET_SET = "budget_set"
    PREFERENCE_UPDATED = "preference_updated"

    # Backup / restore
    BACKUP_CREATED = "backup_created"
    BACKUP_REFUSED = "backup_refused"
    BACKUP_FALLBACK_FAILED = "backup_fallback_failed"
    RESTORE_COMPLETED = "restore_completed"
    RESTORE_REJECTED = "restore_rejected"

    # Budget
    BUDGET_THRESHOLD_REACHED = "budget_threshold_reached"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget', 'backup')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_saved(transaction_id, "Lunch", "12.50", True)
        event = AuditEventBuilder.restore_completed("fallback", 42)
    """

    @staticmethod
    def transaction_saved(
        transaction_id: str,
        title: str,
        amount: str,
        is_expense: bool,
    ) -> AuditEvent:
        kind = "expense" if is_expense else "income"
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction saved: {title} ({kind} {amount})",
            details={
                "title": title,
                "amount": amount,
                "is_expense": is_expense,
            },
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction deleted ({removed} record(s) removed)",
            details={"removed": removed},
        )

    @staticmethod
    def budget_set(amount: str, month: int, year: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            entity_type="budget",
            entity_id=f"{year:04d}-{month:02d}",
            description=f"Budget set to {amount} for {month:02d}/{year}",
            details={"amount": amount, "month": month, "year": year},
        )

    @staticmethod
    def preference_updated(key: str, value: Any) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCE_UPDATED,
            entity_type="preference",
            entity_id=key,
            description=f"Preference updated: {key}",
            details={"key": key, "value": value},
        )

    @staticmethod
    def backup_created(destination: str, size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_CREATED,
            entity_type="backup",
            description=f"Backup written to {destination}",
            details={"destination": destination, "size_bytes": size_bytes},
        )

    @staticmethod
    def backup_refused(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description="Backup refused",
            error_message=reason,
        )

    @staticmethod
    def backup_fallback_failed(location: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_FALLBACK_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="backup",
            description="Internal fallback copy could not be written",
            details={"location": location},
            error_message=error_message,
        )

    @staticmethod
    def restore_completed(source: str, record_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_COMPLETED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description=f"Live transactions replaced from {source}",
            details={"source": source, "record_count": record_count},
        )

    @staticmethod
    def restore_rejected(source: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description=f"Restore from {source} rejected",
            details={"source": source},
            error_message=reason,
        )

    @staticmethod
    def budget_threshold_reached(
        month: int,
        year: int,
        percentage_used: float,
        level: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_THRESHOLD_REACHED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            entity_id=f"{year:04d}-{month:02d}",
            description=f"Budget {level}: {percentage_used:.1f}% used",
            details={"percentage_used": percentage_used, "level": level},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
