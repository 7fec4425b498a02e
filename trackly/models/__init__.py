"""
Data Models Package

This package contains all Pydantic models used by Trackly.
Everything the store persists or returns conforms to these schemas.
"""

from trackly.models.transaction import (
    DEFAULT_CATEGORIES,
    Budget,
    BudgetCheck,
    BudgetLevel,
    OperationResult,
    PeriodSummary,
    Preferences,
    Transaction,
)
from trackly.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Core models
    "DEFAULT_CATEGORIES",
    "Budget",
    "BudgetCheck",
    "BudgetLevel",
    "OperationResult",
    "PeriodSummary",
    "Preferences",
    "Transaction",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
