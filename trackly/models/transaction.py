"""
Core Data Models for Trackly

These models define the in-memory shape of everything the store persists:
1. Transaction - a single income or expense record
2. Budget - the single retained spending ceiling for one month
3. Preferences - scalar user settings

DESIGN DECISION: The models are strongly typed. The string-keyed records
that live in the blob are converted at one boundary (the record codec), so
type errors surface at decode time instead of at call sites.

Months are 1-12 everywhere in this package.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Suggestion list for category pickers. The store never enforces it.
DEFAULT_CATEGORIES = [
    "Food",
    "Transport",
    "Bills",
    "Entertainment",
    "Shopping",
    "Health",
    "Education",
    "Salary",
    "Other",
]


def _new_transaction_id() -> str:
    return str(uuid4())


# =============================================================================
# CORE RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense.

    The sign of `amount` never encodes direction - `is_expense` does.
    `id` is assigned once at creation and survives every edit.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=_new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    title: str = Field(
        ...,
        description="Display title"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Currency magnitude"
    )
    category: str = Field(
        ...,
        description="Free-form category name"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened (local time)"
    )
    is_expense: bool = Field(
        ...,
        description="True for an expense, False for income"
    )

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Naive local time at millisecond precision, as persisted."""
        if v.tzinfo is not None:
            v = v.astimezone().replace(tzinfo=None)
        return v.replace(microsecond=(v.microsecond // 1000) * 1000)

    def in_period(self, month: int, year: int) -> bool:
        """Check whether this transaction falls in the given calendar month."""
        return self.date.month == month and self.date.year == year


class Budget(BaseModel):
    """
    The spending ceiling for one (month, year).

    CRITICAL: Only one budget is retained at a time. Callers must check
    `applies_to()` before treating `amount` as the budget of a period.
    """

    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        description="Spending ceiling"
    )
    month: int = Field(
        default=0,
        description="Calendar month (1-12); 0 when no budget is set"
    )
    year: int = Field(
        default=0,
        description="Calendar year; 0 when no budget is set"
    )

    @classmethod
    def unset(cls) -> 'Budget':
        """The value returned when no budget was ever configured."""
        return cls(amount=Decimal("0"), month=0, year=0)

    @property
    def is_configured(self) -> bool:
        return 1 <= self.month <= 12 and self.year > 0 and self.amount > 0

    def applies_to(self, month: int, year: int) -> bool:
        """True when this budget is the active one for the given period."""
        return self.month == month and self.year == year and self.amount > 0


class Preferences(BaseModel):
    """Snapshot of the scalar user settings."""

    currency: str = Field(
        default="USD",
        description="Currency code shown next to amounts"
    )
    notifications_enabled: bool = Field(
        default=True,
        description="Send budget alerts"
    )
    reminders_enabled: bool = Field(
        default=False,
        description="Send daily reminders to log expenses"
    )


# =============================================================================
# BUDGET CHECK MODELS
# =============================================================================

class BudgetLevel(str, Enum):
    """
    Presentation tiers built on top of the raw percentage.

    The core contract only needs the percentage; these tiers drive
    colours and alert wording.
    """
    NOT_SET = "not_set"
    GOOD = "good"
    WARNING = "warning"
    EXCEEDED = "exceeded"


class BudgetCheck(BaseModel):
    """
    Result of comparing a period's expenses against the retained budget.

    When `applicable` is False, `percentage_used` is always None - a
    period without a matching budget never gets a number.
    """

    month: int
    year: int
    applicable: bool = Field(
        ...,
        description="Does the retained budget apply to this period?"
    )
    percentage_used: Optional[float] = Field(
        default=None,
        description="Expenses as a percentage of the budget"
    )
    budget_amount: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        return self.budget_amount - self.total_expenses

    @classmethod
    def inapplicable(
        cls,
        month: int,
        year: int,
        total_expenses: Decimal = Decimal("0"),
    ) -> 'BudgetCheck':
        return cls(
            month=month,
            year=year,
            applicable=False,
            total_expenses=total_expenses,
        )


# =============================================================================
# REPORT MODELS
# =============================================================================

class PeriodSummary(BaseModel):
    """Everything a monthly overview screen shows."""

    month: int
    year: int
    label: str = Field(
        ...,
        description="Human-readable period, e.g. 'March 2024'"
    )
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    expenses_by_category: dict[str, Decimal] = Field(default_factory=dict)
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="The period's transactions, most recent first"
    )

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


class OperationResult(BaseModel):
    """
    Outcome of a collaborator-facing operation.

    Every failure maps to a short status and a human-readable message
    the calling UI can show as-is.
    """

    success: bool
    status: str = Field(
        default="ok",
        description="Machine-readable status, e.g. 'nothing_to_back_up'"
    )
    message: str = Field(
        default="",
        description="Short message for the user"
    )
    data: Any = None

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> 'OperationResult':
        return cls(success=True, status="ok", message=message, data=data)

    @classmethod
    def failed(cls, status: str, message: str) -> 'OperationResult':
        return cls(success=False, status=status, message=message)
