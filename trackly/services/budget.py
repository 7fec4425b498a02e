"""
Budget Notifier Trigger

Read-only consumer of both stores: compares a period's total expenses to
the retained budget and reports how much of it is used.

CRITICAL: A period whose (month, year) does not match the retained
budget, or a budget of 0, is "inapplicable" - never a percentage and
never a division by zero.
"""

from typing import Callable, Optional

import structlog

from trackly.audit import AuditLogger
from trackly.config import BudgetSettings
from trackly.models.transaction import BudgetCheck, BudgetLevel
from trackly.services.storage import PreferencesStore, TransactionStore


logger = structlog.get_logger(__name__)

AlertHandler = Callable[[BudgetCheck, BudgetLevel], None]


class BudgetNotifier:
    """
    Computes budget usage for a period and raises alerts when asked.

    The alert handler is the external notification collaborator; the
    core never schedules or displays notifications itself.
    """

    def __init__(
        self,
        transactions: TransactionStore,
        preferences: PreferencesStore,
        settings: Optional[BudgetSettings] = None,
        alert_handler: Optional[AlertHandler] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transactions = transactions
        self._preferences = preferences
        self._settings = settings or BudgetSettings()
        self._alert_handler = alert_handler
        self._audit_logger = audit_logger

    def should_warn(self, month: int, year: int) -> BudgetCheck:
        """
        Compare the period's expenses with the retained budget.

        Returns:
            BudgetCheck with `applicable` and, when applicable,
            `percentage_used` (100.0 means the budget is fully used)
        """
        budget = self._preferences.get_budget()
        if not budget.applies_to(month, year):
            return BudgetCheck.inapplicable(month, year)

        total_expenses = self._transactions.total_expenses_for_period(month, year)
        percentage = float(total_expenses / budget.amount * 100)

        return BudgetCheck(
            month=month,
            year=year,
            applicable=True,
            percentage_used=percentage,
            budget_amount=budget.amount,
            total_expenses=total_expenses,
        )

    def classify(self, check: BudgetCheck) -> BudgetLevel:
        """Map a check to the good / warning / exceeded tiers."""
        if not check.applicable or check.percentage_used is None:
            return BudgetLevel.NOT_SET
        if check.percentage_used >= self._settings.budget_exceeded_percent:
            return BudgetLevel.EXCEEDED
        if check.percentage_used >= self._settings.budget_warning_percent:
            return BudgetLevel.WARNING
        return BudgetLevel.GOOD

    def check_and_alert(self, month: int, year: int) -> BudgetCheck:
        """
        Run `should_warn` and hand warning/exceeded results to the alert
        handler, if budget alerts are enabled.
        """
        check = self.should_warn(month, year)
        level = self.classify(check)

        if level not in (BudgetLevel.WARNING, BudgetLevel.EXCEEDED):
            return check
        if not self._preferences.is_notification_enabled():
            logger.debug("budget_alert_suppressed", month=month, year=year, level=level.value)
            return check

        if self._audit_logger:
            self._audit_logger.log_budget_threshold_reached(
                month=month,
                year=year,
                percentage_used=check.percentage_used,
                level=level.value,
            )
        if self._alert_handler:
            self._alert_handler(check, level)
        return check
