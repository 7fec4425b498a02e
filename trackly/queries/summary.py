"""
Period Summary Builder

Assembles everything an overview or report screen shows for one month
from the Transaction Store's period queries. Numbers come straight from
stored data; nothing is estimated.
"""

import calendar

from trackly.models.transaction import PeriodSummary
from trackly.services.storage import TransactionStore


class PeriodSummaryBuilder:
    """Builds PeriodSummary objects from stored transactions."""

    def __init__(self, store: TransactionStore):
        self._store = store

    def build(self, month: int, year: int) -> PeriodSummary:
        """
        Summarize one calendar month.

        Reads the blob once and aggregates in memory, so totals,
        breakdown and list are consistent with each other.
        """
        transactions = self._store.get_for_period(month, year)

        summary = PeriodSummary(
            month=month,
            year=year,
            label=describe_period(month, year),
            transactions=sorted(transactions, key=lambda t: t.date, reverse=True),
        )
        for transaction in transactions:
            if transaction.is_expense:
                summary.total_expenses += transaction.amount
                summary.expenses_by_category[transaction.category] = (
                    summary.expenses_by_category.get(transaction.category, 0)
                    + transaction.amount
                )
            else:
                summary.total_income += transaction.amount
        return summary


def describe_period(month: int, year: int) -> str:
    """Format a period for display, e.g. 'March 2024'."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    return f"{calendar.month_name[month]} {year}"
