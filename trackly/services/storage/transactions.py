"""
Transaction Store

Owns the collection of Transaction records persisted as one blob.

DESIGN DECISION: There is no live cache. Every operation reads the whole
blob, works on the decoded list, and (for writes) serializes the whole
list back. This makes each write O(collection size) but keeps the
persisted representation self-consistent and trivially backed up.

TRADEOFFS:
- Two interleaved writes lose the earlier one (single writer assumed)
- Linear scans for lookups (fine for personal-use volumes)
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

import structlog

from trackly.models.transaction import Transaction
from trackly.services.storage.codec import (
    decode_collection,
    encode_collection,
)
from trackly.services.storage.interface import BlobStoreInterface


logger = structlog.get_logger(__name__)

TRANSACTIONS_KEY = "transactions"


class TransactionStore:
    """
    CRUD, period queries and aggregates over persisted transactions.

    GUARANTEES:
    - At most one record per id after any `save`
    - A corrupt blob makes every read raise MalformedRecordError;
      it is never reported as an empty store
    """

    def __init__(self, blobs: BlobStoreInterface, key: str = TRANSACTIONS_KEY):
        self._blobs = blobs
        self._key = key

    # === Raw blob access (backup/restore) ===

    def raw_blob(self) -> Optional[str]:
        """The persisted blob exactly as stored, or None if never written."""
        return self._blobs.read(self._key)

    def replace_raw_blob(self, blob: str) -> None:
        """Overwrite the persisted blob verbatim. Callers validate first."""
        self._blobs.write(self._key, blob)

    # === Writes ===

    def _write_all(self, transactions: list[Transaction]) -> None:
        self._blobs.write(self._key, encode_collection(transactions))

    def save(self, transaction: Transaction) -> None:
        """Insert a transaction, or replace the one with the same id."""
        transactions = self.get_all()

        for index, existing in enumerate(transactions):
            if existing.id == transaction.id:
                transactions[index] = transaction
                logger.debug("transaction_replaced", transaction_id=transaction.id)
                break
        else:
            transactions.append(transaction)
            logger.debug("transaction_appended", transaction_id=transaction.id)

        self._write_all(transactions)

    def delete(self, transaction_id: str) -> int:
        """
        Remove every record with this id.

        Returns:
            Number of records removed (0 for an unknown id - not an error)
        """
        transactions = self.get_all()
        kept = [t for t in transactions if t.id != transaction_id]
        removed = len(transactions) - len(kept)

        if removed:
            self._write_all(kept)
        logger.debug("transaction_deleted", transaction_id=transaction_id, removed=removed)
        return removed

    # === Reads ===

    def get_all(self) -> list[Transaction]:
        """All transactions, or an empty list if nothing was ever written."""
        blob = self._blobs.read(self._key)
        if blob is None:
            return []
        return decode_collection(blob)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self.get_all():
            if transaction.id == transaction_id:
                return transaction
        return None

    def recent(self, limit: Optional[int] = None) -> list[Transaction]:
        """All transactions, most recent first."""
        transactions = sorted(self.get_all(), key=lambda t: t.date, reverse=True)
        return transactions[:limit] if limit is not None else transactions

    def get_for_period(self, month: int, year: int) -> list[Transaction]:
        return [t for t in self.get_all() if t.in_period(month, year)]

    def get_expenses_for_period(self, month: int, year: int) -> list[Transaction]:
        return [t for t in self.get_for_period(month, year) if t.is_expense]

    def get_income_for_period(self, month: int, year: int) -> list[Transaction]:
        return [t for t in self.get_for_period(month, year) if not t.is_expense]

    # === Aggregates ===

    def total_expenses_for_period(self, month: int, year: int) -> Decimal:
        return sum(
            (t.amount for t in self.get_expenses_for_period(month, year)),
            Decimal("0"),
        )

    def total_income_for_period(self, month: int, year: int) -> Decimal:
        return sum(
            (t.amount for t in self.get_income_for_period(month, year)),
            Decimal("0"),
        )

    def expenses_by_category(self, month: int, year: int) -> dict[str, Decimal]:
        """
        Sum the period's expenses per category.

        Categories without expenses in the period are absent, not zero.
        """
        totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for transaction in self.get_expenses_for_period(month, year):
            totals[transaction.category] += transaction.amount
        return dict(totals)
