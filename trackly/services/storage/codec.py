"""
Transaction Record Codec

Converts Transaction models to and from the flat string-keyed records
stored in the transactions blob:

    {"id": "...", "title": "...", "amount": 12.5, "category": "Food",
     "date": 1710498600000, "isExpense": true}

`date` is epoch milliseconds; `amount` is a JSON number that is read
back as a Decimal. Amounts are written with their exact digits and
never pass through float.

DESIGN DECISION: A collection decode is all-or-nothing. One malformed
record fails the whole load, so corruption is never mistaken for
"fewer transactions".
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from trackly.models.transaction import Transaction
from trackly.services.storage.interface import MalformedRecordError


# Serialized form of a collection with zero records
EMPTY_COLLECTION = "[]"

RECORD_FIELDS = ("id", "title", "amount", "category", "date", "isExpense")


def _number_text(value: Decimal) -> str:
    """Exact JSON number text for a finite Decimal."""
    if not value.is_finite():
        raise MalformedRecordError(f"Amount is not a finite number: {value}")
    # str() of a finite Decimal is always valid JSON number syntax
    return str(value)


def _dump_record(record: dict) -> str:
    fields = []
    for key, value in record.items():
        if isinstance(value, Decimal):
            text = _number_text(value)
        else:
            text = json.dumps(value, ensure_ascii=False)
        fields.append(f"{json.dumps(key)}: {text}")
    return "{" + ", ".join(fields) + "}"


def _to_epoch_millis(value: datetime) -> int:
    whole_seconds = int(value.replace(microsecond=0).timestamp())
    return whole_seconds * 1000 + value.microsecond // 1000


def _from_epoch_millis(value: int) -> datetime:
    seconds, millis = divmod(value, 1000)
    return datetime.fromtimestamp(seconds).replace(microsecond=millis * 1000)


def encode_transaction(transaction: Transaction) -> dict:
    """Convert a Transaction to a flat record."""
    return {
        "id": transaction.id,
        "title": transaction.title,
        "amount": transaction.amount,
        "category": transaction.category,
        "date": _to_epoch_millis(transaction.date),
        "isExpense": transaction.is_expense,
    }


def decode_transaction(record: Any) -> Transaction:
    """
    Convert a flat record to a Transaction.

    Raises:
        MalformedRecordError: If the record is not a mapping, a required
            field is missing, or a field has the wrong type
    """
    if not isinstance(record, dict):
        raise MalformedRecordError(f"Record is not an object: {record!r}")

    missing = [name for name in RECORD_FIELDS if name not in record]
    if missing:
        raise MalformedRecordError(f"Record is missing fields: {', '.join(missing)}")

    raw_date = record["date"]
    # bool is an int subclass; a boolean date is still malformed
    if isinstance(raw_date, bool) or not isinstance(raw_date, (int, float, Decimal)):
        raise MalformedRecordError(f"Record date is not a timestamp: {raw_date!r}")
    if not isinstance(record["isExpense"], bool):
        raise MalformedRecordError(f"Record isExpense is not a boolean: {record['isExpense']!r}")
    if isinstance(record["amount"], bool):
        raise MalformedRecordError("Record amount is not a number")

    try:
        return Transaction(
            id=record["id"],
            title=record["title"],
            amount=record["amount"],
            category=record["category"],
            date=_from_epoch_millis(int(raw_date)),
            is_expense=record["isExpense"],
        )
    except (ValidationError, OverflowError, OSError, ValueError) as e:
        raise MalformedRecordError(f"Invalid record {record.get('id')!r}: {e}") from e


def encode_collection(transactions: Iterable[Transaction]) -> str:
    """Serialize transactions to the blob format."""
    records = [_dump_record(encode_transaction(t)) for t in transactions]
    return "[" + ", ".join(records) + "]"


def decode_collection(blob: str) -> list[Transaction]:
    """
    Parse a whole transactions blob.

    Raises:
        MalformedRecordError: If the blob is not a JSON array or any
            record inside it is malformed
    """
    try:
        records = json.loads(blob, parse_float=Decimal)
    except (ValueError, TypeError, RecursionError) as e:
        raise MalformedRecordError(f"Transactions blob is not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise MalformedRecordError("Transactions blob is not a list")

    return [decode_transaction(record) for record in records]


def is_empty_blob(blob: Optional[str]) -> bool:
    """True for a missing, blank or canonical-empty blob."""
    return blob is None or not blob.strip() or blob.strip() == EMPTY_COLLECTION
