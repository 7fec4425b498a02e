"""Tests for the transaction record codec."""

import json
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from trackly.models.transaction import Transaction
from trackly.services.storage import (
    EMPTY_COLLECTION,
    MalformedRecordError,
    decode_collection,
    decode_transaction,
    encode_collection,
    encode_transaction,
    is_empty_blob,
)


def make_transaction(**overrides) -> Transaction:
    fields = {
        "id": "tx-1",
        "title": "Groceries",
        "amount": Decimal("42.75"),
        "category": "Food",
        "date": datetime(2024, 3, 15, 18, 45, 12, 250000),
        "is_expense": True,
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestRecordEncoding:
    """Tests for single-record encode/decode."""

    def test_encode_uses_blob_keys(self):
        """Test the flat record layout."""
        record = encode_transaction(make_transaction())
        assert set(record) == {"id", "title", "amount", "category", "date", "isExpense"}
        assert record["isExpense"] is True
        assert isinstance(record["date"], int)

    def test_round_trip_preserves_all_fields(self):
        """Test that encode then decode yields an equal transaction."""
        original = make_transaction()
        decoded = decode_transaction(encode_transaction(original))
        assert decoded == original

    def test_round_trip_income(self):
        """Test round trip for an income record with a whole amount."""
        original = make_transaction(id="tx-2", amount=Decimal("1500"), is_expense=False)
        assert decode_transaction(encode_transaction(original)) == original

    def test_date_is_epoch_milliseconds(self):
        """Test that the stored date matches the datetime's timestamp."""
        transaction = make_transaction(date=datetime(2024, 1, 2, 3, 4, 5, 678000))
        record = encode_transaction(transaction)
        assert record["date"] == int(transaction.date.replace(microsecond=0).timestamp()) * 1000 + 678

    def test_missing_field_is_malformed(self):
        """Test that a record without a required field fails."""
        record = encode_transaction(make_transaction())
        del record["category"]
        with pytest.raises(MalformedRecordError, match="category"):
            decode_transaction(record)

    def test_wrong_types_are_malformed(self):
        """Test that type errors are caught at decode time."""
        record = encode_transaction(make_transaction())
        for field, bad_value in [
            ("date", "yesterday"),
            ("isExpense", "yes"),
            ("amount", "lots"),
            ("amount", -3),
        ]:
            broken = dict(record, **{field: bad_value})
            with pytest.raises(MalformedRecordError):
                decode_transaction(broken)

    def test_non_mapping_is_malformed(self):
        """Test that a non-object record fails."""
        with pytest.raises(MalformedRecordError):
            decode_transaction(["id", "title"])

    def test_extra_keys_are_ignored(self):
        """Test forward compatibility with newer records."""
        record = encode_transaction(make_transaction())
        record["note"] = "added by a newer version"
        assert decode_transaction(record).id == "tx-1"


class TestCollectionEncoding:
    """Tests for whole-blob encode/decode."""

    def test_empty_collection_is_canonical(self):
        """Test the canonical empty representation."""
        assert encode_collection([]) == EMPTY_COLLECTION
        assert decode_collection(EMPTY_COLLECTION) == []

    def test_collection_round_trip(self):
        """Test that a blob decodes to the same records in the same order."""
        transactions = [
            make_transaction(id="a"),
            make_transaction(id="b", amount=Decimal("0.10"), is_expense=False),
        ]
        assert decode_collection(encode_collection(transactions)) == transactions

    def test_amount_is_json_number(self):
        """Test that amounts are written as plain numbers."""
        blob = encode_collection([make_transaction(amount=Decimal("19.99"))])
        assert json.loads(blob)[0]["amount"] == 19.99

    def test_high_precision_amount_is_exact(self):
        """Test that amounts keep every digit through a round trip."""
        amount = Decimal("12345678901234567890.12")
        blob = encode_collection([make_transaction(amount=amount)])
        assert '"amount": 12345678901234567890.12' in blob
        assert decode_collection(blob)[0].amount == amount

    def test_very_large_amount_round_trips(self):
        """Test that an amount beyond float range stays readable."""
        amount = Decimal("1e400")
        blob = encode_collection([make_transaction(amount=amount)])
        assert "Infinity" not in blob
        assert decode_collection(blob)[0].amount == amount

    def test_non_finite_amount_token_is_malformed(self):
        """Test that an Infinity token in a blob fails the load."""
        record = encode_transaction(make_transaction())
        blob = json.dumps([{**record, "amount": float("inf")}])
        with pytest.raises(MalformedRecordError):
            decode_collection(blob)

    def test_aware_date_round_trips(self):
        """Test that a timezone-aware date decodes to the same transaction."""
        transaction = make_transaction(
            date=datetime(2024, 3, 31, 23, 30, tzinfo=timezone(timedelta(hours=5)))
        )
        assert decode_collection(encode_collection([transaction])) == [transaction]

    def test_deeply_nested_blob_is_malformed(self):
        """Test that nesting too deep to parse fails as a malformed record."""
        with pytest.raises(MalformedRecordError):
            decode_collection("[" * 100000 + "]" * 100000)

    def test_one_bad_record_fails_the_whole_load(self):
        """Test atomic collection decode."""
        good = encode_transaction(make_transaction(id="good"))
        blob = json.dumps([{**good, "amount": float(good["amount"])}, {"id": "bad"}])
        with pytest.raises(MalformedRecordError):
            decode_collection(blob)

    def test_invalid_json_is_malformed(self):
        """Test that garbage fails as a malformed record."""
        with pytest.raises(MalformedRecordError):
            decode_collection("{not json")

    def test_non_list_is_malformed(self):
        """Test that a JSON object is not a collection."""
        with pytest.raises(MalformedRecordError):
            decode_collection('{"id": "x"}')

    def test_is_empty_blob(self):
        """Test detection of blobs with nothing to back up."""
        assert is_empty_blob(None)
        assert is_empty_blob("")
        assert is_empty_blob("  ")
        assert is_empty_blob("[]")
        assert not is_empty_blob(encode_collection([make_transaction()]))
