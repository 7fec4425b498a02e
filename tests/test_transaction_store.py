"""Tests for the Transaction Store."""

import pytest
from datetime import datetime
from decimal import Decimal

from trackly.models.transaction import Transaction
from trackly.services.storage import (
    InMemoryBlobStore,
    JsonFileBlobStore,
    MalformedRecordError,
    TransactionStore,
)


def make_transaction(
    amount: str,
    is_expense: bool = True,
    category: str = "Food",
    when: datetime = datetime(2024, 3, 10, 12, 0),
    **overrides,
) -> Transaction:
    return Transaction(
        title=overrides.pop("title", f"{category} {amount}"),
        amount=Decimal(amount),
        category=category,
        date=when,
        is_expense=is_expense,
        **overrides,
    )


def march_store() -> TransactionStore:
    """Store holding the reference month plus noise in other months."""
    store = TransactionStore(InMemoryBlobStore())
    for transaction in [
        make_transaction("50", category="Food"),
        make_transaction("30", category="Food"),
        make_transaction("20", category="Transport"),
        make_transaction("100", is_expense=False, category="Salary"),
        # Other periods
        make_transaction("999", category="Food", when=datetime(2024, 4, 1)),
        make_transaction("777", category="Food", when=datetime(2023, 3, 10)),
    ]:
        store.save(transaction)
    return store


class TestEmptyStore:
    """Tests for a store that was never written."""

    def test_get_all_is_empty(self):
        """Test that a never-written store returns an empty list."""
        store = TransactionStore(InMemoryBlobStore())
        assert store.get_all() == []

    def test_totals_are_zero(self):
        """Test that totals on an empty store are 0."""
        store = TransactionStore(InMemoryBlobStore())
        assert store.total_expenses_for_period(3, 2024) == Decimal("0")
        assert store.total_income_for_period(3, 2024) == Decimal("0")
        assert store.expenses_by_category(3, 2024) == {}

    def test_raw_blob_is_none(self):
        """Test that nothing is persisted until the first write."""
        assert TransactionStore(InMemoryBlobStore()).raw_blob() is None


class TestSave:
    """Tests for upsert behaviour."""

    def test_save_appends_new(self):
        """Test that a new id is appended."""
        store = TransactionStore(InMemoryBlobStore())
        first = make_transaction("10")
        second = make_transaction("20")
        store.save(first)
        store.save(second)
        assert [t.id for t in store.get_all()] == [first.id, second.id]

    def test_save_twice_keeps_one_record(self):
        """Test upsert idempotence."""
        store = TransactionStore(InMemoryBlobStore())
        transaction = make_transaction("10")
        store.save(transaction)
        store.save(transaction)
        assert len(store.get_all()) == 1

    def test_save_replaces_in_place(self):
        """Test that editing keeps the id and position."""
        store = TransactionStore(InMemoryBlobStore())
        first = make_transaction("10")
        second = make_transaction("20")
        store.save(first)
        store.save(second)

        edited = first.model_copy(update={"title": "Dinner", "amount": Decimal("15")})
        store.save(edited)

        stored = store.get_all()
        assert len(stored) == 2
        assert stored[0].id == first.id
        assert stored[0].title == "Dinner"
        assert stored[0].amount == Decimal("15")

    def test_get_by_id(self):
        """Test single-record lookup."""
        store = TransactionStore(InMemoryBlobStore())
        transaction = make_transaction("10")
        store.save(transaction)
        assert store.get(transaction.id) == transaction
        assert store.get("missing") is None

    def test_huge_amount_keeps_store_readable(self):
        """Test that saving an amount beyond float range leaves the store usable."""
        store = TransactionStore(InMemoryBlobStore())
        store.save(make_transaction("1e400", id="big"))
        store.save(make_transaction("5", id="small"))

        assert [t.id for t in store.get_all()] == ["big", "small"]
        assert store.get("big").amount == Decimal("1e400")
        assert store.delete("small") == 1


class TestDelete:
    """Tests for delete behaviour."""

    def test_delete_removes_record(self):
        """Test that delete removes the matching record."""
        store = TransactionStore(InMemoryBlobStore())
        keep = make_transaction("10")
        drop = make_transaction("20")
        store.save(keep)
        store.save(drop)

        assert store.delete(drop.id) == 1
        assert [t.id for t in store.get_all()] == [keep.id]

    def test_delete_unknown_id_is_noop(self):
        """Test that deleting a missing id changes nothing and does not fail."""
        store = TransactionStore(InMemoryBlobStore())
        store.save(make_transaction("10"))
        before = store.raw_blob()

        assert store.delete("no-such-id") == 0
        assert store.raw_blob() == before

    def test_delete_on_empty_store(self):
        """Test delete before anything was written."""
        store = TransactionStore(InMemoryBlobStore())
        assert store.delete("anything") == 0
        assert store.raw_blob() is None

    def test_delete_removes_duplicates(self):
        """Test that every record with the id is removed."""
        blobs = InMemoryBlobStore()
        store = TransactionStore(blobs)
        transaction = make_transaction("10")
        store.save(transaction)
        # Simulate a blob that somehow holds the same id twice
        blob = store.raw_blob()
        store.replace_raw_blob(blob[:-1] + "," + blob[1:])
        assert len(store.get_all()) == 2

        assert store.delete(transaction.id) == 2
        assert store.get_all() == []


class TestPeriodQueries:
    """Tests for period filters and aggregates."""

    def test_get_for_period(self):
        """Test month/year bucketing."""
        store = march_store()
        assert len(store.get_for_period(3, 2024)) == 4
        assert len(store.get_for_period(4, 2024)) == 1
        assert store.get_for_period(5, 2024) == []

    def test_expense_and_income_filters(self):
        """Test the isExpense split."""
        store = march_store()
        assert len(store.get_expenses_for_period(3, 2024)) == 3
        assert len(store.get_income_for_period(3, 2024)) == 1

    def test_totals(self):
        """Test aggregate sums for the reference month."""
        store = march_store()
        assert store.total_expenses_for_period(3, 2024) == Decimal("100")
        assert store.total_income_for_period(3, 2024) == Decimal("100")

    def test_expenses_by_category(self):
        """Test grouping by category."""
        store = march_store()
        assert store.expenses_by_category(3, 2024) == {
            "Food": Decimal("80"),
            "Transport": Decimal("20"),
        }

    def test_category_without_expenses_is_absent(self):
        """Test that income-only categories do not appear."""
        store = march_store()
        assert "Salary" not in store.expenses_by_category(3, 2024)

    def test_recent_is_most_recent_first(self):
        """Test date-descending ordering."""
        store = TransactionStore(InMemoryBlobStore())
        old = make_transaction("1", when=datetime(2024, 1, 1))
        new = make_transaction("2", when=datetime(2024, 6, 1))
        mid = make_transaction("3", when=datetime(2024, 3, 1))
        for transaction in (old, new, mid):
            store.save(transaction)

        assert [t.id for t in store.recent()] == [new.id, mid.id, old.id]
        assert [t.id for t in store.recent(limit=1)] == [new.id]


class TestCorruptBlob:
    """Tests that corruption is never reported as 'no transactions'."""

    def test_reads_fail_on_corrupt_blob(self):
        """Test that every read raises on a corrupt blob."""
        store = TransactionStore(InMemoryBlobStore({"transactions": "[{\"id\": 1"}))
        with pytest.raises(MalformedRecordError):
            store.get_all()
        with pytest.raises(MalformedRecordError):
            store.total_expenses_for_period(3, 2024)
        with pytest.raises(MalformedRecordError):
            store.expenses_by_category(3, 2024)

    def test_save_does_not_overwrite_corrupt_blob(self):
        """Test that a write on a corrupt blob fails instead of dropping data."""
        blobs = InMemoryBlobStore({"transactions": "garbage"})
        store = TransactionStore(blobs)
        with pytest.raises(MalformedRecordError):
            store.save(make_transaction("10"))
        assert blobs.read("transactions") == "garbage"


class TestFileBackedStore:
    """Tests with the JSON file backend."""

    def test_data_survives_new_store_instance(self, tmp_path):
        """Test that a second store over the same file sees the data."""
        path = tmp_path / "transactions_prefs.json"
        transaction = make_transaction("12.34")
        TransactionStore(JsonFileBlobStore(path)).save(transaction)

        reopened = TransactionStore(JsonFileBlobStore(path))
        assert reopened.get_all() == [transaction]
