import pytest
import sqlite3
from datetime import date, datetime, timezone

from store.base import Filter, StoreError, Timestamp
from store.sqlite import SqliteDocumentStore, decode_document, encode_document


class TestTimestamp:
    """Tests for the store-native Timestamp type."""

    def test_from_date_is_midnight_utc(self):
        """Test that a calendar date becomes midnight UTC."""
        ts = Timestamp.from_date(date(2025, 3, 5))

        assert ts.to_datetime() == datetime(2025, 3, 5, tzinfo=timezone.utc)
        assert ts.to_date() == date(2025, 3, 5)

    def test_naive_datetime_is_treated_as_utc(self):
        """Test that naive datetimes are taken to be UTC."""
        ts = Timestamp.from_datetime(datetime(2025, 3, 5, 10, 30))

        assert ts.to_datetime().tzinfo == timezone.utc
        assert ts.to_datetime().hour == 10

    def test_ordering(self):
        """Test that timestamps compare chronologically."""
        earlier = Timestamp.from_date(date(2025, 1, 1))
        later = Timestamp.from_date(date(2025, 2, 1))

        assert earlier < later
        assert Timestamp.from_isoformat(later.isoformat()) == later


class TestDocumentEncoding:
    """Tests for JSON encoding of document fields."""

    def test_timestamps_survive_encoding(self):
        """Test that Timestamp values decode back to Timestamps."""
        data = {"date": Timestamp.from_date(date(2025, 3, 5)), "amount": 12.5}

        decoded = decode_document(encode_document(data))

        assert decoded == data
        assert isinstance(decoded["date"], Timestamp)

    def test_unsupported_type_rejected(self):
        """Test that values the store cannot hold raise TypeError."""
        with pytest.raises(TypeError):
            encode_document({"when": date(2025, 3, 5)})


class TestSqliteDocumentStore:
    """Tests for SqliteDocumentStore reads and writes."""

    def test_add_and_get(self, store):
        """Test adding a document and reading it back."""
        doc_id = store.add("things", {"name": "a", "n": 1})

        doc = store.get("things", doc_id)

        assert doc is not None
        assert doc.id == doc_id
        assert doc.data == {"name": "a", "n": 1}

    def test_ids_are_unique(self, store):
        """Test that each add gets a fresh opaque id."""
        first = store.add("things", {"n": 1})
        second = store.add("things", {"n": 1})

        assert first != second

    def test_get_missing_returns_none(self, store):
        """Test that a missing id returns None."""
        assert store.get("things", "nope") is None

    def test_collections_are_separate(self, store):
        """Test that documents are scoped to their collection."""
        doc_id = store.add("things", {"n": 1})

        assert store.get("others", doc_id) is None
        assert store.documents("others") == []

    def test_update_merges_fields(self, store):
        """Test that update patches fields and keeps the rest."""
        doc_id = store.add("things", {"name": "a", "n": 1})

        assert store.update("things", doc_id, {"n": 2}) is True
        assert store.get("things", doc_id).data == {"name": "a", "n": 2}

    def test_update_missing_returns_false(self, store):
        """Test that updating a missing id writes nothing."""
        assert store.update("things", "nope", {"n": 2}) is False
        assert store.documents("things") == []

    def test_delete_is_idempotent(self, store):
        """Test that deleting twice is not an error."""
        doc_id = store.add("things", {"n": 1})

        assert store.delete("things", doc_id) is True
        assert store.delete("things", doc_id) is False
        assert store.get("things", doc_id) is None

    def test_sqlite_errors_become_store_errors(self):
        """Test that database failures surface as StoreError."""

        class BrokenManager:
            def connect(self):
                raise sqlite3.OperationalError("disk I/O error")

        broken = SqliteDocumentStore(BrokenManager())

        with pytest.raises(StoreError):
            broken.add("things", {"n": 1})


class TestQuery:
    """Tests for filtered and ordered queries."""

    def test_equality_filter(self, store):
        """Test filtering on field equality."""
        store.add("things", {"owner": "u1", "n": 1})
        store.add("things", {"owner": "u2", "n": 2})

        docs = store.query("things", [Filter("owner", "==", "u1")])

        assert [d.data["n"] for d in docs] == [1]

    def test_documents_missing_filtered_field_excluded(self, store):
        """Test that a document without the filtered field never matches."""
        store.add("things", {"n": 1})

        assert store.query("things", [Filter("owner", "!=", "u1")]) == []

    def test_order_by_descending(self, store):
        """Test ordering by a timestamp field, newest first."""
        for day in (3, 1, 2):
            store.add("things", {"date": Timestamp.from_date(date(2025, 1, day)), "day": day})

        docs = store.query("things", order_by="date", descending=True)

        assert [d.data["day"] for d in docs] == [3, 2, 1]

    def test_order_by_skips_documents_without_field(self, store):
        """Test that documents missing the order field are left out."""
        store.add("things", {"n": 1})
        store.add("things", {"n": 2, "rank": 1})

        docs = store.query("things", order_by="rank")

        assert [d.data["n"] for d in docs] == [2]

    def test_range_filter_ignores_mismatched_types(self, store):
        """Test that comparing incompatible types never matches."""
        store.add("things", {"date": "2025-01-05"})
        store.add("things", {"date": Timestamp.from_date(date(2025, 1, 5))})

        docs = store.query(
            "things", [Filter("date", ">=", Timestamp.from_date(date(2025, 1, 1)))]
        )

        assert len(docs) == 1
        assert isinstance(docs[0].data["date"], Timestamp)

    def test_unknown_operator_rejected(self, store):
        """Test that an unsupported operator raises ValueError."""
        store.add("things", {"n": 1})

        with pytest.raises(ValueError):
            store.query("things", [Filter("n", "~", 1)])


class TestListeners:
    """Tests for live query listeners."""

    def test_initial_snapshot_delivered_synchronously(self, store):
        """Test that listen delivers the current result set before returning."""
        store.add("things", {"owner": "u1"})
        snapshots = []

        store.listen("things", [Filter("owner", "==", "u1")], snapshots.append)

        assert len(snapshots) == 1
        assert len(snapshots[0]) == 1

    def test_writes_redeliver_full_result_set(self, store):
        """Test that each matching write delivers the whole result set."""
        snapshots = []
        store.listen("things", [Filter("owner", "==", "u1")], snapshots.append)

        store.add("things", {"owner": "u1", "n": 1})
        store.add("things", {"owner": "u1", "n": 2})

        assert [len(s) for s in snapshots] == [0, 1, 2]

    def test_unrelated_write_does_not_redeliver(self, store):
        """Test that a write outside the result set delivers nothing new."""
        snapshots = []
        store.listen("things", [Filter("owner", "==", "u1")], snapshots.append)

        store.add("things", {"owner": "u2"})

        assert len(snapshots) == 1

    def test_unsubscribe_stops_delivery(self, store):
        """Test that no snapshot arrives after unsubscribing."""
        snapshots = []
        unsubscribe = store.listen("things", [], snapshots.append)

        unsubscribe()
        unsubscribe()
        store.add("things", {"n": 1})

        assert len(snapshots) == 1
        assert store.listener_count("things") == 0

    def test_write_inside_callback_keeps_order(self, store):
        """Test that a write made by a callback is delivered after the current one."""
        seen = []

        def on_next(docs):
            seen.append(len(docs))
            if len(docs) == 1:
                store.add("things", {"n": 2})

        store.listen("things", [], on_next)
        store.add("things", {"n": 1})

        assert seen == [0, 1, 2]

    def test_callback_exception_does_not_stop_other_listeners(self, store):
        """Test that one failing callback does not break delivery to others."""
        received = []

        def broken(docs):
            raise RuntimeError("boom")

        store.listen("things", [], broken)
        store.listen("things", [], received.append)
        store.add("things", {"n": 1})

        assert [len(s) for s in received] == [0, 1]

    def test_query_failure_reports_error_and_drops_listener(self, store, monkeypatch):
        """Test that a failing listener gets on_error once and is removed."""
        errors = []
        snapshots = []
        store.listen("things", [], snapshots.append, errors.append)

        def failing_documents(collection):
            raise StoreError("connection lost")

        monkeypatch.setattr(store, "documents", failing_documents)
        store._notify("things")

        assert len(errors) == 1
        assert isinstance(errors[0], StoreError)
        assert store.listener_count("things") == 0
