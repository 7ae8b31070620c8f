import pytest
from datetime import date
from decimal import Decimal

from errors import PersistenceError
from store.base import StoreError


class Recorder:
    """Collects feed snapshots and errors."""

    def __init__(self):
        self.snapshots = []
        self.errors = []

    def on_snapshot(self, items):
        self.snapshots.append(items)

    def on_error(self, error):
        self.errors.append(error)


class TestLiveQueryService:
    """Tests for LiveQueryService feeds."""

    def test_categories_feed_initial_snapshot(self, services):
        """Test that opening a feed delivers converted categories right away."""
        services.categories.create("Food", "#111111", "user-1")
        recorder = Recorder()

        handle = services.feeds.open_categories(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        assert len(recorder.snapshots) == 1
        assert recorder.snapshots[0][0].name == "Food"
        handle.close()

    def test_categories_feed_follows_writes(self, services):
        """Test that creates, updates and deletes are all delivered."""
        recorder = Recorder()
        handle = services.feeds.open_categories(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        category_id = services.categories.create("Food", "#111111", "user-1")
        services.categories.update(category_id, name="Groceries")
        services.categories.delete(category_id)

        assert [[c.name for c in s] for s in recorder.snapshots] == [
            [],
            ["Food"],
            ["Groceries"],
            [],
        ]
        handle.close()

    def test_feed_ignores_other_users(self, services):
        """Test that writes by other users are not delivered."""
        recorder = Recorder()
        handle = services.feeds.open_categories(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        services.categories.create("Food", "#111111", "user-2")

        assert recorder.snapshots == [[]]
        handle.close()

    def test_expenses_feed_newest_first(self, services):
        """Test that the expenses feed is ordered by date descending."""
        recorder = Recorder()
        handle = services.feeds.open_expenses(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        for day in (1, 3, 2):
            services.expenses.create(
                Decimal(day), "x", date(2025, 3, day), "user-1", "cat-1"
            )

        assert [e.date.day for e in recorder.snapshots[-1]] == [3, 2, 1]
        handle.close()

    def test_close_stops_delivery(self, services):
        """Test that nothing is delivered after close."""
        recorder = Recorder()
        handle = services.feeds.open_categories(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        handle.close()
        handle.close()
        services.categories.create("Food", "#111111", "user-1")

        assert handle.closed
        assert len(recorder.snapshots) == 1
        assert services.store.listener_count() == 0

    def test_close_from_inside_callback(self, services):
        """Test that a feed closed by its own callback receives nothing more."""
        handles = []
        deliveries = []

        def on_snapshot(items):
            deliveries.append(items)
            if items:
                handles[0].close()

        handles.append(
            services.feeds.open_categories("user-1", on_snapshot, lambda e: None)
        )
        services.categories.create("Food", "#111111", "user-1")
        services.categories.create("Rent", "#222222", "user-1")

        assert len(deliveries) == 2
        assert services.store.listener_count() == 0

    def test_store_failure_reported_as_persistence_error(self, services, monkeypatch):
        """Test that a broken subscription surfaces once, as PersistenceError."""
        recorder = Recorder()
        handle = services.feeds.open_expenses(
            "user-1", recorder.on_snapshot, recorder.on_error
        )

        def failing_documents(collection):
            raise StoreError("connection lost")

        monkeypatch.setattr(services.store, "documents", failing_documents)
        services.store._notify("expenses")

        assert len(recorder.errors) == 1
        assert isinstance(recorder.errors[0], PersistenceError)
        assert "expenses" in str(recorder.errors[0])
        handle.close()
