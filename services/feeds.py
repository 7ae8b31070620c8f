"""Live query feeds over the document store.

A feed pushes the complete, converted result set of a user-scoped query to a
callback every time it changes. Feeds are owned resources: ``open_*`` returns
a FeedHandle and the owner must close it.
"""

from datetime import date
from typing import Callable, List, Optional
from models.category import Category
from models.expense import Expense
from services.categories import (
    COLLECTION_NAME as CATEGORIES,
    category_filters,
    document_to_category,
)
from services.expenses import (
    COLLECTION_NAME as EXPENSES,
    document_to_expense,
    expense_filters,
)
from store.base import StoreError
from errors import PersistenceError
from logger import get_logger

logger = get_logger()


class FeedHandle:
    """Handle to an open feed. Its only operation is close().

    Args:
        name: Label used in log messages.
    """

    def __init__(self, name: str):
        self.name = name
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop delivery immediately. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.debug(f"Closed feed {self.name}")

    def _guard(self, callback):
        # Drops deliveries that race the close (e.g. already queued by the store)
        def guarded(payload):
            if not self._closed:
                callback(payload)

        return guarded


class LiveQueryService:
    """Opens user-scoped live feeds on categories and expenses."""

    def __init__(self, store):
        """Initialize the feed service.

        Args:
            store: DocumentStore instance providing listeners.
        """
        self.store = store

    def open_categories(
        self,
        user_id: str,
        on_snapshot: Callable[[List[Category]], None],
        on_error: Callable[[Exception], None],
        type: Optional[str] = None,
    ) -> FeedHandle:
        """Open a feed of a user's categories.

        The first snapshot is delivered before this returns.
        """
        return self._open(
            f"categories:{user_id}",
            CATEGORIES,
            category_filters(user_id, type),
            lambda docs: [document_to_category(doc) for doc in docs],
            on_snapshot,
            on_error,
        )

    def open_expenses(
        self,
        user_id: str,
        on_snapshot: Callable[[List[Expense]], None],
        on_error: Callable[[Exception], None],
        since: Optional[date] = None,
    ) -> FeedHandle:
        """Open a feed of a user's expenses, newest first.

        Args:
            since: Optional earliest expense date (inclusive).
        """
        return self._open(
            f"expenses:{user_id}",
            EXPENSES,
            expense_filters(user_id, since),
            lambda docs: [document_to_expense(doc) for doc in docs],
            on_snapshot,
            on_error,
            order_by="date",
            descending=True,
        )

    def _open(
        self,
        name,
        collection,
        filters,
        convert,
        on_snapshot,
        on_error,
        order_by=None,
        descending=False,
    ) -> FeedHandle:
        handle = FeedHandle(name)

        def deliver(docs):
            on_snapshot(convert(docs))

        def fail(error):
            logger.error(f"Feed {name} failed: {error}")
            if isinstance(error, StoreError):
                error = PersistenceError(f"Lost connection to {collection}")
            on_error(error)

        logger.debug(f"Opening feed {name}")
        handle._unsubscribe = self.store.listen(
            collection,
            filters,
            handle._guard(deliver),
            handle._guard(fail),
            order_by=order_by,
            descending=descending,
        )

        # close() may already have run from inside the first delivery
        if handle.closed and handle._unsubscribe is not None:
            handle._unsubscribe()
            handle._unsubscribe = None
        return handle
