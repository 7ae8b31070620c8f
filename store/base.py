"""Document store interface with live query listeners.

Backends implement single-document reads and writes plus filtered queries.
The listener registry lives here so every backend delivers snapshots the
same way: the full result set, in write order, once per change.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence
from logger import get_logger

logger = get_logger()


class StoreError(Exception):
    """Raised when the backing store cannot complete a read or write."""


@dataclass(frozen=True, order=True)
class Timestamp:
    """Store-native point in time, always timezone-aware UTC."""

    value: datetime

    @classmethod
    def now(cls) -> "Timestamp":
        return cls(datetime.now(timezone.utc))

    @classmethod
    def from_datetime(cls, value: datetime) -> "Timestamp":
        """Wrap a datetime. Naive datetimes are taken to be UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return cls(value.astimezone(timezone.utc))

    @classmethod
    def from_date(cls, value: date) -> "Timestamp":
        """Midnight UTC of a calendar date."""
        return cls(datetime.combine(value, time.min, tzinfo=timezone.utc))

    @classmethod
    def from_isoformat(cls, value: str) -> "Timestamp":
        return cls.from_datetime(datetime.fromisoformat(value))

    def to_datetime(self) -> datetime:
        return self.value

    def to_date(self) -> date:
        return self.value.date()

    def isoformat(self) -> str:
        return self.value.isoformat()


class Filter(NamedTuple):
    """Field comparison used by queries and listeners."""

    field: str
    op: str
    value: Any

    def matches(self, data: Dict[str, Any]) -> bool:
        if self.field not in data:
            return False
        compare = _OPERATORS.get(self.op)
        if compare is None:
            raise ValueError(f"Unsupported filter operator: {self.op}")
        try:
            return bool(compare(data[self.field], self.value))
        except TypeError:
            # Values of different types never match
            return False


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}

# Cross-type ordering for sorted queries
_TYPE_RANK = {type(None): 0, bool: 1, int: 2, float: 2, Timestamp: 3, str: 4}


def _sort_key(value: Any):
    return (_TYPE_RANK.get(type(value), 5), value)


@dataclass
class Document:
    """A stored document: opaque id plus flat field data."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[List[Document]], None]
ErrorCallback = Callable[[Exception], None]


@dataclass(eq=False)
class _Listener:
    collection: str
    filters: Sequence[Filter]
    on_next: SnapshotCallback
    on_error: Optional[ErrorCallback]
    order_by: Optional[str]
    descending: bool
    last_snapshot: Optional[List[Document]] = None
    active: bool = True


class DocumentStore(ABC):
    """Abstract document store.

    Subclasses call ``_notify(collection)`` after every successful write so
    that listeners on the collection receive fresh snapshots.
    """

    def __init__(self):
        self._listeners: List[_Listener] = []
        self._pending: deque = deque()
        self._draining = False

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document under a new id and return the id."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch a document by id, or None."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        """Merge fields into an existing document.

        Returns:
            True if the document existed, False if nothing was written.
        """

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Deleting a missing id is not an error.

        Returns:
            True if a document was removed.
        """

    @abstractmethod
    def documents(self, collection: str) -> List[Document]:
        """Return every document in a collection."""

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        """Run a filtered query.

        Documents missing the order_by field are left out, as are documents
        missing any filtered field. Ties are ordered by document id.
        """
        docs = [
            doc
            for doc in self.documents(collection)
            if all(f.matches(doc.data) for f in filters)
        ]
        if order_by is None:
            return docs

        docs = [doc for doc in docs if order_by in doc.data]
        return sorted(
            docs,
            key=lambda doc: (_sort_key(doc.data[order_by]), doc.id),
            reverse=descending,
        )

    def listen(
        self,
        collection: str,
        filters: Sequence[Filter],
        on_next: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Callable[[], None]:
        """Subscribe to the result set of a query.

        The current result set is delivered before this method returns (or,
        when called from inside a callback, right after that callback), and
        again after each write that changes it.

        Returns:
            A function that removes the listener. Calling it more than once
            is harmless.
        """
        listener = _Listener(
            collection=collection,
            filters=tuple(filters),
            on_next=on_next,
            on_error=on_error,
            order_by=order_by,
            descending=descending,
        )
        self._listeners.append(listener)
        self._pending.append(listener)
        self._drain()

        def unsubscribe():
            listener.active = False
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def listener_count(self, collection: Optional[str] = None) -> int:
        return len(
            [
                listener
                for listener in self._listeners
                if collection is None or listener.collection == collection
            ]
        )

    def _notify(self, collection: str) -> None:
        """Queue a refresh for every listener on a collection."""
        for listener in list(self._listeners):
            if listener.collection == collection:
                self._pending.append(listener)
        self._drain()

    def _drain(self) -> None:
        # A callback that writes queues more work instead of recursing, so
        # deliveries for one listener always follow write order
        if self._draining:
            return
        self._draining = True
        try:
            while self._pending:
                self._deliver(self._pending.popleft())
        finally:
            self._draining = False

    def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return

        try:
            snapshot = self.query(
                listener.collection,
                listener.filters,
                order_by=listener.order_by,
                descending=listener.descending,
            )
        except StoreError as e:
            # A failed listener is dropped; the consumer has to re-subscribe
            listener.active = False
            if listener in self._listeners:
                self._listeners.remove(listener)
            logger.error(f"Listener on '{listener.collection}' failed: {e}")
            if listener.on_error is not None:
                self._call(listener, listener.on_error, e)
            return

        if snapshot == listener.last_snapshot:
            return
        listener.last_snapshot = snapshot
        self._call(listener, listener.on_next, list(snapshot))

    def _call(self, listener: _Listener, callback, payload) -> None:
        try:
            callback(payload)
        except Exception:
            logger.exception(
                f"Listener callback on '{listener.collection}' raised; "
                "continuing delivery"
            )
