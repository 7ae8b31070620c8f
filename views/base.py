"""Base class for view models fed by live queries."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from models.user import User
from services.feeds import FeedHandle
from errors import PersistenceError
from logger import get_logger

logger = get_logger()


class LiveView(ABC):
    """Caches the latest snapshot of each of its feeds and recomputes.

    Feeds arrive independently and in no particular order relative to each
    other, so every update recomputes from the latest snapshot of every feed
    rather than assuming they change together.

    Subclasses list their feed names in ``feed_names``, open them in
    ``open_feeds`` using ``self.receiver(name)`` as the snapshot callback,
    and derive their state in ``recompute``.

    Args:
        feeds: LiveQueryService used to open feeds.
        clock: Returns the current time; defaults to datetime.now.
    """

    feed_names: Sequence[str] = ()
    error_message = "Failed to load data"

    def __init__(self, feeds, clock: Optional[Callable[[], datetime]] = None):
        self.feeds = feeds
        self.clock = clock or datetime.now
        self.user: Optional[User] = None
        self.error: Optional[str] = None
        self._snapshots: Dict[str, List[Any]] = {}

    @property
    def loading(self) -> bool:
        """True until every feed has delivered at least once."""
        if self.error:
            return False
        return any(name not in self._snapshots for name in self.feed_names)

    def snapshot(self, name: str) -> List[Any]:
        return self._snapshots.get(name, [])

    def open(self, user: User) -> List[FeedHandle]:
        self.user = user
        return self.open_feeds(user)

    def reset(self) -> None:
        """Forget everything derived from the previous identity."""
        self.user = None
        self.error = None
        self._snapshots = {}
        self.clear()

    def receiver(self, name: str) -> Callable[[List[Any]], None]:
        def receive(items):
            self._snapshots[name] = list(items)
            if not self.loading:
                self.recompute()

        return receive

    def on_error(self, error: Exception) -> None:
        logger.error(f"{type(self).__name__} feed error: {error}")
        self.error = (
            self.error_message if isinstance(error, PersistenceError) else str(error)
        )

    @abstractmethod
    def open_feeds(self, user: User) -> List[FeedHandle]:
        """Open this view's feeds for the user and return their handles."""

    @abstractmethod
    def recompute(self) -> None:
        """Derive view state from the latest snapshots."""

    def clear(self) -> None:
        """Reset derived state. Called on identity changes."""
