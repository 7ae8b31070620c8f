"""Session gate: ties open feeds to the current identity.

The gate listens to an identity provider and owns every feed handle opened
on behalf of the signed-in user. On any identity transition it closes all
handles and resets its consumers before opening feeds for the new identity,
so a stale callback never sees another user's data.
"""

import enum
from typing import Callable, List, Optional, Protocol
from models.user import User
from services.feeds import FeedHandle
from logger import get_logger

logger = get_logger()


class SessionState(enum.Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class FeedConsumer(Protocol):
    """Anything that opens feeds for a user, e.g. a view model."""

    def open(self, user: User) -> List[FeedHandle]: ...

    def reset(self) -> None: ...


class SessionGate:
    """Tracks the session state and the feeds that depend on it.

    Args:
        identity: IdentityProvider to follow.
        on_anonymous: Optional callback run when the session becomes anonymous
            (used to send the visitor to the login page).
    """

    def __init__(self, identity, on_anonymous: Optional[Callable[[], None]] = None):
        self.identity = identity
        self.on_anonymous = on_anonymous
        self.state = SessionState.UNKNOWN
        self.user: Optional[User] = None
        self._consumers: List[FeedConsumer] = []
        self._handles: List[FeedHandle] = []
        self._unsubscribe = identity.on_session_change(self._on_session_change)

    @property
    def requires_login(self) -> bool:
        return self.state is SessionState.ANONYMOUS

    @property
    def open_feed_count(self) -> int:
        return len([h for h in self._handles if not h.closed])

    def attach(self, consumer: FeedConsumer) -> None:
        """Register a consumer; its feeds open now if a user is signed in."""
        self._consumers.append(consumer)
        if self.state is SessionState.AUTHENTICATED:
            self._handles.extend(consumer.open(self.user))

    def close(self) -> None:
        """Stop following the identity provider and close every feed."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._close_feeds()

    def _on_session_change(self, user: Optional[User]) -> None:
        # Feeds for the old identity close before any for the new one open
        self._close_feeds()
        for consumer in self._consumers:
            consumer.reset()

        self.user = user
        if user is None:
            self.state = SessionState.ANONYMOUS
            logger.debug("Session is anonymous")
            if self.on_anonymous is not None:
                self.on_anonymous()
            return

        self.state = SessionState.AUTHENTICATED
        logger.debug(f"Session authenticated as {user.id}")
        self._open_feeds()

    def _open_feeds(self) -> None:
        for consumer in self._consumers:
            self._handles.extend(consumer.open(self.user))

    def _close_feeds(self) -> None:
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.close()
