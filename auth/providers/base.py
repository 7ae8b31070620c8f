"""Base provider interface for identity provider implementations."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from models.user import User
from logger import get_logger

logger = get_logger()

SessionCallback = Callable[[Optional[User]], None]


class IdentityProvider(ABC):
    """Abstract base class for identity providers.

    A provider instance is one client session. Session changes (sign-in,
    sign-out, the first resolution of a restored session) are announced to
    every registered callback with the new user, or None when signed out.
    Profile updates do not count as session changes.
    """

    def __init__(self):
        self._callbacks: List[SessionCallback] = []
        self._current_user: Optional[User] = None
        self._resolved = False

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def resolved(self) -> bool:
        """Whether the session state is known yet."""
        return self._resolved

    @abstractmethod
    def sign_in(self, email: str, password: str) -> User:
        """Sign in with email and password.

        Raises:
            AuthError: With code "invalid-email", "user-not-found" or
                "wrong-password".
        """

    @abstractmethod
    def sign_up(self, email: str, password: str, display_name: str) -> User:
        """Create an account, set its display name and sign in.

        Raises:
            AuthError: With code "invalid-email", "weak-password",
                "email-already-in-use" or "missing-display-name".
        """

    @abstractmethod
    def update_profile(self, display_name: str) -> User:
        """Change the signed-in user's display name."""

    @abstractmethod
    def restore(self, user_id: Optional[str]) -> Optional[User]:
        """Resume a persisted session.

        Args:
            user_id: Id remembered from an earlier sign-in, or None.

        Returns:
            The restored user, or None if there is no valid session.
        """

    def sign_out(self) -> None:
        """End the session."""
        self._set_user(None)

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Register a session-change callback.

        If the session state is already known the callback is invoked right
        away with the current user.

        Returns:
            A function that unregisters the callback.
        """
        self._callbacks.append(callback)
        if self._resolved:
            callback(self._current_user)

        def unsubscribe():
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _set_user(self, user: Optional[User]) -> None:
        previous_id = self._current_user.id if self._current_user else None
        new_id = user.id if user else None
        self._current_user = user

        if self._resolved and previous_id == new_id:
            return
        self._resolved = True

        logger.debug(f"Session changed: {'signed in' if user else 'signed out'}")
        for callback in list(self._callbacks):
            callback(user)
