"""Application error types.

Every error is caught at the handler nearest the user action (HTTP request,
page handler, CLI command) and turned into a status code or display string.
"""

from typing import Iterable, List, Optional

AUTH_ERROR_MESSAGES = {
    "email-already-in-use": "An account with this email already exists",
    "weak-password": "Password should be at least 6 characters",
    "invalid-email": "Invalid email address",
    "user-not-found": "Invalid email or password",
    "wrong-password": "Invalid email or password",
    "missing-display-name": "First name is required",
}


class ValidationError(ValueError):
    """Raised when required input fields are missing or invalid.

    Args:
        fields: Names of the offending fields, as the caller spelled them.
        message: Optional message; defaults to a list of missing fields.
    """

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields: List[str] = list(fields)
        if message is None:
            message = f"Missing required fields: {', '.join(self.fields)}"
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class PersistenceError(Exception):
    """Raised when a document store read, write or subscription fails."""


class AuthError(Exception):
    """Raised by identity providers, carrying a provider error code.

    Args:
        code: Error code such as "weak-password".
    """

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)

    @property
    def message(self) -> str:
        """User-facing text for this error code."""
        return get_auth_error_message(self.code)


def get_auth_error_message(code: str) -> str:
    """Map an identity provider error code to a user-facing message."""
    return AUTH_ERROR_MESSAGES.get(
        code, f"An error occurred: {code}. Please try again"
    )
