"""Identity provider integration for sign-in, sign-up and session changes."""

from auth.factory import get_identity_provider

__all__ = ["get_identity_provider"]
