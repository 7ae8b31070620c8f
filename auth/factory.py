"""Factory for creating identity provider instances."""

from config import Config
from auth.providers.base import IdentityProvider
from auth.providers.local import LocalIdentityProvider
from logger import get_logger

logger = get_logger()


def get_identity_provider(config: Config, db_manager) -> IdentityProvider:
    """Create an identity provider client based on configuration.

    Each call returns a fresh client with its own session, so callers that
    serve several users (the web app) create one per request.

    Args:
        config: Application configuration.
        db_manager: Database manager for providers that keep local state.

    Returns:
        IdentityProvider instance.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    provider_name = getattr(config, "auth_provider", None) or "local"

    if provider_name == "local":
        logger.debug("Using local identity provider")
        return LocalIdentityProvider(db_manager)

    raise ValueError(f"Unknown identity provider: {provider_name}")
