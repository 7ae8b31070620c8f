"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject a test database for testing.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If None, creates
            DatabaseManager from config.
        store: Optional document store. If None, a SqliteDocumentStore on
            db_manager is used.
    """

    def __init__(self, config: Config, db_manager=None, store=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from store.sqlite import SqliteDocumentStore
        from services.categories import CategoryService
        from services.expenses import ExpenseService
        from services.feeds import LiveQueryService

        self.store = store or SqliteDocumentStore(self.db_manager)
        self.categories = CategoryService(self.store)
        self.expenses = ExpenseService(
            self.store, validate_amounts=config.validate_amounts
        )
        self.feeds = LiveQueryService(self.store)

    def identity_client(self):
        """Create a new identity provider client (one session)."""
        from auth import get_identity_provider

        return get_identity_provider(self.config, self.db_manager)
