"""Database manager for SQLite connections, paths and schema migrations."""

import sqlite3
from contextlib import contextmanager
from typing import List
from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()


class DatabaseManager:
    """Manages database connections, paths and migrations.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        """Get the current database path."""
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path."""
        return get_migrations_dir()

    def available_migrations(self) -> List[str]:
        """List migration file names in apply order."""
        migrations_dir = self.get_migrations_dir()
        if not migrations_dir.exists():
            return []
        return sorted(path.name for path in migrations_dir.glob("*.sql"))

    def applied_migrations(self, conn) -> set:
        """Return the set of migration files recorded as applied."""
        _init_schema_migrations_table(conn)
        cursor = conn.execute(
            "SELECT migration_file FROM schema_migrations ORDER BY migration_file"
        )
        return {row[0] for row in cursor.fetchall()}

    def pending_migrations(self, conn) -> List[str]:
        """Return migration files not yet applied, in apply order."""
        applied = self.applied_migrations(conn)
        return [m for m in self.available_migrations() if m not in applied]

    def apply_migrations(self) -> List[str]:
        """Apply every pending migration.

        Returns:
            Names of the migrations that were applied.

        Raises:
            sqlite3.Error: If a migration fails. That migration is rolled back.
        """
        with self.connect() as conn:
            pending = self.pending_migrations(conn)
            for migration_file in pending:
                _apply_migration(conn, self.get_migrations_dir() / migration_file)
            return pending


def _init_schema_migrations_table(conn):
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def _apply_migration(conn, migration_path):
    with open(migration_path, "r") as f:
        sql = f.read()

    try:
        conn.executescript(sql)
        conn.execute(
            "INSERT INTO schema_migrations (migration_file) VALUES (?)",
            (migration_path.name,),
        )
        conn.commit()
        logger.info(f"Applied migration: {migration_path.name}")
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Error applying migration {migration_path.name}: {e}")
        raise
