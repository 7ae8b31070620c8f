"""Local identity provider backed by the users table."""

import re
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional
from werkzeug.security import check_password_hash, generate_password_hash
from auth.providers.base import IdentityProvider
from models.user import User
from errors import AuthError, PersistenceError
from logger import get_logger

logger = get_logger()

MIN_PASSWORD_LENGTH = 6

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_USER_SELECT_FIELDS = "id, email, display_name, created_at, updated_at"


class LocalIdentityProvider(IdentityProvider):
    """Email and password accounts stored in SQLite with werkzeug hashes.

    Args:
        db_manager: Database manager instance for database operations.
    """

    def __init__(self, db_manager):
        super().__init__()
        self.db_manager = db_manager

    def sign_in(self, email: str, password: str) -> User:
        email = _normalize_email(email)
        if not _EMAIL_PATTERN.match(email):
            raise AuthError("invalid-email")

        row = self._fetch_one(
            f"SELECT {_USER_SELECT_FIELDS}, password_hash FROM users WHERE email = ?",
            (email,),
        )
        if row is None:
            logger.info(f"Sign in failed: no account for {email}")
            raise AuthError("user-not-found")
        if not check_password_hash(row[5], password or ""):
            logger.info(f"Sign in failed: wrong password for {email}")
            raise AuthError("wrong-password")

        user = _row_to_user(row)
        logger.info(f"Signed in {user.email}")
        self._set_user(user)
        return user

    def sign_up(self, email: str, password: str, display_name: str) -> User:
        email = _normalize_email(email)
        if not (display_name or "").strip():
            raise AuthError("missing-display-name")
        if not _EMAIL_PATTERN.match(email):
            raise AuthError("invalid-email")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError("weak-password")

        now = _now()
        user = User(
            id=uuid.uuid4().hex,
            email=email,
            name=display_name.strip(),
            created_at=now,
            updated_at=now,
        )
        try:
            with self.db_manager.connect() as conn:
                conn.execute(
                    """
                    INSERT INTO users
                        (id, email, password_hash, display_name, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user.id,
                        user.email,
                        generate_password_hash(password),
                        user.name,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise AuthError("email-already-in-use") from e
        except sqlite3.Error as e:
            logger.error(f"Error creating account for {email}: {e}")
            raise PersistenceError("Failed to create account") from e

        logger.info(f"Created account {user.email}")
        self._set_user(user)
        return user

    def update_profile(self, display_name: str) -> User:
        user = self.current_user
        if user is None:
            raise AuthError("no-current-user")

        now = _now()
        try:
            with self.db_manager.connect() as conn:
                conn.execute(
                    "UPDATE users SET display_name = ?, updated_at = ? WHERE id = ?",
                    (display_name, now.isoformat(), user.id),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error updating profile of {user.email}: {e}")
            raise PersistenceError("Failed to update profile") from e

        user.name = display_name
        user.updated_at = now
        return user

    def restore(self, user_id: Optional[str]) -> Optional[User]:
        user = self.find(user_id) if user_id else None
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        if self.current_user is not None:
            logger.info(f"Signed out {self.current_user.email}")
        super().sign_out()

    def find(self, user_id: str) -> Optional[User]:
        """Look up an account by id."""
        row = self._fetch_one(
            f"SELECT {_USER_SELECT_FIELDS} FROM users WHERE id = ?", (user_id,)
        )
        return _row_to_user(row) if row else None

    def find_all(self):
        """List every account, ordered by email."""
        try:
            with self.db_manager.connect() as conn:
                cursor = conn.execute(
                    f"SELECT {_USER_SELECT_FIELDS} FROM users ORDER BY email"
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error listing accounts: {e}")
            raise PersistenceError("Failed to list accounts") from e

        return [_row_to_user(row) for row in rows]

    def _fetch_one(self, sql, params):
        try:
            with self.db_manager.connect() as conn:
                return conn.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading accounts: {e}")
            raise PersistenceError("Failed to read account") from e


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        email=row[1],
        name=row[2],
        created_at=datetime.fromisoformat(row[3]),
        updated_at=datetime.fromisoformat(row[4]),
    )
