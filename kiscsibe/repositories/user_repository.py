"""
Repository layer for staff User persistence.
All SQL for the `users` table lives here.
"""
import sqlite3
from typing import Optional
import logging

from kiscsibe.models.user import User, UserRole
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class UserRepository:
    """Data access layer for staff accounts."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing UserRepository")
        self._conn = conn

    @log_db_timing
    def get_by_id(self, user_id: int) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def get_by_login(self, login: str) -> Optional[User]:
        """Return a user whose username or email equals *login*."""
        logger.trace("Fetching user by login=%s", login)
        row = self._conn.execute(
            "SELECT * FROM users WHERE username = ? OR email = ?", (login, login)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def create(
        self,
        email: str,
        username: str,
        hashed_password: str,
        role: UserRole,
        full_name: Optional[str] = None,
    ) -> User:
        """Insert a staff account and return it."""
        logger.info("Creating user username=%s role=%s", username, role.value)
        cursor = self._conn.execute(
            """
            INSERT INTO users (email, username, full_name, hashed_password, role)
            VALUES (?, ?, ?, ?, ?)
            """,
            (email, username, full_name, hashed_password, role.value),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]
