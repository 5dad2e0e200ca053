"""
Repository layer for staff refresh tokens.
All SQL for the `refresh_tokens` table lives here.
"""
import sqlite3
from datetime import datetime
from typing import Optional
import logging

from kiscsibe.models.token import RefreshToken
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class TokenRepository:
    """Data access layer for refresh token records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing TokenRepository")
        self._conn = conn

    @log_db_timing
    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        row = self._conn.execute(
            "SELECT * FROM refresh_tokens WHERE token = ?", (token,)
        ).fetchone()
        return RefreshToken.from_row(row) if row else None

    @log_db_timing
    def create(self, user_id: int, token: str, expires_at: datetime) -> None:
        logger.info("Storing refresh token for user id=%s", user_id)
        self._conn.execute(
            "INSERT INTO refresh_tokens (user_id, token, expires_at) VALUES (?, ?, ?)",
            (user_id, token, expires_at.isoformat()),
        )

    @log_db_timing
    def revoke(self, token: str) -> bool:
        """Mark a token as revoked and return True if a row was updated."""
        cursor = self._conn.execute(
            "UPDATE refresh_tokens SET revoked = 1 WHERE token = ?", (token,)
        )
        logger.info("Refresh token revoke affected %s rows", cursor.rowcount)
        return cursor.rowcount > 0
