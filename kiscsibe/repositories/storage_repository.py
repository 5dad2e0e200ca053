"""
Repository for the keyed, JSON-valued `local_storage` table.

Each entry is addressed by ``<prefix>:<session_id>`` and holds one
document (cart lines, favorites list, a consent flag).
"""
import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Optional
import logging

from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


def storage_key(prefix: str, session_id: str) -> str:
    return f"{prefix}:{session_id}"


class StorageRepository:
    """Data access layer for session-local documents."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing StorageRepository")
        self._conn = conn

    @log_db_timing
    def get(self, key: str) -> Optional[Any]:
        """Return the decoded document stored under *key*, or None."""
        row = self._conn.execute(
            "SELECT value FROM local_storage WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt storage entry key=%s", key)
            return None

    @log_db_timing
    def set(self, key: str, value: Any) -> None:
        """Insert or replace the document stored under *key*."""
        now = datetime.now(tz=timezone.utc).isoformat()
        self._conn.execute(
            """
            INSERT INTO local_storage (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                           updated_at = excluded.updated_at
            """,
            (key, json.dumps(value, ensure_ascii=False), now),
        )
