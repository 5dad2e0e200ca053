"""SQLite connection helpers and schema initialization."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Callable

from kiscsibe.core.config import settings
import kiscsibe.core.logging_config  # noqa: F401 – registers the TRACE level

logger = logging.getLogger(__name__)

# File path of the SQLite database (DATABASE_URL without "sqlite:///")
DB_PATH = settings.DATABASE_URL.replace("sqlite:///", "")


class Connection(sqlite3.Connection):
    """
    sqlite3 connection with after-commit callbacks.

    Callbacks registered with `on_commit` run once the current transaction
    commits and are discarded on rollback or close.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._after_commit: list[Callable[[], None]] = []

    def on_commit(self, callback: Callable[[], None]) -> None:
        self._after_commit.append(callback)

    def commit(self) -> None:
        super().commit()
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            callback()

    def rollback(self) -> None:
        super().rollback()
        if self._after_commit:
            logger.trace("Discarding %s after-commit callbacks", len(self._after_commit))
        self._after_commit = []

    def close(self) -> None:
        self._after_commit = []
        super().close()


def _ensure_db_dir(path: str) -> None:
    db_dir = os.path.dirname(path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)


def get_connection() -> Connection:
    """Create and return a new SQLite connection with row factory."""
    _ensure_db_dir(DB_PATH)
    logger.trace("Opening database connection to %s", DB_PATH)
    conn = sqlite3.connect(DB_PATH, check_same_thread=False, factory=Connection)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db():
    """Yield a connection; commit on success, roll back on any exception."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
        logger.trace("Database transaction committed")
    except Exception:
        logger.error("Database transaction rolled back", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()
        logger.trace("Database connection closed")


def init_db() -> None:
    """Create all tables and apply pending column migrations."""
    logger.info("Initializing database schema at %s", DB_PATH)
    from kiscsibe.db import schema
    schema.create_tables()
