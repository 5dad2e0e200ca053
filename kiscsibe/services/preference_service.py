"""
Per-session consent flags.
Cookie and notification consent are stored as separate local storage
entries; intrusive UI such as announcement popups needs cookie consent.
"""
import sqlite3
from typing import Optional
import logging

from kiscsibe.core.config import settings
from kiscsibe.repositories.storage_repository import StorageRepository, storage_key
from kiscsibe.schemas.preferences import ConsentResponse, ConsentUpdate

logger = logging.getLogger(__name__)


class PreferenceService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing PreferenceService")
        self._storage = StorageRepository(conn)

    def _read_flag(self, prefix: str, session_id: str) -> Optional[bool]:
        value = self._storage.get(storage_key(prefix, session_id))
        return value if isinstance(value, bool) else None

    def get(self, session_id: str) -> ConsentResponse:
        cookie = self._read_flag(settings.COOKIE_CONSENT_STORAGE_KEY, session_id)
        notification = self._read_flag(settings.NOTIFICATION_CONSENT_STORAGE_KEY, session_id)
        return ConsentResponse(
            session_id=session_id,
            cookie_consent=cookie,
            notification_consent=notification,
            announcements_allowed=cookie is True,
        )

    def update(self, session_id: str, data: ConsentUpdate) -> ConsentResponse:
        logger.info("Updating consent for session=%s", session_id)
        if data.cookie_consent is not None:
            self._storage.set(
                storage_key(settings.COOKIE_CONSENT_STORAGE_KEY, session_id),
                data.cookie_consent,
            )
        if data.notification_consent is not None:
            self._storage.set(
                storage_key(settings.NOTIFICATION_CONSENT_STORAGE_KEY, session_id),
                data.notification_consent,
            )
        return self.get(session_id)
