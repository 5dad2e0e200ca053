"""
Repository layer for side-dish configuration.
All SQL for the `menu_item_sides` table lives here.
"""
import sqlite3
import logging

from kiscsibe.models.side_config import SideConfiguration
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class SideRepository:
    """Data access layer for main item → side item links."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing SideRepository")
        self._conn = conn

    @log_db_timing
    def list_for_main(self, main_item_id: int) -> list[SideConfiguration]:
        """Return every side row configured for a main item, in insertion order."""
        rows = self._conn.execute(
            """
            SELECT s.*,
                   mi.id           AS side_id,
                   mi.name         AS side_name,
                   mi.price_huf    AS side_price_huf,
                   mi.category_id  AS side_category_id,
                   mi.description  AS side_description,
                   mi.image_url    AS side_image_url,
                   mi.is_active    AS side_is_active
              FROM menu_item_sides s
              JOIN menu_items mi ON mi.id = s.side_item_id
             WHERE s.main_item_id = ?
             ORDER BY s.id
            """,
            (main_item_id,),
        ).fetchall()
        return [SideConfiguration.from_row(r) for r in rows]

    @log_db_timing
    def create(
        self,
        main_item_id: int,
        side_item_id: int,
        is_required: bool = False,
        min_select: int = 0,
        max_select: int = 1,
        is_default: bool = False,
    ) -> int:
        """Link a side item to a main item and return the row id."""
        logger.info("Linking side id=%s to main id=%s", side_item_id, main_item_id)
        cursor = self._conn.execute(
            """
            INSERT INTO menu_item_sides (
                main_item_id, side_item_id, is_required, min_select, max_select, is_default
            )
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (main_item_id, side_item_id, int(is_required), min_select, max_select, int(is_default)),
        )
        return cursor.lastrowid
