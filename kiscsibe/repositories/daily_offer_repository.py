"""
Repository layer for daily offers.
All SQL for `daily_offers`, `daily_offer_items` and `daily_offer_menus` lives here.
"""
import sqlite3
from datetime import date
from typing import Iterable, Optional
import logging

from kiscsibe.models.daily_offer import DailyMenu, DailyOffer, DailyOfferItem, MenuRole
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)

_OFFER_ITEM_SELECT = """
SELECT doi.id,
       doi.daily_offer_id,
       doi.is_menu_part,
       doi.menu_role,
       mi.id           AS item_id,
       mi.name         AS item_name,
       mi.price_huf    AS item_price_huf,
       mi.category_id  AS item_category_id,
       mi.description  AS item_description,
       mi.image_url    AS item_image_url,
       mi.is_active    AS item_is_active
  FROM daily_offer_items doi
  JOIN menu_items mi ON mi.id = doi.item_id
"""


class DailyOfferRepository:
    """Data access layer for daily offers, their items and menu combos."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing DailyOfferRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, offer_id: int) -> Optional[DailyOffer]:
        """Return an offer with its items and menu combo, or None."""
        row = self._conn.execute(
            "SELECT * FROM daily_offers WHERE id = ?", (offer_id,)
        ).fetchone()
        return self._hydrate(row) if row else None

    @log_db_timing
    def get_by_date(self, offer_date: date) -> Optional[DailyOffer]:
        """Return the offer for a calendar day, or None."""
        row = self._conn.execute(
            "SELECT * FROM daily_offers WHERE date = ?", (offer_date.isoformat(),)
        ).fetchone()
        return self._hydrate(row) if row else None

    @log_db_timing
    def get_menu(self, menu_id: int) -> Optional[DailyMenu]:
        """Return a menu combo with its soup and main resolved, or None."""
        row = self._conn.execute(
            "SELECT * FROM daily_offer_menus WHERE id = ?", (menu_id,)
        ).fetchone()
        if row is None:
            return None
        offer = self.get_by_id(row["daily_offer_id"])
        return offer.menu if offer else None

    @log_db_timing
    def list_side_candidates(
        self, offer_id: int, category_names: Iterable[str]
    ) -> list[MenuItem]:
        """Return the offer's à la carte items that belong to a side category."""
        names = tuple(category_names)
        if not names:
            return []
        placeholders = ", ".join("?" for _ in names)
        rows = self._conn.execute(
            _OFFER_ITEM_SELECT
            + f"""
              JOIN categories c ON c.id = mi.category_id
             WHERE doi.daily_offer_id = ?
               AND doi.is_menu_part = 0
               AND c.name IN ({placeholders})
             ORDER BY doi.id
            """,
            (offer_id, *names),
        ).fetchall()
        return [DailyOfferItem.from_row(r).menu_item for r in rows]

    def _hydrate(self, row) -> DailyOffer:
        offer = DailyOffer.from_row(row)
        item_rows = self._conn.execute(
            _OFFER_ITEM_SELECT + " WHERE doi.daily_offer_id = ? ORDER BY doi.id",
            (offer.id,),
        ).fetchall()
        offer.items = [DailyOfferItem.from_row(r) for r in item_rows]

        menu_row = self._conn.execute(
            "SELECT * FROM daily_offer_menus WHERE daily_offer_id = ?", (offer.id,)
        ).fetchone()
        if menu_row:
            menu = DailyMenu.from_row(menu_row)
            soup = offer.item_for_role(MenuRole.SOUP)
            main = offer.item_for_role(MenuRole.MAIN)
            menu.soup = soup.menu_item if soup else None
            menu.main = main.menu_item if main else None
            offer.menu = menu
        return offer

    # ------------------------------------------------------------------
    # Portion bookkeeping
    # ------------------------------------------------------------------

    @log_db_timing
    def consume_offer_portions(self, offer_id: int, units: int) -> bool:
        """
        Atomically take *units* portions from an offer.
        Offers with NULL remaining portions are unlimited and always succeed.
        """
        cursor = self._conn.execute(
            """
            UPDATE daily_offers
               SET remaining_portions = CASE
                       WHEN remaining_portions IS NULL THEN NULL
                       ELSE remaining_portions - ?
                   END
             WHERE id = ?
               AND (remaining_portions IS NULL OR remaining_portions >= ?)
            """,
            (units, offer_id, units),
        )
        return cursor.rowcount > 0

    @log_db_timing
    def consume_menu_portions(self, menu_id: int, units: int) -> bool:
        """Atomically take *units* portions from a menu combo."""
        cursor = self._conn.execute(
            """
            UPDATE daily_offer_menus
               SET remaining_portions = remaining_portions - ?
             WHERE id = ? AND remaining_portions >= ?
            """,
            (units, menu_id, units),
        )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(
        self,
        offer_date: date,
        package_price: Optional[int],
        max_portions: Optional[int] = None,
        remaining_portions: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Insert a daily offer and return its id."""
        logger.info("Creating daily offer date=%s", offer_date)
        cursor = self._conn.execute(
            """
            INSERT INTO daily_offers (date, price_huf, max_portions, remaining_portions, note)
            VALUES (?, ?, ?, ?, ?)
            """,
            (offer_date.isoformat(), package_price, max_portions, remaining_portions, note),
        )
        return cursor.lastrowid

    @log_db_timing
    def add_item(
        self,
        offer_id: int,
        item_id: int,
        is_menu_part: bool = False,
        menu_role: Optional[MenuRole] = None,
    ) -> int:
        cursor = self._conn.execute(
            """
            INSERT INTO daily_offer_items (daily_offer_id, item_id, is_menu_part, menu_role)
            VALUES (?, ?, ?, ?)
            """,
            (offer_id, item_id, int(is_menu_part), menu_role.value if menu_role else None),
        )
        return cursor.lastrowid

    @log_db_timing
    def create_menu(
        self, offer_id: int, menu_price: int, max_portions: int, remaining_portions: int
    ) -> int:
        """Attach the soup + main combo pricing to an offer and return its id."""
        logger.info("Creating daily menu for offer id=%s", offer_id)
        cursor = self._conn.execute(
            """
            INSERT INTO daily_offer_menus (daily_offer_id, menu_price_huf, max_portions, remaining_portions)
            VALUES (?, ?, ?, ?)
            """,
            (offer_id, menu_price, max_portions, remaining_portions),
        )
        return cursor.lastrowid
