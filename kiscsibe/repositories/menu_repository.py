"""
Repository layer for the menu catalog.
All SQL for the `categories` and `menu_items` tables lives here.
"""
import json
import sqlite3
from typing import Iterable, Optional
import logging

from kiscsibe.models.category import Category
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class MenuRepository:
    """Data access layer for categories and menu items."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing MenuRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, menu_item_id: int) -> Optional[MenuItem]:
        """Return a menu item by id or None if missing."""
        row = self._conn.execute(
            "SELECT * FROM menu_items WHERE id = ?", (menu_item_id,)
        ).fetchone()
        return MenuItem.from_row(row) if row else None

    @log_db_timing
    def get_by_name(self, name: str) -> Optional[MenuItem]:
        row = self._conn.execute(
            "SELECT * FROM menu_items WHERE name = ? ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        return MenuItem.from_row(row) if row else None

    @log_db_timing
    def list_by_ids(self, menu_item_ids: Iterable[int]) -> list[MenuItem]:
        """Return the menu items matching the given ids (any order)."""
        ids = tuple(set(menu_item_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        rows = self._conn.execute(
            f"SELECT * FROM menu_items WHERE id IN ({placeholders})", ids
        ).fetchall()
        return [MenuItem.from_row(r) for r in rows]

    @log_db_timing
    def list_active_in_categories(self, category_names: Iterable[str]) -> list[MenuItem]:
        """Return active items whose category name is in *category_names*, by name."""
        names = tuple(category_names)
        if not names:
            return []
        placeholders = ", ".join("?" for _ in names)
        rows = self._conn.execute(
            f"""
            SELECT mi.*
              FROM menu_items mi
              JOIN categories c ON c.id = mi.category_id
             WHERE mi.is_active = 1
               AND c.name IN ({placeholders})
             ORDER BY mi.name
            """,
            names,
        ).fetchall()
        return [MenuItem.from_row(r) for r in rows]

    @log_db_timing
    def list_grouped_by_category(self) -> list[dict]:
        """
        Return active menu items grouped by category.

        Each dict in the returned list has:
            category_id   – int
            category_name – str
            sort_order    – int
            items         – list[MenuItem]
        """
        rows = self._conn.execute(
            """
            SELECT mi.*,
                   c.name       AS category_name,
                   c.sort_order AS category_sort_order
              FROM menu_items mi
              JOIN categories c ON c.id = mi.category_id
             WHERE mi.is_active = 1
             ORDER BY c.sort_order, c.name, mi.name
            """
        ).fetchall()

        groups: dict[int, dict] = {}
        for r in rows:
            cid = r["category_id"]
            if cid not in groups:
                groups[cid] = {
                    "category_id": cid,
                    "category_name": r["category_name"],
                    "sort_order": r["category_sort_order"],
                    "items": [],
                }
            groups[cid]["items"].append(MenuItem.from_row(r))
        return list(groups.values())

    @log_db_timing
    def get_category_by_name(self, name: str) -> Optional[Category]:
        row = self._conn.execute(
            "SELECT * FROM categories WHERE name = ?", (name,)
        ).fetchone()
        return Category.from_row(row) if row else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create_category(self, name: str, sort_order: int = 0) -> Category:
        """Insert a category and return it."""
        logger.info("Creating category name=%s", name)
        cursor = self._conn.execute(
            "INSERT INTO categories (name, sort_order) VALUES (?, ?)",
            (name, sort_order),
        )
        row = self._conn.execute(
            "SELECT * FROM categories WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()
        return Category.from_row(row)

    @log_db_timing
    def create(
        self,
        name: str,
        price_huf: int,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        allergens: Optional[list[str]] = None,
        is_active: bool = True,
        is_always_available: bool = False,
        requires_side_selection: bool = False,
    ) -> MenuItem:
        """Insert a menu item row and return it."""
        logger.info("Creating menu item name=%s", name)
        cursor = self._conn.execute(
            """
            INSERT INTO menu_items (
                category_id, name, description, price_huf, image_url, allergens,
                is_active, is_always_available, requires_side_selection
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                category_id,
                name,
                description,
                price_huf,
                image_url,
                json.dumps(allergens or [], ensure_ascii=False),
                int(is_active),
                int(is_always_available),
                int(requires_side_selection),
            ),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]

    @log_db_timing
    def set_active(self, menu_item_id: int, is_active: bool) -> bool:
        """Toggle the active flag and return True if the item exists."""
        logger.info("Setting menu item id=%s active=%s", menu_item_id, is_active)
        cursor = self._conn.execute(
            "UPDATE menu_items SET is_active = ? WHERE id = ?",
            (int(is_active), menu_item_id),
        )
        return cursor.rowcount > 0
