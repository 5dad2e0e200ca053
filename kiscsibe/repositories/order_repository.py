"""
Repository layer for Order persistence.
All SQL for `orders`, `order_items` and `order_item_options` lives here.
"""
import sqlite3
from datetime import date, datetime, timezone
from typing import Optional
import logging

from kiscsibe.models.order import (
    OptionType,
    Order,
    OrderItem,
    OrderItemOption,
    OrderStatus,
    PaymentMethod,
)
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class OrderRepository:
    """Data access layer for orders and their lines."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing OrderRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, order_id: int, with_items: bool = True) -> Optional[Order]:
        """Return an order (optionally with lines and options) or None."""
        row = self._conn.execute(
            "SELECT * FROM orders WHERE id = ?", (order_id,)
        ).fetchone()
        if row is None:
            return None
        order = Order.from_row(row)
        if with_items:
            order.items = self._list_items(order.id)
        return order

    @log_db_timing
    def get_by_code(self, code: str) -> Optional[Order]:
        row = self._conn.execute(
            "SELECT * FROM orders WHERE code = ?", (code,)
        ).fetchone()
        if row is None:
            return None
        order = Order.from_row(row)
        order.items = self._list_items(order.id)
        return order

    @log_db_timing
    def code_exists(self, code: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM orders WHERE code = ?", (code,)
        ).fetchone()
        return row is not None

    @log_db_timing
    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        day: Optional[date] = None,
        include_archived: bool = False,
    ) -> list[Order]:
        """List orders newest first, filtered by status and creation/pickup day."""
        clauses: list[str] = []
        params: list = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if day is not None:
            clauses.append("date(COALESCE(pickup_time, created_at)) = ?")
            params.append(day.isoformat())
        if not include_archived:
            clauses.append("archived = 0")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._conn.execute(
            f"SELECT * FROM orders {where} ORDER BY created_at DESC, id DESC",
            params,
        ).fetchall()
        return [Order.from_row(r) for r in rows]

    @log_db_timing
    def list_recent(self, limit: int) -> list[Order]:
        """Return the most recent orders, used as the authoritative notification source."""
        rows = self._conn.execute(
            "SELECT * FROM orders ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [Order.from_row(r) for r in rows]

    @log_db_timing
    def summarize_items_for_day(self, day: date) -> list[dict]:
        """
        Aggregate ordered quantities per line name for one day.
        Cancelled orders are ignored.
        """
        rows = self._conn.execute(
            """
            SELECT oi.name_snapshot      AS name,
                   SUM(oi.qty)           AS quantity,
                   SUM(oi.line_total_huf) AS revenue_huf
              FROM order_items oi
              JOIN orders o ON o.id = oi.order_id
             WHERE date(COALESCE(o.pickup_time, o.created_at)) = ?
               AND o.status != 'cancelled'
             GROUP BY oi.name_snapshot
             ORDER BY quantity DESC, name
            """,
            (day.isoformat(),),
        ).fetchall()
        return [
            {"name": r["name"], "quantity": r["quantity"], "revenue_huf": r["revenue_huf"]}
            for r in rows
        ]

    @log_db_timing
    def count_by_status_for_day(self, day: date) -> dict[str, int]:
        rows = self._conn.execute(
            """
            SELECT status, COUNT(*) AS cnt
              FROM orders
             WHERE date(COALESCE(pickup_time, created_at)) = ?
             GROUP BY status
            """,
            (day.isoformat(),),
        ).fetchall()
        return {r["status"]: r["cnt"] for r in rows}

    def _list_items(self, order_id: int) -> list[OrderItem]:
        item_rows = self._conn.execute(
            "SELECT * FROM order_items WHERE order_id = ? ORDER BY id", (order_id,)
        ).fetchall()
        items = [OrderItem.from_row(r) for r in item_rows]
        if not items:
            return items

        by_id = {item.id: item for item in items}
        placeholders = ", ".join("?" for _ in by_id)
        option_rows = self._conn.execute(
            f"SELECT * FROM order_item_options WHERE order_item_id IN ({placeholders}) ORDER BY id",
            tuple(by_id),
        ).fetchall()
        for r in option_rows:
            by_id[r["order_item_id"]].options.append(OrderItemOption.from_row(r))
        return items

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(
        self,
        code: str,
        name: str,
        phone: str,
        email: Optional[str],
        notes: Optional[str],
        payment_method: PaymentMethod,
        pickup_time: Optional[datetime],
        total_huf: int,
    ) -> int:
        """Insert an order header with status 'new' and return its id."""
        logger.info("Creating order code=%s total=%s", code, total_huf)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            """
            INSERT INTO orders (
                code, name, phone, email, notes, payment_method,
                pickup_time, status, total_huf, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                code,
                name,
                phone,
                email,
                notes,
                payment_method.value,
                pickup_time.isoformat() if pickup_time else None,
                OrderStatus.NEW.value,
                total_huf,
                now,
                now,
            ),
        )
        return cursor.lastrowid

    @log_db_timing
    def add_item(
        self,
        order_id: int,
        item_id: Optional[int],
        name_snapshot: str,
        qty: int,
        unit_price_huf: int,
        line_total_huf: int,
        daily_type: Optional[str] = None,
        daily_id: Optional[int] = None,
    ) -> int:
        cursor = self._conn.execute(
            """
            INSERT INTO order_items (
                order_id, item_id, name_snapshot, qty, unit_price_huf,
                line_total_huf, daily_type, daily_id
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (order_id, item_id, name_snapshot, qty, unit_price_huf, line_total_huf, daily_type, daily_id),
        )
        return cursor.lastrowid

    @log_db_timing
    def add_option(
        self,
        order_item_id: int,
        option_type: OptionType,
        label_snapshot: str,
        price_delta_huf: int = 0,
        side_item_id: Optional[int] = None,
    ) -> int:
        cursor = self._conn.execute(
            """
            INSERT INTO order_item_options (
                order_item_id, option_type, label_snapshot, price_delta_huf, side_item_id
            )
            VALUES (?, ?, ?, ?, ?)
            """,
            (order_item_id, option_type.value, label_snapshot, price_delta_huf, side_item_id),
        )
        return cursor.lastrowid

    @log_db_timing
    def update_status(self, order_id: int, status: OrderStatus) -> bool:
        logger.info("Updating order id=%s status=%s", order_id, status.value)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            "UPDATE orders SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, now, order_id),
        )
        return cursor.rowcount > 0

    @log_db_timing
    def archive(self, order_id: int) -> bool:
        logger.info("Archiving order id=%s", order_id)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            "UPDATE orders SET archived = 1, updated_at = ? WHERE id = ?",
            (now, order_id),
        )
        return cursor.rowcount > 0
