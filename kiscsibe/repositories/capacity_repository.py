"""
Repository layer for pickup capacity slots.
All SQL for the `capacity_slots` table lives here.
"""
import sqlite3
from datetime import date
from typing import Optional
import logging

from kiscsibe.models.capacity_slot import CapacitySlot
from kiscsibe.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class CapacityRepository:
    """Data access layer for pickup time slots."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing CapacityRepository")
        self._conn = conn

    @log_db_timing
    def get_slot(self, slot_date: date, timeslot: str) -> Optional[CapacitySlot]:
        row = self._conn.execute(
            "SELECT * FROM capacity_slots WHERE date = ? AND timeslot = ?",
            (slot_date.isoformat(), timeslot),
        ).fetchone()
        return CapacitySlot.from_row(row) if row else None

    @log_db_timing
    def book(self, slot_date: date, timeslot: str) -> bool:
        """Take one booking in the slot; False when the slot is full or missing."""
        cursor = self._conn.execute(
            """
            UPDATE capacity_slots
               SET booked_orders = booked_orders + 1
             WHERE date = ? AND timeslot = ? AND booked_orders < max_orders
            """,
            (slot_date.isoformat(), timeslot),
        )
        return cursor.rowcount > 0

    @log_db_timing
    def create(self, slot_date: date, timeslot: str, max_orders: int) -> int:
        logger.info("Creating capacity slot %s %s max=%s", slot_date, timeslot, max_orders)
        cursor = self._conn.execute(
            "INSERT INTO capacity_slots (date, timeslot, max_orders) VALUES (?, ?, ?)",
            (slot_date.isoformat(), timeslot, max_orders),
        )
        return cursor.lastrowid
