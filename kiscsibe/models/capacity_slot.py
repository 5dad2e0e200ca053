"""
Domain model representing a pickup capacity slot.
"""
from dataclasses import dataclass
from datetime import date


@dataclass
class CapacitySlot:
    id: int
    date: date
    timeslot: str
    max_orders: int
    booked_orders: int

    @property
    def is_full(self) -> bool:
        return self.booked_orders >= self.max_orders

    @classmethod
    def from_row(cls, row) -> "CapacitySlot":
        return cls(
            id=row["id"],
            date=date.fromisoformat(row["date"]),
            timeslot=row["timeslot"],
            max_orders=row["max_orders"],
            booked_orders=row["booked_orders"],
        )
