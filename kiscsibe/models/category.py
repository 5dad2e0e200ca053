"""
Domain model representing a menu Category row.
"""
from dataclasses import dataclass


@dataclass
class Category:
    id: int
    name: str
    sort_order: int

    @classmethod
    def from_row(cls, row) -> "Category":
        """Build a Category from a sqlite3.Row object."""
        return cls(id=row["id"], name=row["name"], sort_order=row["sort_order"])
