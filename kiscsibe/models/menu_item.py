"""
Domain model representing a menu_items row from the DB.
Cart lines never hold a MenuItem: they copy its name and price at add time.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import json


@dataclass
class MenuItem:
    id: int
    name: str
    price_huf: int
    category_id: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    allergens: list[str] = field(default_factory=list)
    is_active: bool = True
    is_always_available: bool = False
    requires_side_selection: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Log the creation of the MenuItem model instance."""
        import logging

        logger = logging.getLogger(__name__)
        logger.trace("Initialized MenuItem model id=%s", self.id)

    @classmethod
    def from_row(cls, row) -> "MenuItem":
        """Build a MenuItem from a sqlite3.Row object."""
        import logging

        logger = logging.getLogger(__name__)
        logger.trace("Hydrating MenuItem from database row")
        return cls(
            id=row["id"],
            name=row["name"],
            price_huf=int(row["price_huf"]),
            category_id=row["category_id"],
            description=row["description"],
            image_url=row["image_url"],
            allergens=json.loads(row["allergens"] or "[]"),
            is_active=bool(row["is_active"]),
            is_always_available=bool(row["is_always_available"]),
            requires_side_selection=bool(row["requires_side_selection"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
