"""
Domain model for a menu_item_sides row: one allowed side for a main item.
"""
from dataclasses import dataclass

from kiscsibe.models.menu_item import MenuItem


@dataclass
class SideConfiguration:
    id: int
    main_item_id: int
    side_item: MenuItem
    is_required: bool
    min_select: int
    max_select: int
    is_default: bool

    @property
    def side_item_id(self) -> int:
        return self.side_item.id

    @classmethod
    def from_row(cls, row) -> "SideConfiguration":
        """
        Build a SideConfiguration from a row joined with the side's menu item.
        Side item columns are expected with a ``side_`` prefix.
        """
        side_item = MenuItem(
            id=row["side_id"],
            name=row["side_name"],
            price_huf=int(row["side_price_huf"]),
            category_id=row["side_category_id"],
            description=row["side_description"],
            image_url=row["side_image_url"],
            is_active=bool(row["side_is_active"]),
        )
        return cls(
            id=row["id"],
            main_item_id=row["main_item_id"],
            side_item=side_item,
            is_required=bool(row["is_required"]),
            min_select=row["min_select"],
            max_select=row["max_select"],
            is_default=bool(row["is_default"]),
        )
