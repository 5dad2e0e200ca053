"""
Domain models for one calendar day's offer: the offer itself, its items and
the optional soup + main "menü" combo sold at a package price.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from kiscsibe.models.menu_item import MenuItem


class MenuRole(str, Enum):
    SOUP = "soup"
    MAIN = "main"


class DailyType(str, Enum):
    """Which package a daily cart line belongs to."""
    OFFER = "offer"
    MENU = "menu"


@dataclass
class DailyOfferItem:
    id: int
    daily_offer_id: int
    menu_item: MenuItem
    is_menu_part: bool = False
    menu_role: Optional[MenuRole] = None

    @classmethod
    def from_row(cls, row) -> "DailyOfferItem":
        """Build from a daily_offer_items row joined with menu_items (``item_`` prefix)."""
        menu_item = MenuItem(
            id=row["item_id"],
            name=row["item_name"],
            price_huf=int(row["item_price_huf"]),
            category_id=row["item_category_id"],
            description=row["item_description"],
            image_url=row["item_image_url"],
            is_active=bool(row["item_is_active"]),
        )
        role = row["menu_role"]
        return cls(
            id=row["id"],
            daily_offer_id=row["daily_offer_id"],
            menu_item=menu_item,
            is_menu_part=bool(row["is_menu_part"]),
            menu_role=MenuRole(role) if role else None,
        )


@dataclass
class DailyMenu:
    id: int
    daily_offer_id: int
    menu_price: int
    max_portions: int
    remaining_portions: int
    soup: Optional[MenuItem] = None
    main: Optional[MenuItem] = None

    @property
    def is_sold_out(self) -> bool:
        return self.remaining_portions <= 0

    @classmethod
    def from_row(cls, row) -> "DailyMenu":
        return cls(
            id=row["id"],
            daily_offer_id=row["daily_offer_id"],
            menu_price=int(row["menu_price_huf"]),
            max_portions=row["max_portions"],
            remaining_portions=row["remaining_portions"],
        )


@dataclass
class DailyOffer:
    id: int
    date: date
    package_price: Optional[int]
    max_portions: Optional[int]
    remaining_portions: Optional[int]
    note: Optional[str] = None
    items: list[DailyOfferItem] = field(default_factory=list)
    menu: Optional[DailyMenu] = None

    @property
    def is_sold_out(self) -> bool:
        # NULL remaining portions means the offer is not portion limited
        return self.remaining_portions is not None and self.remaining_portions <= 0

    @property
    def menu_part_items(self) -> list[DailyOfferItem]:
        return [item for item in self.items if item.is_menu_part]

    @property
    def a_la_carte_items(self) -> list[DailyOfferItem]:
        return [item for item in self.items if not item.is_menu_part]

    def item_for_role(self, role: MenuRole) -> Optional[DailyOfferItem]:
        """Return the first menu-part item with the given role, if any."""
        return next(
            (item for item in self.menu_part_items if item.menu_role == role),
            None,
        )

    @classmethod
    def from_row(cls, row) -> "DailyOffer":
        """Build a DailyOffer (without items) from a sqlite3.Row object."""
        import logging

        logger = logging.getLogger(__name__)
        logger.trace("Hydrating DailyOffer from database row")
        price = row["price_huf"]
        return cls(
            id=row["id"],
            date=date.fromisoformat(row["date"]),
            package_price=int(price) if price is not None else None,
            max_portions=row["max_portions"],
            remaining_portions=row["remaining_portions"],
            note=row["note"],
        )
