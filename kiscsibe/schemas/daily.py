"""
Pydantic schemas for daily offers, menu combos and package quotes.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from kiscsibe.models.daily_offer import DailyOffer, DailyType, MenuRole
from kiscsibe.schemas.menu import MenuItemPublic


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class PackageSelectionLine(BaseModel):
    item_id: int = Field(..., gt=0)
    quantity: int = Field(1, description="Values below one count as one")


class PackageSelection(BaseModel):
    daily_type: DailyType = DailyType.OFFER
    items: list[PackageSelectionLine] = Field(..., min_length=1)

    def as_mapping(self) -> dict[int, int]:
        """Collapse repeated ids, keeping the largest requested quantity."""
        selection: dict[int, int] = {}
        for line in self.items:
            selection[line.item_id] = max(selection.get(line.item_id, 1), line.quantity)
        return selection


class DailyCartAdd(PackageSelection):
    offer_id: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class DailyOfferItemResponse(BaseModel):
    id: int
    is_menu_part: bool
    menu_role: Optional[MenuRole]
    menu_item: MenuItemPublic

    model_config = {"from_attributes": True}


class DailyMenuResponse(BaseModel):
    id: int
    menu_price: int
    max_portions: int
    remaining_portions: int
    is_sold_out: bool
    soup: Optional[MenuItemPublic]
    main: Optional[MenuItemPublic]

    model_config = {"from_attributes": True}


class DailyOfferResponse(BaseModel):
    id: int
    date: dt.date
    package_price: Optional[int]
    max_portions: Optional[int]
    remaining_portions: Optional[int]
    note: Optional[str]
    is_sold_out: bool
    items: list[DailyOfferItemResponse]
    menu: Optional[DailyMenuResponse]

    model_config = {"from_attributes": True}

    @classmethod
    def from_offer(cls, offer: DailyOffer) -> "DailyOfferResponse":
        return cls.model_validate(offer)


class PackageQuoteResponse(BaseModel):
    is_complete_package: bool
    total_price: int
    total_quantity: int
    effective_quantity: int
    savings: int
    visible_savings: int

    model_config = {"from_attributes": True}
