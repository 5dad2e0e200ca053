"""
Cart line and cart state models.

Lines keep their own copy of name and unit price so catalog changes during a
session never alter a line that was already added.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional
import uuid


@dataclass(frozen=True)
class CartSide:
    id: int
    name: str


@dataclass(frozen=True)
class CartModifier:
    id: str
    label: str
    price_delta: int = 0


@dataclass
class CartItem:
    item_id: str
    name: str
    unit_price: int
    quantity: int = 1
    sides: list[CartSide] = field(default_factory=list)
    modifiers: list[CartModifier] = field(default_factory=list)
    image_url: Optional[str] = None
    daily_type: Optional[str] = None
    daily_date: Optional[str] = None
    daily_id: Optional[int] = None
    line_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("Cart line quantity must be a positive integer")

    @property
    def unit_total(self) -> int:
        """Unit price plus every modifier delta. Sides are always free."""
        return self.unit_price + sum(mod.price_delta for mod in self.modifiers)

    @property
    def line_total(self) -> int:
        return self.unit_total * self.quantity

    @property
    def is_package(self) -> bool:
        return self.item_id.startswith("daily_")

    @property
    def menu_item_id(self) -> Optional[int]:
        """The originating catalog item id, or None for package lines."""
        if self.is_package:
            return None
        try:
            return int(self.item_id)
        except ValueError:
            return None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(
            line_id=data.get("line_id") or uuid.uuid4().hex,
            item_id=str(data["item_id"]),
            name=data["name"],
            unit_price=int(data["unit_price"]),
            quantity=int(data.get("quantity", 1)),
            sides=[CartSide(id=s["id"], name=s["name"]) for s in data.get("sides", [])],
            modifiers=[
                CartModifier(id=str(m["id"]), label=m["label"], price_delta=int(m.get("price_delta", 0)))
                for m in data.get("modifiers", [])
            ],
            image_url=data.get("image_url"),
            daily_type=data.get("daily_type"),
            daily_date=data.get("daily_date"),
            daily_id=data.get("daily_id"),
        )


@dataclass(frozen=True)
class CartState:
    """Immutable snapshot of a cart; totals are derived on every read."""

    items: tuple[CartItem, ...] = ()

    @property
    def total(self) -> int:
        return sum(item.line_total for item in self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items
