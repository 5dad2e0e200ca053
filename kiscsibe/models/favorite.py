"""
Favorite order snapshots kept per session for one-click reordering.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class FavoriteOrderItem:
    item_id: str
    name: str
    price: int
    quantity: int = 1
    sides: list[dict] = field(default_factory=list)
    modifiers: list[dict] = field(default_factory=list)
    daily_type: Optional[str] = None
    daily_date: Optional[str] = None
    daily_id: Optional[int] = None


@dataclass
class FavoriteOrder:
    id: str
    name: str
    items: list[FavoriteOrderItem]
    total_price: int
    saved_at: datetime

    def to_dict(self) -> dict:
        data = asdict(self)
        data["saved_at"] = self.saved_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FavoriteOrder":
        return cls(
            id=data["id"],
            name=data["name"],
            items=[FavoriteOrderItem(**item) for item in data.get("items", [])],
            total_price=int(data["total_price"]),
            saved_at=datetime.fromisoformat(data["saved_at"]),
        )
