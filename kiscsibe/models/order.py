"""
Domain models for submitted orders, their lines and line options.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class OptionType(str, Enum):
    SIDE = "side"
    MODIFIER = "modifier"


@dataclass
class OrderItemOption:
    id: int
    order_item_id: int
    option_type: OptionType
    label_snapshot: str
    price_delta_huf: int
    side_item_id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "OrderItemOption":
        return cls(
            id=row["id"],
            order_item_id=row["order_item_id"],
            option_type=OptionType(row["option_type"]),
            label_snapshot=row["label_snapshot"],
            price_delta_huf=row["price_delta_huf"],
            side_item_id=row["side_item_id"],
        )


@dataclass
class OrderItem:
    id: int
    order_id: int
    item_id: Optional[int]
    name_snapshot: str
    qty: int
    unit_price_huf: int
    line_total_huf: int
    daily_type: Optional[str] = None
    daily_id: Optional[int] = None
    options: list[OrderItemOption] = field(default_factory=list)

    @classmethod
    def from_row(cls, row) -> "OrderItem":
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            item_id=row["item_id"],
            name_snapshot=row["name_snapshot"],
            qty=row["qty"],
            unit_price_huf=row["unit_price_huf"],
            line_total_huf=row["line_total_huf"],
            daily_type=row["daily_type"],
            daily_id=row["daily_id"],
        )


@dataclass
class Order:
    id: int
    code: str
    name: str
    phone: str
    email: Optional[str]
    notes: Optional[str]
    payment_method: PaymentMethod
    pickup_time: Optional[datetime]
    status: OrderStatus
    total_huf: int
    archived: bool
    created_at: datetime
    updated_at: datetime
    items: list[OrderItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Log the creation of the Order model instance."""
        import logging

        logger = logging.getLogger(__name__)
        logger.trace("Initialized Order model id=%s", self.id)

    @classmethod
    def from_row(cls, row) -> "Order":
        """Build an Order (without items) from a sqlite3.Row object."""
        pickup_raw = row["pickup_time"]
        return cls(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            phone=row["phone"],
            email=row["email"],
            notes=row["notes"],
            payment_method=PaymentMethod(row["payment_method"]),
            pickup_time=datetime.fromisoformat(pickup_raw) if pickup_raw else None,
            status=OrderStatus(row["status"]),
            total_huf=row["total_huf"],
            archived=bool(row["archived"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
