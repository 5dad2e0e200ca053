"""
Pydantic schemas for checkout and order request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from kiscsibe.models.order import OptionType, OrderStatus, PaymentMethod


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class CheckoutRequest(BaseModel):
    """Customer details submitted with the session cart."""

    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=6, max_length=20, pattern=r"^\+?[0-9 ()/-]+$")
    email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=500)
    payment_method: PaymentMethod = PaymentMethod.CASH
    pickup_time: Optional[datetime] = Field(
        None, description="Requested pickup time; omitted means as soon as possible"
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrderItemOptionResponse(BaseModel):
    id: int
    option_type: OptionType
    label_snapshot: str
    price_delta_huf: int
    side_item_id: Optional[int] = None

    model_config = {"from_attributes": True}


class OrderItemResponse(BaseModel):
    id: int
    item_id: Optional[int]
    name_snapshot: str
    qty: int
    unit_price_huf: int
    line_total_huf: int
    daily_type: Optional[str] = None
    daily_id: Optional[int] = None
    options: list[OrderItemOptionResponse] = []

    model_config = {"from_attributes": True}


class OrderSummaryResponse(BaseModel):
    id: int
    code: str
    name: str
    phone: str
    payment_method: PaymentMethod
    pickup_time: Optional[datetime]
    status: OrderStatus
    total_huf: int
    archived: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderResponse(OrderSummaryResponse):
    email: Optional[str] = None
    notes: Optional[str] = None
    updated_at: datetime
    items: list[OrderItemResponse] = []


class OrderLookupResponse(BaseModel):
    """Customer-facing view of an order looked up by its code."""

    code: str
    status: OrderStatus
    pickup_time: Optional[datetime]
    total_huf: int
    created_at: datetime
    items: list[OrderItemResponse] = []

    model_config = {"from_attributes": True}


class PendingNotificationResponse(BaseModel):
    order_id: int
    code: str
    name: str
    total_huf: int
    pickup_time: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationFeedResponse(BaseModel):
    current: Optional[PendingNotificationResponse]
    pending: list[PendingNotificationResponse]
    new_orders_count: int


class PrepSummaryLine(BaseModel):
    name: str
    quantity: int
    revenue_huf: int


class PrepSummaryResponse(BaseModel):
    date: str
    items: list[PrepSummaryLine]
    status_counts: dict[str, int]
    total_orders: int
