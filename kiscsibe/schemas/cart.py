"""
Pydantic schemas for session cart request/response validation.
"""
from typing import Optional

from pydantic import BaseModel, Field

from kiscsibe.models.cart import CartItem, CartState


# ---------------------------------------------------------------------------
# Shared parts
# ---------------------------------------------------------------------------

class CartSideSchema(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CartModifierSchema(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    label: str = Field(..., min_length=1, max_length=100)
    price_delta: int = 0

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class CartItemAdd(BaseModel):
    """Payload for adding one catalog item as a new cart line."""

    item_id: int = Field(..., gt=0, description="Menu item id")
    quantity: int = Field(1, ge=1)
    side_ids: list[int] = Field(default_factory=list, description="Chosen side item ids")
    modifiers: list[CartModifierSchema] = Field(default_factory=list)
    daily_offer_id: Optional[int] = Field(
        None, description="Daily offer the item was picked from, if any"
    )


class CartQuantityUpdate(BaseModel):
    """A quantity of zero or less removes the line."""

    quantity: int


class CartMenuAdd(BaseModel):
    menu_id: int = Field(..., gt=0, description="Daily menu combo id")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class CartLineResponse(BaseModel):
    line_id: str
    item_id: str
    name: str
    unit_price: int
    quantity: int
    sides: list[CartSideSchema]
    modifiers: list[CartModifierSchema]
    image_url: Optional[str] = None
    daily_type: Optional[str] = None
    daily_date: Optional[str] = None
    daily_id: Optional[int] = None
    line_total: int

    model_config = {"from_attributes": True}

    @classmethod
    def from_line(cls, line: CartItem) -> "CartLineResponse":
        return cls.model_validate(line)


class CartResponse(BaseModel):
    session_id: str
    items: list[CartLineResponse]
    total: int
    item_count: int

    @classmethod
    def from_state(cls, session_id: str, state: CartState) -> "CartResponse":
        return cls(
            session_id=session_id,
            items=[CartLineResponse.from_line(line) for line in state.items],
            total=state.total,
            item_count=state.item_count,
        )


class CartValidationResponse(BaseModel):
    valid: bool
    errors: list[str]

    model_config = {"from_attributes": True}
