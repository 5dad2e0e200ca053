"""
Pydantic schemas for favorite order snapshots.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FavoriteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)


class FavoriteItemResponse(BaseModel):
    item_id: str
    name: str
    price: int
    quantity: int
    sides: list[dict]
    modifiers: list[dict]
    daily_type: Optional[str] = None
    daily_date: Optional[str] = None
    daily_id: Optional[int] = None

    model_config = {"from_attributes": True}


class FavoriteResponse(BaseModel):
    id: str
    name: str
    items: list[FavoriteItemResponse]
    total_price: int
    saved_at: datetime

    model_config = {"from_attributes": True}


class FavoriteValidationResponse(BaseModel):
    valid: bool
    unavailable: list[str]

    model_config = {"from_attributes": True}
