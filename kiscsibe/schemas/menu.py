"""
Pydantic schemas for the public menu and side dish selection.
"""
from typing import Optional

from pydantic import BaseModel, Field

from kiscsibe.services.side_service import SideResolution, SideSource


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SideSelectRequest(BaseModel):
    """One click in the side picker, applied to the current selection."""

    selected_ids: Optional[list[int]] = Field(
        None, description="Current selection; omitted means start from the defaults"
    )
    side_id: Optional[int] = Field(None, description="Clicked side; omitted only confirms")
    daily_offer_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MenuItemPublic(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price_huf: int
    image_url: Optional[str]
    allergens: list[str]
    category_id: Optional[int]
    is_always_available: bool
    requires_side_selection: bool

    model_config = {"from_attributes": True}


class MenuCategoryGroupPublic(BaseModel):
    category_id: int
    category_name: str
    sort_order: int
    items: list[MenuItemPublic]


class SideOption(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class SideResolutionResponse(BaseModel):
    main_item_id: int
    source: SideSource
    has_side_step: bool
    candidates: list[SideOption]
    min_select: int
    max_select: int
    is_required: bool
    default_side_ids: list[int]

    @classmethod
    def from_resolution(cls, resolution: SideResolution) -> "SideResolutionResponse":
        return cls(
            main_item_id=resolution.main_item_id,
            source=resolution.source,
            has_side_step=resolution.has_side_step,
            candidates=[SideOption.model_validate(c) for c in resolution.candidates],
            min_select=resolution.min_select,
            max_select=resolution.max_select,
            is_required=resolution.is_required,
            default_side_ids=resolution.default_side_ids,
        )


class SideSelectResponse(BaseModel):
    selected_ids: list[int]
    sides: list[SideOption]
    ok: bool
    message: Optional[str] = None
