"""
Public menu endpoints:
  GET  /menu/by-category                 – Active menu items grouped by category
  GET  /menu/items/{item_id}             – One active menu item
  GET  /menu/items/{item_id}/sides       – Side dish policy for an item
  POST /menu/items/{item_id}/sides/select – Apply a side picker click
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
import logging

from kiscsibe.core.dependencies import db_dependency
from kiscsibe.schemas.menu import (
    MenuCategoryGroupPublic,
    MenuItemPublic,
    SideResolutionResponse,
    SideSelectRequest,
    SideSelectResponse,
)
from kiscsibe.services.menu_service import MenuService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get(
    "/by-category",
    response_model=list[MenuCategoryGroupPublic],
    summary="Menu items grouped by category",
)
def list_by_category(conn=Depends(db_dependency)):
    """Return active menu items grouped by category, in category order."""
    service = MenuService(conn)
    return service.list_grouped_by_category()


@router.get(
    "/items/{item_id}",
    response_model=MenuItemPublic,
    summary="Get a menu item",
)
def get_item(item_id: int, conn=Depends(db_dependency)):
    return MenuService(conn).get_item(item_id)


@router.get(
    "/items/{item_id}/sides",
    response_model=SideResolutionResponse,
    summary="Resolve side dish options for a menu item",
)
def get_sides(
    item_id: int,
    daily_offer_id: Optional[int] = Query(None, description="Daily offer context"),
    conn=Depends(db_dependency),
):
    """
    Return where the side options come from (configured, daily fallback,
    general fallback or none), the candidates and the selection limits.
    When `has_side_step` is false the side step should be skipped.
    """
    logger.info("Side options requested for item id=%s", item_id)
    resolution = MenuService(conn).get_sides(item_id, daily_offer_id)
    return SideResolutionResponse.from_resolution(resolution)


@router.post(
    "/items/{item_id}/sides/select",
    response_model=SideSelectResponse,
    summary="Apply a side picker click",
)
def select_side(
    item_id: int,
    data: SideSelectRequest,
    conn=Depends(db_dependency),
):
    """Stateless picker step: current selection + clicked side -> new selection."""
    return MenuService(conn).select_side(item_id, data)
