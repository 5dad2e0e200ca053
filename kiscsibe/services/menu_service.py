"""
Public menu service: catalog listing and the side picker flow.
"""
import sqlite3
from typing import Optional
import logging

from fastapi import HTTPException, status

from kiscsibe.models.menu_item import MenuItem
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.schemas.menu import SideSelectRequest, SideSelectResponse, SideOption
from kiscsibe.services.side_service import SideResolution, SideResolver, SideSelection

logger = logging.getLogger(__name__)


class MenuService:
    """Business logic for browsing the menu."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize repositories used by the menu service."""
        logger.trace("Initializing MenuService")
        self._repo = MenuRepository(conn)
        self._resolver = SideResolver(conn)

    def list_grouped_by_category(self) -> list[dict]:
        """Return active menu items grouped by category."""
        logger.info("Listing menu items grouped by category")
        return self._repo.list_grouped_by_category()

    def get_item(self, item_id: int) -> MenuItem:
        item = self._repo.get_by_id(item_id)
        if item is None or not item.is_active:
            logger.warning("Menu item id=%s not found or inactive", item_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Menu item with id={item_id} not found",
            )
        return item

    def get_sides(self, item_id: int, daily_offer_id: Optional[int] = None) -> SideResolution:
        logger.info("Fetching side options for item id=%s", item_id)
        return self._resolver.resolve_or_404(item_id, daily_offer_id)

    def select_side(self, item_id: int, data: SideSelectRequest) -> SideSelectResponse:
        """Apply one picker click and report whether the selection can be confirmed."""
        resolution = self._resolver.resolve_or_404(item_id, data.daily_offer_id)
        if not resolution.has_side_step:
            logger.warning("Item id=%s has no side step", item_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This item has no side dish choice",
            )
        selection = SideSelection(resolution, data.selected_ids)
        if data.side_id is not None:
            try:
                selection.select(data.side_id)
            except ValueError as exc:
                logger.warning("Invalid side click for item id=%s: %s", item_id, exc)
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=str(exc),
                )
        confirmation = selection.confirm()
        return SideSelectResponse(
            selected_ids=selection.selected_ids,
            sides=[SideOption(id=s.id, name=s.name) for s in confirmation.sides],
            ok=confirmation.ok,
            message=confirmation.message,
        )
