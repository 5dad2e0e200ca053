"""
Session cart service.
Binds a CartStore to a browser session, persists it in local storage after
every mutation, and snapshots catalog names and prices into new lines.
"""
import sqlite3
from typing import Optional
import logging

from fastapi import HTTPException, status

from kiscsibe.core.config import settings
from kiscsibe.models.cart import CartItem, CartModifier, CartSide
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.repositories.storage_repository import StorageRepository, storage_key
from kiscsibe.schemas.cart import CartItemAdd
from kiscsibe.services.cart_store import CartStore
from kiscsibe.services.side_service import SideResolver

logger = logging.getLogger(__name__)


class CartService:
    """Business logic for per-session carts."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize repositories used by the cart service."""
        logger.trace("Initializing CartService")
        self._conn = conn
        self._storage = StorageRepository(conn)
        self._menu_repo = MenuRepository(conn)
        self._daily_repo = DailyOfferRepository(conn)
        self._resolver = SideResolver(conn)

    # ------------------------------------------------------------------
    # Store binding
    # ------------------------------------------------------------------

    def open_store(self, session_id: str) -> CartStore:
        """
        Load the session's cart and subscribe a listener that writes every
        new state back to local storage.
        """
        key = storage_key(settings.CART_STORAGE_KEY, session_id)
        data = self._storage.get(key)
        store = CartStore.from_dict(data) if isinstance(data, dict) else CartStore()
        store.subscribe(lambda _state: self._storage.set(key, store.to_dict()))
        logger.trace("Opened cart store for session=%s lines=%s", session_id, len(store.state.items))
        return store

    # ------------------------------------------------------------------
    # Line management
    # ------------------------------------------------------------------

    def add_item(self, session_id: str, data: CartItemAdd) -> CartItem:
        """Add a catalog item as a new line with its chosen sides and modifiers."""
        logger.info("Adding item id=%s to cart session=%s", data.item_id, session_id)
        menu_item = self._get_orderable_item(data.item_id)
        sides = self._resolve_sides(menu_item, data.side_ids, data.daily_offer_id)

        store = self.open_store(session_id)
        return store.add_item(
            item_id=str(menu_item.id),
            name=menu_item.name,
            unit_price=menu_item.price_huf,
            quantity=data.quantity,
            sides=sides,
            modifiers=[
                CartModifier(id=m.id, label=m.label, price_delta=m.price_delta)
                for m in data.modifiers
            ],
            image_url=menu_item.image_url,
            daily_id=data.daily_offer_id,
        )

    def update_quantity(self, session_id: str, line_id: str, quantity: int) -> Optional[CartItem]:
        logger.info("Updating cart line=%s qty=%s session=%s", line_id, quantity, session_id)
        store = self.open_store(session_id)
        try:
            return store.update_quantity(line_id, quantity)
        except KeyError:
            logger.warning("Cart line=%s not found in session=%s", line_id, session_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Cart line {line_id} not found",
            )

    def remove_item(self, session_id: str, line_id: str) -> None:
        logger.info("Removing cart line=%s session=%s", line_id, session_id)
        self.open_store(session_id).remove_item(line_id)

    def clear(self, session_id: str) -> None:
        logger.info("Clearing cart session=%s", session_id)
        self.open_store(session_id).clear()

    def add_daily_menu(self, session_id: str, menu_id: int) -> CartItem:
        """Add the complete soup + main combo for a daily menu."""
        logger.info("Adding daily menu id=%s to cart session=%s", menu_id, session_id)
        menu = self._daily_repo.get_menu(menu_id)
        if menu is None:
            logger.warning("Daily menu id=%s not found", menu_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Daily menu with id={menu_id} not found",
            )
        offer = self._daily_repo.get_by_id(menu.daily_offer_id)
        line = self.open_store(session_id).add_complete_menu(
            menu, daily_date=offer.date.isoformat() if offer else None
        )
        if line is None:
            logger.warning("Daily menu id=%s cannot be added", menu_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="The daily menu is sold out or incomplete",
            )
        return line

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_orderable_item(self, item_id: int) -> MenuItem:
        menu_item = self._menu_repo.get_by_id(item_id)
        if menu_item is None:
            logger.warning("Menu item id=%s not found", item_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Menu item with id={item_id} not found",
            )
        if not menu_item.is_active:
            logger.warning("Menu item id=%s is inactive", item_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{menu_item.name} is no longer available",
            )
        return menu_item

    def _resolve_sides(
        self, menu_item: MenuItem, side_ids: list[int], daily_offer_id: Optional[int]
    ) -> list[CartSide]:
        """
        Map requested side ids to named cart sides. Ids must come from the
        item's candidate set and stay within its maximum; the minimum is
        enforced later by checkout validation.
        """
        if not side_ids:
            return []
        resolution = self._resolver.resolve(menu_item.id, daily_offer_id)
        by_id = {c.id: c for c in resolution.candidates}
        unknown = [i for i in side_ids if i not in by_id]
        if unknown:
            logger.warning("Sides %s not offered for item id=%s", unknown, menu_item.id)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Side(s) {unknown} are not offered for {menu_item.name}",
            )
        unique_ids = list(dict.fromkeys(side_ids))
        if len(unique_ids) > resolution.max_select:
            logger.warning("Too many sides for item id=%s", menu_item.id)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{menu_item.name} allows at most {resolution.max_select} side(s)",
            )
        return [CartSide(id=i, name=by_id[i].name) for i in unique_ids]
