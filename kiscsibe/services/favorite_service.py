"""
Favorite orders: named cart snapshots kept per session for quick reordering.
The list is newest first and capped; saving beyond the cap drops the oldest.
"""
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging

from fastapi import HTTPException, status

from kiscsibe.core.config import settings
from kiscsibe.models.cart import CartItem, CartModifier, CartSide
from kiscsibe.models.daily_offer import DailyType
from kiscsibe.models.favorite import FavoriteOrder, FavoriteOrderItem
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.repositories.storage_repository import StorageRepository, storage_key
from kiscsibe.services.cart_service import CartService

logger = logging.getLogger(__name__)


@dataclass
class FavoriteAvailability:
    valid: bool
    unavailable: list[str] = field(default_factory=list)


class FavoriteService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing FavoriteService")
        self._storage = StorageRepository(conn)
        self._menu_repo = MenuRepository(conn)
        self._daily_repo = DailyOfferRepository(conn)
        self._cart_service = CartService(conn)

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def _key(self, session_id: str) -> str:
        return storage_key(settings.FAVORITES_STORAGE_KEY, session_id)

    def list_favorites(self, session_id: str) -> list[FavoriteOrder]:
        data = self._storage.get(self._key(session_id))
        if not isinstance(data, list):
            return []
        return [FavoriteOrder.from_dict(entry) for entry in data]

    def _write(self, session_id: str, favorites: list[FavoriteOrder]) -> None:
        self._storage.set(self._key(session_id), [f.to_dict() for f in favorites])

    def get_favorite(self, session_id: str, favorite_id: str) -> FavoriteOrder:
        favorite = next(
            (f for f in self.list_favorites(session_id) if f.id == favorite_id), None
        )
        if favorite is None:
            logger.warning("Favorite id=%s not found for session=%s", favorite_id, session_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Favorite {favorite_id} not found",
            )
        return favorite

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def save(self, session_id: str, name: str) -> FavoriteOrder:
        """Snapshot the session's current cart under *name*."""
        logger.info("Saving favorite '%s' for session=%s", name, session_id)
        state = self._cart_service.open_store(session_id).state
        if state.is_empty:
            logger.warning("Cannot save an empty cart as favorite session=%s", session_id)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="The cart is empty",
            )

        now = datetime.now(tz=timezone.utc)
        existing = self.list_favorites(session_id)
        taken = {f.id for f in existing}
        stamp = int(now.timestamp() * 1000)
        while f"fav_{stamp}" in taken:
            stamp += 1
        favorite = FavoriteOrder(
            id=f"fav_{stamp}",
            name=name,
            items=[self._snapshot(line) for line in state.items],
            total_price=state.total,
            saved_at=now,
        )
        favorites = [favorite, *existing][: settings.MAX_FAVORITES]
        self._write(session_id, favorites)
        logger.info("Favorite saved id=%s (kept %s)", favorite.id, len(favorites))
        return favorite

    def remove(self, session_id: str, favorite_id: str) -> None:
        logger.info("Removing favorite id=%s session=%s", favorite_id, session_id)
        favorites = self.list_favorites(session_id)
        self._write(session_id, [f for f in favorites if f.id != favorite_id])

    def validate(self, session_id: str, favorite_id: str) -> FavoriteAvailability:
        """
        Check a favorite against the current catalog: regular items must be
        active, package lines need their offer or menu for the same day with
        portions left.
        """
        favorite = self.get_favorite(session_id, favorite_id)
        ids = [int(i.item_id) for i in favorite.items if i.item_id.isdigit()]
        active = {m.id for m in self._menu_repo.list_by_ids(ids) if m.is_active}
        unavailable = []
        for item in favorite.items:
            if item.item_id.isdigit():
                available = int(item.item_id) in active
            else:
                available = self._package_available(item)
            if not available:
                unavailable.append(item.name)
        logger.info("Favorite id=%s unavailable=%s", favorite_id, unavailable)
        return FavoriteAvailability(valid=not unavailable, unavailable=unavailable)

    def _package_available(self, item: FavoriteOrderItem) -> bool:
        if item.daily_id is None:
            return False
        if item.daily_type == DailyType.MENU.value:
            menu = self._daily_repo.get_menu(item.daily_id)
            if menu is None or menu.remaining_portions <= 0:
                return False
            offer = self._daily_repo.get_by_id(menu.daily_offer_id)
        elif item.daily_type == DailyType.OFFER.value:
            offer = self._daily_repo.get_by_id(item.daily_id)
            if offer is None or offer.package_price is None:
                return False
            # NULL remaining portions means unlimited
            if offer.remaining_portions is not None and offer.remaining_portions <= 0:
                return False
        else:
            return False
        return offer is not None and offer.date.isoformat() == item.daily_date

    def reorder(self, session_id: str, favorite_id: str) -> list[CartItem]:
        """Add every item of a favorite to the cart as fresh lines."""
        logger.info("Reordering favorite id=%s session=%s", favorite_id, session_id)
        availability = self.validate(session_id, favorite_id)
        if not availability.valid:
            logger.warning("Favorite id=%s has unavailable items", favorite_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"No longer available: {', '.join(availability.unavailable)}",
            )
        favorite = self.get_favorite(session_id, favorite_id)
        store = self._cart_service.open_store(session_id)
        return [
            store.add_item(
                item_id=item.item_id,
                name=item.name,
                unit_price=item.price,
                quantity=item.quantity,
                sides=[CartSide(id=s["id"], name=s["name"]) for s in item.sides],
                modifiers=[
                    CartModifier(id=str(m["id"]), label=m["label"], price_delta=int(m.get("price_delta", 0)))
                    for m in item.modifiers
                ],
                daily_type=item.daily_type,
                daily_date=item.daily_date,
                daily_id=item.daily_id,
            )
            for item in favorite.items
        ]

    @staticmethod
    def _snapshot(line: CartItem) -> FavoriteOrderItem:
        return FavoriteOrderItem(
            item_id=line.item_id,
            name=line.name,
            price=line.unit_price,
            quantity=line.quantity,
            sides=[{"id": s.id, "name": s.name} for s in line.sides],
            modifiers=[
                {"id": m.id, "label": m.label, "price_delta": m.price_delta}
                for m in line.modifiers
            ],
            daily_type=line.daily_type,
            daily_date=line.daily_date,
            daily_id=line.daily_id,
        )
