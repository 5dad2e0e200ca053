"""
In-memory cart state container.

CartStore is the only writer of a session's cart. Readers take `state`
snapshots or subscribe to be told about every mutation; they never change
lines directly.
"""
from dataclasses import replace
import json
from typing import Callable, Iterable, Optional
import logging

from kiscsibe.models.cart import CartItem, CartModifier, CartSide, CartState
from kiscsibe.models.daily_offer import DailyMenu, DailyType

logger = logging.getLogger(__name__)

Listener = Callable[[CartState], None]


def package_item_id(daily_type: DailyType, daily_id: int) -> str:
    """Synthetic cart id shared by every unit of one daily package."""
    return f"daily_{daily_type.value}_{daily_id}"


class CartStore:
    """Owned, single-writer cart with derived totals and change listeners."""

    def __init__(self, items: Optional[Iterable[CartItem]] = None) -> None:
        logger.trace("Initializing CartStore")
        self._items: list[CartItem] = list(items or [])
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def state(self) -> CartState:
        return CartState(items=tuple(self._items))

    def get_line(self, line_id: str) -> Optional[CartItem]:
        return next((i for i in self._items if i.line_id == line_id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(
        self,
        item_id: str,
        name: str,
        unit_price: int,
        quantity: int = 1,
        sides: Optional[list[CartSide]] = None,
        modifiers: Optional[list[CartModifier]] = None,
        image_url: Optional[str] = None,
        daily_type: Optional[str] = None,
        daily_date: Optional[str] = None,
        daily_id: Optional[int] = None,
    ) -> CartItem:
        """Append a new line. Identical adds are never merged."""
        line = CartItem(
            item_id=str(item_id),
            name=name,
            unit_price=unit_price,
            quantity=quantity,
            sides=list(sides or []),
            modifiers=list(modifiers or []),
            image_url=image_url,
            daily_type=daily_type,
            daily_date=daily_date,
            daily_id=daily_id,
        )
        self._items.append(line)
        logger.info("Cart line added line_id=%s item_id=%s qty=%s", line.line_id, item_id, quantity)
        self._notify()
        return line

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartItem]:
        """
        Set a line's quantity. A quantity of zero or less removes the line and
        returns None.

        Raises:
            KeyError: if no line has *line_id*.
        """
        line = self.get_line(line_id)
        if line is None:
            raise KeyError(line_id)
        if quantity <= 0:
            self._items.remove(line)
            logger.info("Cart line removed by quantity line_id=%s", line_id)
            self._notify()
            return None
        updated = replace(line, quantity=quantity)
        self._items[self._items.index(line)] = updated
        logger.info("Cart line quantity set line_id=%s qty=%s", line_id, quantity)
        self._notify()
        return updated

    def remove_item(self, line_id: str) -> None:
        line = self.get_line(line_id)
        if line is None:
            logger.trace("Remove of unknown cart line ignored line_id=%s", line_id)
            return
        self._items.remove(line)
        logger.info("Cart line removed line_id=%s", line_id)
        self._notify()

    def add_complete_menu(self, menu: DailyMenu, daily_date: Optional[str] = None) -> Optional[CartItem]:
        """
        Add the soup + main combo as one line at the menu price.
        Returns None and leaves the cart untouched when the combo is
        incomplete or sold out.
        """
        if menu.soup is None or menu.main is None:
            logger.info("Daily menu id=%s is missing soup or main", menu.id)
            return None
        if menu.remaining_portions <= 0:
            logger.info("Daily menu id=%s is sold out", menu.id)
            return None
        return self.add_item(
            item_id=package_item_id(DailyType.MENU, menu.id),
            name=f"Napi menü: {menu.soup.name} + {menu.main.name}",
            unit_price=menu.menu_price,
            image_url=menu.main.image_url,
            daily_type=DailyType.MENU.value,
            daily_date=daily_date,
            daily_id=menu.id,
        )

    def clear(self) -> None:
        self._items.clear()
        logger.info("Cart cleared")
        self._notify()

    def load(self, items: Iterable[CartItem]) -> None:
        """Replace every line, e.g. after reading persisted state."""
        self._items = list(items)
        self._notify()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        state = self.state
        return {
            "items": [item.to_dict() for item in state.items],
            "total": state.total,
            "item_count": state.item_count,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict) -> "CartStore":
        """Rebuild a store from `to_dict` output; derived fields are recomputed."""
        return cls(CartItem.from_dict(item) for item in data.get("items", []))

    @classmethod
    def from_json(cls, raw: str) -> "CartStore":
        return cls.from_dict(json.loads(raw))
