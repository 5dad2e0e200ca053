"""
Order submission and staff order management.

Submission turns a session cart into an order. It is all-or-nothing: the
request's transaction is rolled back by `get_db` if any step raises, so a
failed submission never leaves consumed portions or booked slots behind.
"""
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import logging

from fastapi import HTTPException, status

from kiscsibe.core.config import settings
from kiscsibe.db.database import Connection
from kiscsibe.models.cart import CartItem
from kiscsibe.models.daily_offer import DailyType
from kiscsibe.models.order import OptionType, Order, OrderStatus
from kiscsibe.repositories.capacity_repository import CapacityRepository
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.repositories.order_repository import OrderRepository
from kiscsibe.schemas.order import CheckoutRequest
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.checkout_service import CheckoutValidator
from kiscsibe.services.notification_service import (
    OrderEvent,
    OrderEventBus,
    OrderEventType,
    order_event_bus,
)

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
SATURDAY = 5
SUNDAY = 6

# Allowed staff transitions; completed and cancelled are final.
STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.NEW: {OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


@dataclass
class PricedLine:
    """A cart line with its server-side unit price."""

    line: CartItem
    unit_price: int

    @property
    def line_total(self) -> int:
        modifiers = sum(m.price_delta for m in self.line.modifiers)
        return (self.unit_price + modifiers) * self.line.quantity


def opening_hours(day: date) -> Optional[tuple[int, int]]:
    """Return (open_hour, close_hour) for *day*, or None when closed."""
    weekday = day.weekday()
    if weekday == SUNDAY:
        return None
    if weekday == SATURDAY:
        return settings.SATURDAY_OPEN_HOUR, settings.SATURDAY_CLOSE_HOUR
    return settings.WEEKDAY_OPEN_HOUR, settings.WEEKDAY_CLOSE_HOUR


def is_within_opening_hours(moment: datetime) -> bool:
    hours = opening_hours(moment.date())
    if hours is None:
        return False
    open_hour, close_hour = hours
    return open_hour <= moment.hour < close_hour


class OrderService:
    """Business logic for placing and managing orders."""

    def __init__(self, conn: Connection, bus: Optional[OrderEventBus] = None) -> None:
        logger.trace("Initializing OrderService")
        self._conn = conn
        self._bus = bus or order_event_bus
        self._order_repo = OrderRepository(conn)
        self._menu_repo = MenuRepository(conn)
        self._daily_repo = DailyOfferRepository(conn)
        self._capacity_repo = CapacityRepository(conn)
        self._cart_service = CartService(conn)
        self._validator = CheckoutValidator(conn)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, session_id: str, data: CheckoutRequest) -> Order:
        """Validate, price and persist the session's cart as a new order."""
        logger.info("Submitting order for session=%s", session_id)
        store = self._cart_service.open_store(session_id)
        state = store.state
        if state.is_empty:
            logger.warning("Checkout attempted with empty cart session=%s", session_id)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="The cart is empty",
            )

        validation = self._validator.validate_cart_sides(state.items)
        if not validation.valid:
            logger.warning("Checkout blocked by side validation: %s", validation.errors)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"message": "Side dish selection incomplete", "errors": validation.errors},
            )

        priced = [self._price_line(line) for line in state.items]
        if data.pickup_time is not None:
            self._book_pickup(data.pickup_time)

        code = self._generate_code()
        total = sum(p.line_total for p in priced)
        order_id = self._order_repo.create(
            code=code,
            name=data.name,
            phone=data.phone,
            email=data.email,
            notes=data.notes,
            payment_method=data.payment_method,
            pickup_time=data.pickup_time,
            total_huf=total,
        )
        for p in priced:
            self._insert_line(order_id, p)

        store.clear()
        order = self._order_repo.get_by_id(order_id)
        logger.info("Order placed id=%s code=%s total=%s", order.id, order.code, order.total_huf)
        self._publish_after_commit(OrderEvent.from_order(OrderEventType.INSERT, order))
        return order

    def _publish_after_commit(self, event: OrderEvent) -> None:
        """Hold *event* until the transaction commits; a rollback drops it."""
        self._conn.on_commit(lambda: self._bus.publish(event))

    def _price_line(self, line: CartItem) -> PricedLine:
        if line.is_package:
            return PricedLine(line=line, unit_price=self._consume_package(line))

        menu_item = self._menu_repo.get_by_id(line.menu_item_id) if line.menu_item_id else None
        if menu_item is None or not menu_item.is_active:
            logger.warning("Cart line item_id=%s is no longer available", line.item_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{line.name} is no longer available",
            )
        return PricedLine(line=line, unit_price=menu_item.price_huf)

    def _consume_package(self, line: CartItem) -> int:
        """Check a package line against its offer and take its portions."""
        sold_out = HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{line.name} is sold out",
        )
        expired = HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{line.name} is no longer offered",
        )

        if line.daily_type == DailyType.MENU.value:
            menu = self._daily_repo.get_menu(line.daily_id) if line.daily_id else None
            offer = self._daily_repo.get_by_id(menu.daily_offer_id) if menu else None
            if menu is None or offer is None or offer.date.isoformat() != line.daily_date:
                logger.warning("Daily menu line %s is stale", line.item_id)
                raise expired
            if not self._daily_repo.consume_menu_portions(menu.id, line.quantity):
                logger.warning("Daily menu id=%s has no portions left", menu.id)
                raise sold_out
            return menu.menu_price

        if line.daily_type == DailyType.OFFER.value:
            offer = self._daily_repo.get_by_id(line.daily_id) if line.daily_id else None
            if (
                offer is None
                or offer.package_price is None
                or offer.date.isoformat() != line.daily_date
            ):
                logger.warning("Daily offer line %s is stale", line.item_id)
                raise expired
            if not self._daily_repo.consume_offer_portions(offer.id, line.quantity):
                logger.warning("Daily offer id=%s has no portions left", offer.id)
                raise sold_out
            return offer.package_price

        logger.warning("Unknown package type %s on line %s", line.daily_type, line.line_id)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown package type for {line.name}",
        )

    def _book_pickup(self, pickup_time: datetime) -> None:
        now = datetime.now(tz=pickup_time.tzinfo)
        if pickup_time <= now:
            logger.warning("Pickup time %s is in the past", pickup_time)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Pickup time must be in the future",
            )
        if not is_within_opening_hours(pickup_time):
            logger.warning("Pickup time %s outside opening hours", pickup_time)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Pickup time is outside opening hours",
            )
        timeslot = pickup_time.strftime("%H:%M")
        slot = self._capacity_repo.get_slot(pickup_time.date(), timeslot)
        if slot is None:
            logger.warning("No pickup slot %s %s", pickup_time.date(), timeslot)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"No pickup slot at {timeslot}",
            )
        if not self._capacity_repo.book(slot.date, slot.timeslot):
            logger.warning("Pickup slot %s %s is full", slot.date, slot.timeslot)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"The pickup slot at {timeslot} is full",
            )

    def _generate_code(self) -> str:
        while True:
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if not self._order_repo.code_exists(code):
                return code
            logger.trace("Order code collision, retrying")

    def _insert_line(self, order_id: int, priced: PricedLine) -> None:
        line = priced.line
        order_item_id = self._order_repo.add_item(
            order_id=order_id,
            item_id=line.menu_item_id,
            name_snapshot=line.name,
            qty=line.quantity,
            unit_price_huf=priced.unit_price,
            line_total_huf=priced.line_total,
            daily_type=line.daily_type,
            daily_id=line.daily_id,
        )
        for side in line.sides:
            self._order_repo.add_option(
                order_item_id,
                OptionType.SIDE,
                label_snapshot=side.name,
                side_item_id=side.id,
            )
        for modifier in line.modifiers:
            self._order_repo.add_option(
                order_item_id,
                OptionType.MODIFIER,
                label_snapshot=modifier.label,
                price_delta_huf=modifier.price_delta,
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, code: str, phone: str) -> Order:
        """Customer lookup: the phone number must match the order's."""
        logger.info("Looking up order code=%s", code)
        order = self._order_repo.get_by_code(code.upper())
        if order is None or _normalize_phone(order.phone) != _normalize_phone(phone):
            logger.warning("Order lookup failed for code=%s", code)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    # ------------------------------------------------------------------
    # Staff operations
    # ------------------------------------------------------------------

    def list_orders(
        self,
        status_filter: Optional[OrderStatus] = None,
        day: Optional[date] = None,
        include_archived: bool = False,
    ) -> list[Order]:
        logger.info("Listing orders status=%s day=%s", status_filter, day)
        return self._order_repo.list_orders(status_filter, day, include_archived)

    def get_order(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            logger.warning("Order id=%s not found", order_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Order with id={order_id} not found",
            )
        return order

    def update_status(self, order_id: int, new_status: OrderStatus) -> Order:
        logger.info("Updating order id=%s to status=%s", order_id, new_status.value)
        order = self.get_order(order_id)
        if new_status == order.status:
            return order
        if new_status not in STATUS_TRANSITIONS[order.status]:
            logger.warning(
                "Invalid status transition %s -> %s for order id=%s",
                order.status.value,
                new_status.value,
                order_id,
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot change status from {order.status.value} to {new_status.value}",
            )
        self._order_repo.update_status(order_id, new_status)
        updated = self.get_order(order_id)
        self._publish_after_commit(OrderEvent.from_order(OrderEventType.UPDATE, updated))
        return updated

    def archive(self, order_id: int) -> Order:
        order = self.get_order(order_id)
        if order.status not in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
            logger.warning("Order id=%s is still open and cannot be archived", order_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Only completed or cancelled orders can be archived",
            )
        self._order_repo.archive(order_id)
        return self.get_order(order_id)

    def recent_orders(self, limit: Optional[int] = None) -> list[Order]:
        return self._order_repo.list_recent(limit or settings.NOTIFICATION_BOOTSTRAP_LIMIT)

    def prep_summary(self, day: date) -> dict:
        """Items to prepare for *day*, plus order counts per status."""
        logger.info("Building prep summary for %s", day)
        status_counts = self._order_repo.count_by_status_for_day(day)
        return {
            "date": day.isoformat(),
            "items": self._order_repo.summarize_items_for_day(day),
            "status_counts": status_counts,
            "total_orders": sum(status_counts.values()),
        }


def _normalize_phone(phone: str) -> str:
    return "".join(ch for ch in phone if ch.isdigit())
