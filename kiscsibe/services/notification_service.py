"""
Staff order notifications.

Order events are published in-process on an OrderEventBus. The
OrderNotificationCenter listens to it and queues an alert for every order it
has not seen yet. Events are only hints: `reconcile` re-reads the recent
order list from the database and queues anything the event stream missed,
e.g. after a dropped connection.
"""
from collections import OrderedDict, deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from threading import RLock
import sqlite3
from typing import Callable, Iterable, Optional
import logging

from kiscsibe.core.config import settings
from kiscsibe.models.order import Order, OrderStatus
from kiscsibe.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderEventType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"


@dataclass(frozen=True)
class OrderEvent:
    type: OrderEventType
    order_id: int
    code: str
    name: str
    status: OrderStatus
    total_huf: int
    pickup_time: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_order(cls, event_type: OrderEventType, order: Order) -> "OrderEvent":
        return cls(
            type=event_type,
            order_id=order.id,
            code=order.code,
            name=order.name,
            status=order.status,
            total_huf=order.total_huf,
            pickup_time=order.pickup_time,
            created_at=order.created_at,
        )


@dataclass(frozen=True)
class PendingNotification:
    order_id: int
    code: str
    name: str
    total_huf: int
    pickup_time: Optional[datetime]
    created_at: datetime


EventListener = Callable[[OrderEvent], None]


class OrderEventBus:
    """Synchronous in-process publish/subscribe for order changes."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self._lock = RLock()

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: OrderEvent) -> None:
        logger.info("Publishing order event %s order id=%s", event.type.value, event.order_id)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)


class SeenOrderIds:
    """Bounded recency set; the least recently seen id is dropped at capacity."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._ids: "OrderedDict[int, None]" = OrderedDict()

    def add(self, order_id: int) -> bool:
        """Mark *order_id* seen. Returns True if it was not seen before."""
        if order_id in self._ids:
            self._ids.move_to_end(order_id)
            return False
        self._ids[order_id] = None
        if len(self._ids) > self._capacity:
            evicted, _ = self._ids.popitem(last=False)
            logger.trace("Seen order ids full, forgot id=%s", evicted)
        return True

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def clear(self) -> None:
        self._ids.clear()


class OrderNotificationCenter:
    """Queue of new-order alerts for the staff dashboard."""

    def __init__(self, bus: OrderEventBus, capacity: Optional[int] = None) -> None:
        self._seen = SeenOrderIds(capacity or settings.SEEN_ORDERS_CAPACITY)
        self._queue: deque[PendingNotification] = deque()
        self._new_orders_count = 0
        self._primed = False
        self._lock = RLock()
        self._unsubscribe = bus.subscribe(self.on_event)

    @property
    def is_primed(self) -> bool:
        return self._primed

    def prime(self, orders: Iterable[Order]) -> None:
        """Mark existing orders as seen without alerting."""
        with self._lock:
            count = 0
            for order in orders:
                self._seen.add(order.id)
                count += 1
            self._primed = True
        logger.info("Notification center primed with %s orders", count)

    def on_event(self, event: OrderEvent) -> None:
        if event.type != OrderEventType.INSERT:
            return
        with self._lock:
            self._enqueue(
                PendingNotification(
                    order_id=event.order_id,
                    code=event.code,
                    name=event.name,
                    total_huf=event.total_huf,
                    pickup_time=event.pickup_time,
                    created_at=event.created_at,
                )
            )

    def reconcile(self, recent: Iterable[Order]) -> int:
        """
        Treat *recent* as the source of truth and queue every unseen order
        still in status 'new'. Returns how many alerts were added.
        """
        added = 0
        with self._lock:
            # oldest first so the queue keeps arrival order
            for order in sorted(recent, key=lambda o: (o.created_at, o.id)):
                if order.status != OrderStatus.NEW:
                    self._seen.add(order.id)
                    continue
                if self._enqueue(
                    PendingNotification(
                        order_id=order.id,
                        code=order.code,
                        name=order.name,
                        total_huf=order.total_huf,
                        pickup_time=order.pickup_time,
                        created_at=order.created_at,
                    )
                ):
                    added += 1
        if added:
            logger.info("Reconciliation queued %s missed orders", added)
        return added

    def _enqueue(self, notification: PendingNotification) -> bool:
        if not self._seen.add(notification.order_id):
            logger.trace("Order id=%s already notified", notification.order_id)
            return False
        self._queue.append(notification)
        self._new_orders_count += 1
        logger.info("New order notification queued id=%s", notification.order_id)
        return True

    @property
    def current(self) -> Optional[PendingNotification]:
        with self._lock:
            return self._queue[0] if self._queue else None

    @property
    def pending(self) -> list[PendingNotification]:
        with self._lock:
            return list(self._queue)

    def dismiss(self) -> Optional[PendingNotification]:
        """Drop the notification currently shown and return it."""
        with self._lock:
            return self._queue.popleft() if self._queue else None

    @property
    def new_orders_count(self) -> int:
        return self._new_orders_count

    def clear_count(self) -> None:
        with self._lock:
            self._new_orders_count = 0

    def close(self) -> None:
        self._unsubscribe()


# ---------------------------------------------------------------------------
# Process-wide instances
# ---------------------------------------------------------------------------

order_event_bus = OrderEventBus()
_notification_center: Optional[OrderNotificationCenter] = None


def get_notification_center() -> OrderNotificationCenter:
    global _notification_center
    if _notification_center is None:
        _notification_center = OrderNotificationCenter(order_event_bus)
    return _notification_center


def reset_notification_center() -> None:
    """Drop the current center so the next call starts unprimed."""
    global _notification_center
    if _notification_center is not None:
        _notification_center.close()
    _notification_center = None


class NotificationFeedService:
    """Staff dashboard view over the process-wide notification center."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing NotificationFeedService")
        self._order_repo = OrderRepository(conn)
        self._center = get_notification_center()

    def sync(self) -> OrderNotificationCenter:
        """
        Prime the center on first use, afterwards reconcile it against the
        most recent orders so alerts missed by the event stream show up.
        """
        recent = self._order_repo.list_recent(settings.NOTIFICATION_BOOTSTRAP_LIMIT)
        if not self._center.is_primed:
            self._center.prime(recent)
        else:
            self._center.reconcile(recent)
        return self._center

    def dismiss(self) -> OrderNotificationCenter:
        dismissed = self._center.dismiss()
        logger.info("Dismissed notification order id=%s", dismissed.order_id if dismissed else None)
        return self._center

    def clear_count(self) -> OrderNotificationCenter:
        self._center.clear_count()
        logger.info("Cleared new order counter")
        return self._center
