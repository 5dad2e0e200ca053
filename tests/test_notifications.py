from datetime import datetime, timedelta, timezone

import pytest

from kiscsibe.models.order import Order, OrderStatus, PaymentMethod
from kiscsibe.services.notification_service import (
    OrderEvent,
    OrderEventBus,
    OrderEventType,
    OrderNotificationCenter,
    SeenOrderIds,
)

BASE_TIME = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _order(order_id, status=OrderStatus.NEW, minutes=0):
    created = BASE_TIME + timedelta(minutes=minutes)
    return Order(
        id=order_id,
        code=f"CODE{order_id:02d}",
        name="Teszt Elek",
        phone="+36301234567",
        email=None,
        notes=None,
        payment_method=PaymentMethod.CASH,
        pickup_time=None,
        status=status,
        total_huf=1200,
        archived=False,
        created_at=created,
        updated_at=created,
    )


def _insert(bus, order):
    bus.publish(OrderEvent.from_order(OrderEventType.INSERT, order))


# ---------------------------------------------------------------------------
# Seen ids
# ---------------------------------------------------------------------------

def test_seen_ids_forget_least_recent_at_capacity():
    seen = SeenOrderIds(capacity=2)
    assert seen.add(1)
    assert seen.add(2)
    assert not seen.add(1)
    seen.add(3)

    assert 1 in seen
    assert 2 not in seen
    assert len(seen) == 2


def test_seen_ids_capacity_must_be_positive():
    with pytest.raises(ValueError):
        SeenOrderIds(capacity=0)


# ---------------------------------------------------------------------------
# Notification center
# ---------------------------------------------------------------------------

def test_insert_event_is_queued_once():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)

    _insert(bus, _order(1))
    _insert(bus, _order(1))

    assert [n.order_id for n in center.pending] == [1]
    assert center.new_orders_count == 1


def test_update_events_do_not_alert():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)

    bus.publish(OrderEvent.from_order(OrderEventType.UPDATE, _order(1)))

    assert center.current is None


def test_primed_orders_do_not_alert():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)
    center.prime([_order(1), _order(2)])

    _insert(bus, _order(2))

    assert center.is_primed
    assert center.pending == []


def test_reconcile_queues_orders_missed_by_events():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)
    center.prime([_order(1)])
    _insert(bus, _order(2, minutes=1))

    recent = [
        _order(4, minutes=3),
        _order(3, status=OrderStatus.PREPARING, minutes=2),
        _order(5, minutes=4),
        _order(2, minutes=1),
        _order(1),
    ]
    added = center.reconcile(recent)

    assert added == 2
    assert [n.order_id for n in center.pending] == [2, 4, 5]
    assert center.reconcile(recent) == 0


def test_dismiss_advances_queue_and_count_is_cleared_separately():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)
    _insert(bus, _order(1))
    _insert(bus, _order(2, minutes=1))

    assert center.dismiss().order_id == 1
    assert center.current.order_id == 2
    assert center.new_orders_count == 2

    center.clear_count()
    assert center.new_orders_count == 0
    assert center.current.order_id == 2


def test_closed_center_stops_listening():
    bus = OrderEventBus()
    center = OrderNotificationCenter(bus, capacity=10)
    center.close()

    _insert(bus, _order(1))

    assert center.pending == []
