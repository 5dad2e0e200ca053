from datetime import date, datetime, time, timedelta

import pytest
from fastapi import HTTPException

from kiscsibe.models.cart import CartModifier, CartSide
from kiscsibe.models.order import OptionType, OrderStatus, PaymentMethod
from kiscsibe.repositories.capacity_repository import CapacityRepository
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.schemas.order import CheckoutRequest
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.notification_service import (
    OrderEventBus,
    OrderEventType,
    OrderNotificationCenter,
)
from kiscsibe.services.order_service import (
    CODE_ALPHABET,
    CODE_LENGTH,
    OrderService,
    is_within_opening_hours,
)

SESSION = "session-order-01"


def _checkout(**overrides):
    data = {"name": "Teszt Elek", "phone": "+36 30 123 4567"}
    data.update(overrides)
    return CheckoutRequest(**data)


def _add(conn, item, quantity=1, sides=(), modifiers=()):
    return CartService(conn).open_store(SESSION).add_item(
        str(item.id),
        item.name,
        item.price_huf,
        quantity=quantity,
        sides=list(sides),
        modifiers=list(modifiers),
    )


@pytest.fixture
def bus():
    return OrderEventBus()


@pytest.fixture
def events(bus):
    received = []
    bus.subscribe(received.append)
    return received


@pytest.fixture
def service(conn, bus):
    return OrderService(conn, bus=bus)


def _order_count(conn):
    return conn.execute("SELECT COUNT(*) FROM orders").fetchone()[0]


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

def test_submit_stores_lines_options_and_clears_cart(items, conn, service, events):
    rizs = items["Rizs"]
    _add(conn, items["Gulyás"], quantity=2)
    _add(
        conn,
        items["Rántott szelet"],
        sides=[CartSide(id=rizs.id, name=rizs.name)],
        modifiers=[CartModifier(id="xl", label="Extra adag", price_delta=300)],
    )

    order = service.submit(SESSION, _checkout(payment_method=PaymentMethod.CARD))

    assert order.status == OrderStatus.NEW
    assert order.total_huf == 2 * 1200 + 2200 + 300
    assert len(order.code) == CODE_LENGTH
    assert set(order.code) <= set(CODE_ALPHABET)
    schnitzel = order.items[1]
    assert [(o.option_type, o.label_snapshot) for o in schnitzel.options] == [
        (OptionType.SIDE, "Rizs"),
        (OptionType.MODIFIER, "Extra adag"),
    ]
    assert schnitzel.options[0].side_item_id == rizs.id
    assert CartService(conn).open_store(SESSION).state.is_empty
    assert events == []

    conn.commit()

    assert [(e.type, e.order_id) for e in events] == [(OrderEventType.INSERT, order.id)]


def test_rolled_back_order_is_never_announced(items, conn, service, bus):
    center = OrderNotificationCenter(bus, capacity=10)
    _add(conn, items["Gulyás"])
    service.submit(SESSION, _checkout())
    conn.rollback()

    assert _order_count(conn) == 0
    assert center.pending == []

    _add(conn, items["Gulyás"])
    placed = service.submit(SESSION, _checkout(name="Második Vendég"))
    conn.commit()

    assert [n.code for n in center.pending] == [placed.code]
    assert center.new_orders_count == 1


def test_submit_uses_current_catalog_price(items, conn, service):
    gulyas = items["Gulyás"]
    _add(conn, gulyas)
    conn.execute("UPDATE menu_items SET price_huf = 1300 WHERE id = ?", (gulyas.id,))

    order = service.submit(SESSION, _checkout())

    assert order.total_huf == 1300


def test_empty_cart_is_rejected(conn, service, seeded):
    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout())
    assert exc_info.value.status_code == 422


def test_missing_required_side_blocks_submission(items, conn, service, events):
    _add(conn, items["Rántott szelet"])

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout())

    assert exc_info.value.status_code == 422
    assert "Rántott szelet" in exc_info.value.detail["errors"][0]
    assert _order_count(conn) == 0
    assert events == []


def test_deactivated_item_blocks_submission(items, conn, service):
    gulyas = items["Gulyás"]
    _add(conn, gulyas)
    MenuRepository(conn).set_active(gulyas.id, False)

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout())

    assert exc_info.value.status_code == 409
    assert _order_count(conn) == 0


def test_daily_menu_consumes_portions(items, conn, service):
    offer = DailyOfferRepository(conn).get_by_date(date.today())
    CartService(conn).add_daily_menu(SESSION, offer.menu.id)

    order = service.submit(SESSION, _checkout())

    assert order.total_huf == 1650
    assert order.items[0].daily_type == "menu"
    assert DailyOfferRepository(conn).get_menu(offer.menu.id).remaining_portions == 19


def test_sold_out_menu_is_rejected_at_submission(items, conn, service):
    daily_repo = DailyOfferRepository(conn)
    offer = daily_repo.get_by_date(date.today())
    CartService(conn).add_daily_menu(SESSION, offer.menu.id)
    conn.execute("UPDATE daily_offer_menus SET remaining_portions = 0 WHERE id = ?", (offer.menu.id,))

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout())

    assert exc_info.value.status_code == 409
    assert "sold out" in exc_info.value.detail


def test_stale_package_line_is_rejected(items, conn, service):
    offer = DailyOfferRepository(conn).get_by_date(date.today())
    store = CartService(conn).open_store(SESSION)
    store.add_item(
        f"daily_menu_{offer.menu.id}",
        "Napi menü",
        1650,
        daily_type="menu",
        daily_date="2000-01-03",
        daily_id=offer.menu.id,
    )

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout())

    assert exc_info.value.status_code == 409
    assert "no longer offered" in exc_info.value.detail


# ---------------------------------------------------------------------------
# Pickup time
# ---------------------------------------------------------------------------

def test_pickup_books_capacity_slot(items, conn, service, pickup_day):
    _add(conn, items["Gulyás"])
    pickup = datetime.combine(pickup_day, time(10, 0))

    order = service.submit(SESSION, _checkout(pickup_time=pickup))

    assert order.pickup_time == pickup
    assert CapacityRepository(conn).get_slot(pickup_day, "10:00").booked_orders == 1


def _next_sunday(start):
    day = start + timedelta(days=1)
    while day.weekday() != 6:
        day += timedelta(days=1)
    return day


@pytest.mark.parametrize(
    "pickup, status_code",
    [
        (lambda day: datetime.combine(date.today() - timedelta(days=1), time(10, 0)), 422),
        (lambda day: datetime.combine(_next_sunday(date.today()), time(10, 0)), 422),
        (lambda day: datetime.combine(day, time(16, 0)), 422),
        (lambda day: datetime.combine(day, time(10, 15)), 409),
    ],
    ids=["past", "sunday", "after-closing", "no-slot"],
)
def test_invalid_pickup_is_rejected(items, conn, service, pickup_day, pickup, status_code):
    _add(conn, items["Gulyás"])

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout(pickup_time=pickup(pickup_day)))

    assert exc_info.value.status_code == status_code


def test_full_pickup_slot_is_rejected(items, conn, service, pickup_day):
    conn.execute(
        "UPDATE capacity_slots SET max_orders = 0 WHERE date = ? AND timeslot = '10:00'",
        (pickup_day.isoformat(),),
    )
    _add(conn, items["Gulyás"])

    with pytest.raises(HTTPException) as exc_info:
        service.submit(SESSION, _checkout(pickup_time=datetime.combine(pickup_day, time(10, 0))))

    assert exc_info.value.status_code == 409


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2026, 10, 19, 7, 0), True),    # Monday opening
        (datetime(2026, 10, 19, 14, 59), True),
        (datetime(2026, 10, 19, 15, 0), False),  # Monday closing
        (datetime(2026, 10, 24, 8, 0), True),    # Saturday
        (datetime(2026, 10, 24, 14, 0), False),
        (datetime(2026, 10, 25, 10, 0), False),  # Sunday
    ],
)
def test_opening_hours(moment, expected):
    assert is_within_opening_hours(moment) is expected


# ---------------------------------------------------------------------------
# Staff workflow
# ---------------------------------------------------------------------------

@pytest.fixture
def placed_order(items, conn, service, pickup_day):
    _add(conn, items["Gulyás"], quantity=3)
    return service.submit(
        SESSION, _checkout(pickup_time=datetime.combine(pickup_day, time(11, 0)))
    )


def test_status_moves_forward_and_publishes_update(conn, service, placed_order, events):
    updated = service.update_status(placed_order.id, OrderStatus.PREPARING)
    conn.commit()

    assert updated.status == OrderStatus.PREPARING
    assert events[-1].type == OrderEventType.UPDATE


def test_finished_order_cannot_be_reopened(service, placed_order):
    service.update_status(placed_order.id, OrderStatus.CANCELLED)

    with pytest.raises(HTTPException) as exc_info:
        service.update_status(placed_order.id, OrderStatus.NEW)
    assert exc_info.value.status_code == 409


def test_only_finished_orders_are_archived(service, placed_order):
    with pytest.raises(HTTPException) as exc_info:
        service.archive(placed_order.id)
    assert exc_info.value.status_code == 409

    service.update_status(placed_order.id, OrderStatus.READY)
    service.update_status(placed_order.id, OrderStatus.COMPLETED)
    archived = service.archive(placed_order.id)

    assert archived.archived
    assert service.list_orders() == []
    assert [o.id for o in service.list_orders(include_archived=True)] == [placed_order.id]


def test_lookup_ignores_phone_formatting(service, placed_order):
    found = service.lookup(placed_order.code.lower(), "+36-30-1234567")
    assert found.id == placed_order.id

    with pytest.raises(HTTPException) as exc_info:
        service.lookup(placed_order.code, "+36 20 000 0000")
    assert exc_info.value.status_code == 404


def test_prep_summary_skips_cancelled_orders(items, conn, service, placed_order, pickup_day):
    _add(conn, items["Gulyás"])
    cancelled = service.submit(
        SESSION, _checkout(pickup_time=datetime.combine(pickup_day, time(11, 30)))
    )
    service.update_status(cancelled.id, OrderStatus.CANCELLED)

    summary = service.prep_summary(pickup_day)

    assert summary["items"] == [{"name": "Gulyás", "quantity": 3, "revenue_huf": 3600}]
    assert summary["status_counts"] == {"new": 1, "cancelled": 1}
    assert summary["total_orders"] == 2
