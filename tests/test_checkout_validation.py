from kiscsibe.models.cart import CartSide
from kiscsibe.repositories.side_repository import SideRepository
from kiscsibe.services.cart_store import CartStore
from kiscsibe.services.checkout_service import CheckoutValidator


def _add(store, item, sides=()):
    return store.add_item(str(item.id), item.name, item.price_huf, sides=list(sides))


def test_item_without_side_configuration_is_valid(items, conn):
    store = CartStore()
    line = _add(store, items["Gulyás"])

    result = CheckoutValidator(conn).validate_cart_sides(store.state.items)

    assert line.sides == []
    assert result.valid
    assert result.errors == []


def test_required_side_missing_is_reported(items, conn):
    store = CartStore()
    _add(store, items["Rántott szelet"])

    result = CheckoutValidator(conn).validate_cart_sides(store.state.items)

    assert not result.valid
    assert len(result.errors) == 1
    assert "Rántott szelet" in result.errors[0]


def test_required_side_within_limits_is_valid(items, conn):
    store = CartStore()
    rizs = items["Rizs"]
    _add(store, items["Rántott szelet"], [CartSide(id=rizs.id, name=rizs.name)])

    assert CheckoutValidator(conn).validate_cart_sides(store.state.items).valid


def test_too_many_sides_are_reported(items, conn):
    store = CartStore()
    sides = [CartSide(id=items[n].id, name=n) for n in ("Rizs", "Krumpli")]
    _add(store, items["Rántott szelet"], sides)

    result = CheckoutValidator(conn).validate_cart_sides(store.state.items)

    assert result.errors == ["Rántott szelet: choose at most 1 side(s)"]


def test_configuration_is_read_at_validation_time(items, conn):
    store = CartStore()
    _add(store, items["Csirkepaprikás"])
    validator = CheckoutValidator(conn)
    assert validator.validate_cart_sides(store.state.items).valid

    SideRepository(conn).create(
        items["Csirkepaprikás"].id, items["Rizs"].id, is_required=True, min_select=1
    )

    assert not validator.validate_cart_sides(store.state.items).valid


def test_package_lines_are_skipped(items, conn):
    store = CartStore()
    store.add_item("daily_offer_1", "Napi ajánlat", 1800, daily_type="offer", daily_id=1)

    assert CheckoutValidator(conn).validate_cart_sides(store.state.items).valid
