import json

import pytest

from kiscsibe.models.cart import CartItem, CartModifier, CartSide
from kiscsibe.models.daily_offer import DailyMenu
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.services.cart_store import CartStore, package_item_id
from kiscsibe.models.daily_offer import DailyType


def _menu(remaining=5, with_soup=True, with_main=True):
    return DailyMenu(
        id=7,
        daily_offer_id=3,
        menu_price=1650,
        max_portions=20,
        remaining_portions=remaining,
        soup=MenuItem(id=1, name="Zöldségleves", price_huf=500) if with_soup else None,
        main=MenuItem(id=2, name="Csirkepaprikás", price_huf=1500) if with_main else None,
    )


def test_identical_adds_create_separate_lines():
    store = CartStore()
    first = store.add_item("1", "Gulyás", 1200)
    second = store.add_item("1", "Gulyás", 1200)

    assert first.line_id != second.line_id
    assert len(store.state.items) == 2
    assert store.state.item_count == 2
    assert store.state.total == 2400


def test_added_line_without_sides_has_empty_side_list():
    store = CartStore()
    line = store.add_item("1", "Gulyás", 1200)
    assert line.sides == []
    assert store.state.total == 1200


@pytest.mark.parametrize("quantity", [0, -1])
def test_quantity_at_or_below_zero_removes_line(quantity):
    store = CartStore()
    line = store.add_item("1", "Gulyás", 1200)

    assert store.update_quantity(line.line_id, quantity) is None
    assert store.state.is_empty


def test_positive_quantity_is_set_exactly():
    store = CartStore()
    line = store.add_item("1", "Gulyás", 1200)

    updated = store.update_quantity(line.line_id, 3)

    assert updated.quantity == 3
    assert store.get_line(line.line_id).quantity == 3
    assert store.state.total == 3600


def test_update_unknown_line_raises_key_error():
    with pytest.raises(KeyError):
        CartStore().update_quantity("missing", 2)


def test_remove_unknown_line_is_a_no_op():
    store = CartStore()
    store.add_item("1", "Gulyás", 1200)
    store.remove_item("missing")
    assert len(store.state.items) == 1


def test_line_quantity_must_be_positive():
    with pytest.raises(ValueError):
        CartItem(item_id="1", name="Gulyás", unit_price=1200, quantity=0)


def test_totals_include_modifiers_but_not_sides():
    store = CartStore()
    store.add_item(
        "3",
        "Rántott szelet",
        2200,
        quantity=2,
        sides=[CartSide(id=10, name="Rizs")],
        modifiers=[CartModifier(id="xl", label="Extra adag", price_delta=300)],
    )
    state = store.state

    assert state.total == (2200 + 300) * 2
    assert state.total == store.state.total
    assert state.item_count == 2


def test_earlier_snapshot_is_not_changed_by_later_mutation():
    store = CartStore()
    line = store.add_item("1", "Gulyás", 1200)
    before = store.state

    store.update_quantity(line.line_id, 4)

    assert before.items[0].quantity == 1
    assert before.total == 1200
    assert store.state.total == 4800


def test_subscribers_receive_every_mutation_until_unsubscribed():
    store = CartStore()
    seen = []
    unsubscribe = store.subscribe(lambda state: seen.append(state.item_count))

    line = store.add_item("1", "Gulyás", 1200)
    store.update_quantity(line.line_id, 2)
    unsubscribe()
    store.clear()

    assert seen == [1, 2]
    assert store.state.is_empty


def test_add_complete_menu_adds_one_line_at_menu_price():
    store = CartStore()
    line = store.add_complete_menu(_menu(), daily_date="2026-10-19")

    assert line.item_id == package_item_id(DailyType.MENU, 7) == "daily_menu_7"
    assert line.name == "Napi menü: Zöldségleves + Csirkepaprikás"
    assert line.unit_price == 1650
    assert line.daily_type == "menu"
    assert line.daily_id == 7
    assert line.is_package
    assert line.menu_item_id is None


@pytest.mark.parametrize(
    "menu",
    [_menu(remaining=0), _menu(with_soup=False), _menu(with_main=False)],
    ids=["sold-out", "no-soup", "no-main"],
)
def test_add_complete_menu_refuses_incomplete_or_sold_out(menu):
    store = CartStore()
    assert store.add_complete_menu(menu) is None
    assert store.state.is_empty


def test_persisted_form_restores_lines_and_recomputes_totals():
    store = CartStore()
    line = store.add_item(
        "3",
        "Rántott szelet",
        2200,
        sides=[CartSide(id=10, name="Krumpli")],
        modifiers=[CartModifier(id="xl", label="Extra adag", price_delta=300)],
    )
    raw = json.loads(store.to_json())
    raw["total"] = 1

    restored = CartStore.from_dict(raw)

    restored_line = restored.get_line(line.line_id)
    assert restored_line.sides == [CartSide(id=10, name="Krumpli")]
    assert restored.state.total == 2500


def test_json_form_round_trips():
    store = CartStore()
    store.add_item("1", "Gulyás", 1200, quantity=2)
    store.add_item(
        "daily_offer_4",
        "Napi ajánlat",
        1800,
        daily_type=DailyType.OFFER.value,
        daily_date="2026-10-19",
        daily_id=4,
    )

    restored = CartStore.from_json(store.to_json())

    assert restored.state == store.state
    assert restored.state.total == 4200


def test_load_replaces_lines_and_notifies_subscribers():
    source = CartStore()
    source.add_item("1", "Gulyás", 1200)
    store = CartStore()
    store.add_item("2", "Rizs", 500)
    received = []
    store.subscribe(received.append)

    store.load(source.state.items)

    assert [line.name for line in store.state.items] == ["Gulyás"]
    assert received == [store.state]
