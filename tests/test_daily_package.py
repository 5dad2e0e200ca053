from datetime import date
from itertools import combinations

import pytest
from fastapi import HTTPException

from kiscsibe.models.daily_offer import DailyType
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.daily_package_service import DailyPackageService, compose_package

LEVES = MenuItem(id=1, name="Leves", price_huf=500)
FOETEL = MenuItem(id=2, name="Főétel", price_huf=1500)
CANDIDATES = [LEVES, FOETEL]
SESSION = "session-daily-01"


# ---------------------------------------------------------------------------
# Pricing rules
# ---------------------------------------------------------------------------

def test_full_selection_is_priced_as_package():
    quote = compose_package(CANDIDATES, 1800, {LEVES.id: 1, FOETEL.id: 1})

    assert quote.is_complete_package
    assert quote.total_price == 1800
    assert quote.savings == 200
    assert quote.visible_savings == 200


def test_partial_selection_is_priced_per_item():
    quote = compose_package(CANDIDATES, 1800, {LEVES.id: 2})

    assert not quote.is_complete_package
    assert quote.total_price == 1000
    assert quote.total_quantity == 2
    assert quote.savings == 0


def test_complete_selection_uses_largest_quantity():
    quote = compose_package(CANDIDATES, 1800, {LEVES.id: 2, FOETEL.id: 1})

    assert quote.effective_quantity == 2
    assert quote.total_price == 3600


def test_only_the_exact_candidate_set_is_complete():
    three = CANDIDATES + [MenuItem(id=3, name="Desszert", price_huf=700)]
    ids = [c.id for c in three]
    for size in range(1, len(ids) + 1):
        for subset in combinations(ids, size):
            quote = compose_package(three, 2200, {i: 1 for i in subset})
            assert quote.is_complete_package == (set(subset) == set(ids))


def test_quantities_below_one_count_as_one():
    quote = compose_package(CANDIDATES, 1800, {LEVES.id: 0})
    assert quote.total_price == 500


def test_negative_savings_are_hidden():
    quote = compose_package(CANDIDATES, 2500, {LEVES.id: 1, FOETEL.id: 1})
    assert quote.savings == -500
    assert quote.visible_savings == 0


@pytest.mark.parametrize("selection", [{}, {99: 1}], ids=["empty", "not-a-candidate"])
def test_invalid_selection_raises(selection):
    with pytest.raises(ValueError):
        compose_package(CANDIDATES, 1800, selection)


# ---------------------------------------------------------------------------
# Adding daily selections to a cart
# ---------------------------------------------------------------------------

@pytest.fixture
def offer(items, conn):
    return DailyPackageService(conn).get_offer_for_date(date.today())


def test_complete_package_adds_one_line_per_unit(items, conn, offer):
    soup, main = items["Zöldségleves"], items["Csirkepaprikás"]

    lines = DailyPackageService(conn).add_to_cart(
        SESSION, offer.id, DailyType.OFFER, {soup.id: 2, main.id: 1}
    )

    assert len(lines) == 2
    assert {line.item_id for line in lines} == {f"daily_offer_{offer.id}"}
    assert all(line.unit_price == 1800 and line.quantity == 1 for line in lines)
    state = CartService(conn).open_store(SESSION).state
    assert state.total == 3600


def test_partial_selection_adds_items_at_own_price(items, conn, offer):
    soup = items["Zöldségleves"]

    lines = DailyPackageService(conn).add_to_cart(
        SESSION, offer.id, DailyType.OFFER, {soup.id: 2}
    )

    assert len(lines) == 1
    assert lines[0].item_id == str(soup.id)
    assert lines[0].quantity == 2
    assert CartService(conn).open_store(SESSION).state.total == 1000


def test_menu_package_uses_menu_price(items, conn, offer):
    soup, main = items["Zöldségleves"], items["Csirkepaprikás"]

    quote = DailyPackageService(conn).quote(
        offer.id, DailyType.MENU, {soup.id: 1, main.id: 1}
    )

    assert quote.is_complete_package
    assert quote.total_price == 1650
    assert quote.savings == 350


def test_sold_out_offer_cannot_be_added(items, conn, offer):
    conn.execute("UPDATE daily_offers SET remaining_portions = 0 WHERE id = ?", (offer.id,))
    soup = items["Zöldségleves"]

    with pytest.raises(HTTPException) as exc_info:
        DailyPackageService(conn).add_to_cart(SESSION, offer.id, DailyType.OFFER, {soup.id: 1})
    assert exc_info.value.status_code == 409


def test_quote_with_unknown_item_is_unprocessable(conn, offer):
    with pytest.raises(HTTPException) as exc_info:
        DailyPackageService(conn).quote(offer.id, DailyType.OFFER, {12345: 1})
    assert exc_info.value.status_code == 422


def test_missing_offer_day_is_not_found(conn, seeded):
    with pytest.raises(HTTPException) as exc_info:
        DailyPackageService(conn).get_offer_for_date(date(2000, 1, 3))
    assert exc_info.value.status_code == 404
