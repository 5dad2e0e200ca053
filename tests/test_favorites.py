from datetime import date, timedelta

import pytest
from fastapi import HTTPException

from kiscsibe.models.daily_offer import DailyType
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.favorite_service import FavoriteService

SESSION = "session-fav-0001"


@pytest.fixture
def cart_with_gulyas(items, conn):
    gulyas = items["Gulyás"]
    CartService(conn).open_store(SESSION).add_item(
        str(gulyas.id), gulyas.name, gulyas.price_huf, quantity=2
    )
    return gulyas


def test_saving_beyond_cap_drops_oldest(conn, cart_with_gulyas):
    service = FavoriteService(conn)
    saved = [service.save(SESSION, f"Kedvenc {n}") for n in range(6)]

    favorites = service.list_favorites(SESSION)

    assert len(favorites) == 5
    assert [f.id for f in favorites] == [f.id for f in reversed(saved[1:])]
    assert saved[0].id not in {f.id for f in favorites}


def test_favorite_snapshots_cart_total(conn, cart_with_gulyas):
    favorite = FavoriteService(conn).save(SESSION, "Ebéd")

    assert favorite.total_price == 2400
    assert favorite.items[0].name == "Gulyás"
    assert favorite.items[0].quantity == 2


def test_empty_cart_cannot_be_saved(conn, seeded):
    with pytest.raises(HTTPException) as exc_info:
        FavoriteService(conn).save(SESSION, "Semmi")
    assert exc_info.value.status_code == 422


def test_reorder_adds_fresh_lines(conn, cart_with_gulyas):
    service = FavoriteService(conn)
    favorite = service.save(SESSION, "Ebéd")
    CartService(conn).clear(SESSION)

    lines = service.reorder(SESSION, favorite.id)

    state = CartService(conn).open_store(SESSION).state
    assert [line.line_id for line in state.items] == [line.line_id for line in lines]
    assert state.total == 2400


def test_deactivated_item_blocks_reorder(conn, cart_with_gulyas):
    service = FavoriteService(conn)
    favorite = service.save(SESSION, "Ebéd")
    MenuRepository(conn).set_active(cart_with_gulyas.id, False)

    availability = service.validate(SESSION, favorite.id)
    assert not availability.valid
    assert availability.unavailable == ["Gulyás"]

    with pytest.raises(HTTPException) as exc_info:
        service.reorder(SESSION, favorite.id)
    assert exc_info.value.status_code == 409


def test_remove_favorite(conn, cart_with_gulyas):
    service = FavoriteService(conn)
    favorite = service.save(SESSION, "Ebéd")

    service.remove(SESSION, favorite.id)

    assert service.list_favorites(SESSION) == []
    with pytest.raises(HTTPException):
        service.get_favorite(SESSION, favorite.id)


# ---------------------------------------------------------------------------
# Daily package lines
# ---------------------------------------------------------------------------

def _add_offer_package(conn, offer_id, offer_date):
    return CartService(conn).open_store(SESSION).add_item(
        f"daily_offer_{offer_id}",
        "Napi ajánlat",
        1800,
        daily_type=DailyType.OFFER.value,
        daily_date=offer_date.isoformat(),
        daily_id=offer_id,
    )


def _save_and_clear(conn, name="Napi"):
    favorite = FavoriteService(conn).save(SESSION, name)
    CartService(conn).clear(SESSION)
    return favorite


def test_current_package_can_be_reordered(conn, seeded):
    offer = DailyOfferRepository(conn).get_by_date(date.today())
    _add_offer_package(conn, offer.id, offer.date)
    favorite = _save_and_clear(conn)

    assert FavoriteService(conn).validate(SESSION, favorite.id).valid
    lines = FavoriteService(conn).reorder(SESSION, favorite.id)
    assert [line.item_id for line in lines] == [f"daily_offer_{offer.id}"]


def test_package_from_past_offer_blocks_reorder(conn, seeded):
    past = date.today() - timedelta(days=3)
    offer_id = DailyOfferRepository(conn).create(past, 1800, max_portions=10, remaining_portions=10)
    _add_offer_package(conn, offer_id, past)
    favorite = _save_and_clear(conn)
    service = FavoriteService(conn)

    availability = service.validate(SESSION, favorite.id)
    assert not availability.valid
    assert availability.unavailable == ["Napi ajánlat"]

    with pytest.raises(HTTPException) as exc_info:
        service.reorder(SESSION, favorite.id)
    assert exc_info.value.status_code == 409
    assert CartService(conn).open_store(SESSION).state.is_empty


def test_sold_out_package_is_unavailable(conn, seeded):
    offer = DailyOfferRepository(conn).get_by_date(date.today())
    _add_offer_package(conn, offer.id, offer.date)
    favorite = _save_and_clear(conn)
    conn.execute("UPDATE daily_offers SET remaining_portions = 0 WHERE id = ?", (offer.id,))

    assert FavoriteService(conn).validate(SESSION, favorite.id).unavailable == ["Napi ajánlat"]


def test_sold_out_menu_is_unavailable(conn, seeded):
    offer = DailyOfferRepository(conn).get_by_date(date.today())
    CartService(conn).open_store(SESSION).add_item(
        f"daily_menu_{offer.menu.id}",
        "Napi menü",
        offer.menu.menu_price,
        daily_type=DailyType.MENU.value,
        daily_date=offer.date.isoformat(),
        daily_id=offer.menu.id,
    )
    favorite = _save_and_clear(conn, "Menü")
    service = FavoriteService(conn)
    assert service.validate(SESSION, favorite.id).valid

    conn.execute(
        "UPDATE daily_offer_menus SET remaining_portions = 0 WHERE id = ?", (offer.menu.id,)
    )

    assert service.validate(SESSION, favorite.id).unavailable == ["Napi menü"]
