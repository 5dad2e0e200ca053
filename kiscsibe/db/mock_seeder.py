"""
Mock data seeder – creates a demo catalog, side dish links, today's daily
offer and pickup slots.

⚠️  FOR DEVELOPMENT ONLY.
    Safe to call multiple times – existing rows are left untouched.
"""
from datetime import date, timedelta
from typing import Optional
import logging
import sqlite3

from kiscsibe.core.config import settings
from kiscsibe.db.database import get_connection
from kiscsibe.models.daily_offer import MenuRole
from kiscsibe.repositories.capacity_repository import CapacityRepository
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.repositories.side_repository import SideRepository

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Mock data
# ---------------------------------------------------------------------------

MOCK_CATEGORIES = [
    ("Levesek", 1),
    ("Főételek", 2),
    ("Köretek", 3),
    ("Desszertek", 4),
]

MOCK_ITEMS = {
    "Levesek": [
        {"name": "Gulyás", "price_huf": 1200, "allergens": ["zeller"]},
        {"name": "Zöldségleves", "price_huf": 500, "allergens": ["zeller"]},
    ],
    "Főételek": [
        {"name": "Rántott szelet", "price_huf": 2200, "allergens": ["glutén", "tojás"],
         "requires_side_selection": True},
        {"name": "Csirkepaprikás", "price_huf": 1500, "allergens": ["tej"]},
        {"name": "Marhapörkölt", "price_huf": 2600, "allergens": []},
    ],
    "Köretek": [
        {"name": "Rizs", "price_huf": 500, "allergens": []},
        {"name": "Krumpli", "price_huf": 600, "allergens": []},
        {"name": "Galuska", "price_huf": 600, "allergens": ["glutén", "tojás"]},
    ],
    "Desszertek": [
        {"name": "Somlói galuska", "price_huf": 900, "allergens": ["glutén", "tej", "tojás"],
         "is_always_available": True},
    ],
}

# main item -> (side names, required, min, max)
MOCK_SIDES = {
    "Rántott szelet": (["Rizs", "Krumpli"], True, 1, 1),
    "Marhapörkölt": (["Galuska", "Krumpli"], False, 0, 2),
}

DAILY_PACKAGE_PRICE = 1800
DAILY_MENU_PRICE = 1650
DAILY_PORTIONS = 30
MENU_PORTIONS = 20
SLOT_MINUTES = 30
SLOT_MAX_ORDERS = 8
SLOT_DAYS = 7


def _seed_catalog(conn: sqlite3.Connection) -> dict[str, int]:
    menu_repo = MenuRepository(conn)
    item_ids: dict[str, int] = {}
    for name, sort_order in MOCK_CATEGORIES:
        category = menu_repo.get_category_by_name(name)
        if category is None:
            category = menu_repo.create_category(name, sort_order)
            logger.info("Mock seeder: Created category '%s' (id=%s)", name, category.id)
        for item_data in MOCK_ITEMS[name]:
            existing = menu_repo.get_by_name(item_data["name"])
            if existing:
                item_ids[existing.name] = existing.id
                continue
            item = menu_repo.create(category_id=category.id, **item_data)
            item_ids[item.name] = item.id
    logger.info("Mock seeder: Catalog has %s demo items", len(item_ids))
    return item_ids


def _seed_sides(conn: sqlite3.Connection, item_ids: dict[str, int]) -> None:
    side_repo = SideRepository(conn)
    for main_name, (side_names, required, min_select, max_select) in MOCK_SIDES.items():
        main_id = item_ids[main_name]
        if side_repo.list_for_main(main_id):
            continue
        for side_name in side_names:
            side_repo.create(
                main_item_id=main_id,
                side_item_id=item_ids[side_name],
                is_required=required,
                min_select=min_select,
                max_select=max_select,
            )
        logger.info("Mock seeder: Linked %s sides to '%s'", len(side_names), main_name)


def _seed_daily_offer(conn: sqlite3.Connection, item_ids: dict[str, int], offer_date: date) -> None:
    daily_repo = DailyOfferRepository(conn)
    if daily_repo.get_by_date(offer_date):
        logger.info("Mock seeder: Daily offer for %s already exists", offer_date)
        return
    offer_id = daily_repo.create(
        offer_date,
        DAILY_PACKAGE_PRICE,
        max_portions=DAILY_PORTIONS,
        remaining_portions=DAILY_PORTIONS,
        note="Mai ajánlatunk",
    )
    daily_repo.add_item(offer_id, item_ids["Zöldségleves"], is_menu_part=True, menu_role=MenuRole.SOUP)
    daily_repo.add_item(offer_id, item_ids["Csirkepaprikás"], is_menu_part=True, menu_role=MenuRole.MAIN)
    daily_repo.create_menu(offer_id, DAILY_MENU_PRICE, MENU_PORTIONS, MENU_PORTIONS)
    logger.info("Mock seeder: Created daily offer id=%s for %s", offer_id, offer_date)


def _day_timeslots(day: date) -> list[str]:
    if day.weekday() == 6:
        return []
    if day.weekday() == 5:
        open_hour, close_hour = settings.SATURDAY_OPEN_HOUR, settings.SATURDAY_CLOSE_HOUR
    else:
        open_hour, close_hour = settings.WEEKDAY_OPEN_HOUR, settings.WEEKDAY_CLOSE_HOUR
    return [
        f"{minutes // 60:02d}:{minutes % 60:02d}"
        for minutes in range(open_hour * 60, close_hour * 60, SLOT_MINUTES)
    ]


def _seed_capacity(conn: sqlite3.Connection, start: date) -> None:
    capacity_repo = CapacityRepository(conn)
    created = 0
    for offset in range(SLOT_DAYS):
        day = start + timedelta(days=offset)
        for timeslot in _day_timeslots(day):
            if capacity_repo.get_slot(day, timeslot) is None:
                capacity_repo.create(day, timeslot, SLOT_MAX_ORDERS)
                created += 1
    logger.info("Mock seeder: Created %s pickup slots", created)


def seed_mock_data(offer_date: Optional[date] = None) -> None:
    """Create the demo catalog, today's daily offer and the coming week's pickup slots."""
    logger.info("Mock seeder: starting")
    offer_date = offer_date or date.today()
    conn = get_connection()
    try:
        item_ids = _seed_catalog(conn)
        _seed_sides(conn, item_ids)
        _seed_daily_offer(conn, item_ids, offer_date)
        _seed_capacity(conn, offer_date)
        conn.commit()
        logger.info("Mock seeder: done")
    finally:
        conn.close()
