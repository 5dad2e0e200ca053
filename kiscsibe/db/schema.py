"""
SQL DDL statements for all application tables.
Tables are created in dependency order so foreign keys resolve correctly.

Migration helpers run ALTER TABLE only when a column does not yet exist,
making them safe to call on every startup (idempotent).
"""
from kiscsibe.db.database import get_connection

# ---------------------------------------------------------------------------
# Staff accounts
# ---------------------------------------------------------------------------

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    email             TEXT    NOT NULL UNIQUE,
    username          TEXT    NOT NULL UNIQUE,
    full_name         TEXT,
    hashed_password   TEXT    NOT NULL,
    role              TEXT    NOT NULL DEFAULT 'staff'
                              CHECK(role IN ('admin', 'staff')),
    is_active         INTEGER NOT NULL DEFAULT 1,
    created_at        TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at        TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_REFRESH_TOKENS_TABLE = """
CREATE TABLE IF NOT EXISTS refresh_tokens (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    token       TEXT    NOT NULL UNIQUE,
    expires_at  TEXT    NOT NULL,
    revoked     INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

CREATE_CATEGORIES_TABLE = """
CREATE TABLE IF NOT EXISTS categories (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL UNIQUE,
    sort_order  INTEGER NOT NULL DEFAULT 0
);
"""

CREATE_MENU_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS menu_items (
    id                        INTEGER PRIMARY KEY AUTOINCREMENT,
    category_id               INTEGER REFERENCES categories(id) ON DELETE SET NULL,
    name                      TEXT    NOT NULL,
    description               TEXT,
    price_huf                 INTEGER NOT NULL DEFAULT 0 CHECK(price_huf >= 0),
    image_url                 TEXT,
    allergens                 TEXT    NOT NULL DEFAULT '[]',
    is_active                 INTEGER NOT NULL DEFAULT 1,
    is_always_available       INTEGER NOT NULL DEFAULT 0,
    requires_side_selection   INTEGER NOT NULL DEFAULT 0,
    created_at                TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_MENU_ITEM_SIDES_TABLE = """
CREATE TABLE IF NOT EXISTS menu_item_sides (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    main_item_id  INTEGER NOT NULL REFERENCES menu_items(id) ON DELETE CASCADE,
    side_item_id  INTEGER NOT NULL REFERENCES menu_items(id) ON DELETE CASCADE,
    is_required   INTEGER NOT NULL DEFAULT 0,
    min_select    INTEGER NOT NULL DEFAULT 0 CHECK(min_select >= 0),
    max_select    INTEGER NOT NULL DEFAULT 1 CHECK(max_select >= 1),
    is_default    INTEGER NOT NULL DEFAULT 0,
    UNIQUE(main_item_id, side_item_id)
);
"""

CREATE_DAILY_OFFERS_TABLE = """
CREATE TABLE IF NOT EXISTS daily_offers (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    date                TEXT    NOT NULL UNIQUE,
    price_huf           INTEGER,
    max_portions        INTEGER,
    remaining_portions  INTEGER CHECK(remaining_portions IS NULL OR remaining_portions >= 0),
    note                TEXT,
    created_at          TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_DAILY_OFFER_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS daily_offer_items (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    daily_offer_id  INTEGER NOT NULL REFERENCES daily_offers(id) ON DELETE CASCADE,
    item_id         INTEGER NOT NULL REFERENCES menu_items(id) ON DELETE CASCADE,
    is_menu_part    INTEGER NOT NULL DEFAULT 0,
    menu_role       TEXT    CHECK(menu_role IS NULL OR menu_role IN ('soup', 'main'))
);
"""

CREATE_DAILY_OFFER_MENUS_TABLE = """
CREATE TABLE IF NOT EXISTS daily_offer_menus (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    daily_offer_id      INTEGER NOT NULL UNIQUE REFERENCES daily_offers(id) ON DELETE CASCADE,
    menu_price_huf      INTEGER NOT NULL,
    max_portions        INTEGER NOT NULL DEFAULT 0,
    remaining_portions  INTEGER NOT NULL DEFAULT 0 CHECK(remaining_portions >= 0)
);
"""

# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

CREATE_CAPACITY_SLOTS_TABLE = """
CREATE TABLE IF NOT EXISTS capacity_slots (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    date           TEXT    NOT NULL,
    timeslot       TEXT    NOT NULL,
    max_orders     INTEGER NOT NULL DEFAULT 8,
    booked_orders  INTEGER NOT NULL DEFAULT 0,
    UNIQUE(date, timeslot)
);
"""

CREATE_ORDERS_TABLE = """
CREATE TABLE IF NOT EXISTS orders (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    code            TEXT    NOT NULL UNIQUE,
    name            TEXT    NOT NULL,
    phone           TEXT    NOT NULL,
    email           TEXT,
    notes           TEXT,
    payment_method  TEXT    NOT NULL CHECK(payment_method IN ('cash', 'card')),
    pickup_time     TEXT,
    status          TEXT    NOT NULL DEFAULT 'new'
                            CHECK(status IN ('new', 'preparing', 'ready', 'completed', 'cancelled')),
    total_huf       INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at      TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_ORDER_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS order_items (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id        INTEGER NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    item_id         INTEGER REFERENCES menu_items(id) ON DELETE SET NULL,
    name_snapshot   TEXT    NOT NULL,
    qty             INTEGER NOT NULL CHECK(qty >= 1),
    unit_price_huf  INTEGER NOT NULL,
    line_total_huf  INTEGER NOT NULL,
    daily_type      TEXT,
    daily_id        INTEGER
);
"""

CREATE_ORDER_ITEM_OPTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS order_item_options (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    order_item_id    INTEGER NOT NULL REFERENCES order_items(id) ON DELETE CASCADE,
    option_type      TEXT    NOT NULL CHECK(option_type IN ('side', 'modifier')),
    label_snapshot   TEXT    NOT NULL,
    price_delta_huf  INTEGER NOT NULL DEFAULT 0,
    side_item_id     INTEGER
);
"""

# ---------------------------------------------------------------------------
# Session-local storage (cart, favorites, consent flags)
# ---------------------------------------------------------------------------

CREATE_LOCAL_STORAGE_TABLE = """
CREATE TABLE IF NOT EXISTS local_storage (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

# ---------------------------------------------------------------------------
# Incremental migrations (idempotent – safe to run every startup)
# ---------------------------------------------------------------------------

MIGRATIONS = [
    ("orders", "archived", "ALTER TABLE orders ADD COLUMN archived INTEGER NOT NULL DEFAULT 0"),
]

ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_REFRESH_TOKENS_TABLE,
    CREATE_CATEGORIES_TABLE,
    CREATE_MENU_ITEMS_TABLE,
    CREATE_MENU_ITEM_SIDES_TABLE,
    CREATE_DAILY_OFFERS_TABLE,
    CREATE_DAILY_OFFER_ITEMS_TABLE,
    CREATE_DAILY_OFFER_MENUS_TABLE,
    CREATE_CAPACITY_SLOTS_TABLE,
    CREATE_ORDERS_TABLE,
    CREATE_ORDER_ITEMS_TABLE,
    CREATE_ORDER_ITEM_OPTIONS_TABLE,
    CREATE_LOCAL_STORAGE_TABLE,
]


def _column_exists(conn, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return any(r["name"] == column for r in rows)


def create_tables() -> None:
    """Create all tables and apply incremental migrations."""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        for ddl in ALL_TABLES:
            cursor.execute(ddl)
        for table, column, alter_sql in MIGRATIONS:
            if not _column_exists(conn, table, column):
                cursor.execute(alter_sql)
        conn.commit()
    finally:
        conn.close()
