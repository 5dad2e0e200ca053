"""
Shared pytest fixtures.

Every test gets its own SQLite file under pytest's tmp_path; the module
level DB_PATH is patched before the schema is created.
"""
import os

os.environ["LOG_FILE_PATH"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import kiscsibe.core.logging_config  # noqa: E402,F401 – registers the TRACE level
from kiscsibe.db import database  # noqa: E402
from kiscsibe.db.mock_seeder import MOCK_ITEMS, seed_mock_data  # noqa: E402
from kiscsibe.db.seeder import ADMIN_PASSWORD, ADMIN_USERNAME  # noqa: E402
from kiscsibe.main import create_app  # noqa: E402
from kiscsibe.repositories.menu_repository import MenuRepository  # noqa: E402
from kiscsibe.services.notification_service import reset_notification_center  # noqa: E402

SESSION_ID = "session-test-0001"


def next_open_day(start: date) -> date:
    """First day after *start* that is not a Sunday."""
    day = start + timedelta(days=1)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


@pytest.fixture(autouse=True)
def fresh_notification_center():
    reset_notification_center()
    yield
    reset_notification_center()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "kiscsibe_test.db")
    monkeypatch.setattr(database, "DB_PATH", path)
    database.init_db()
    return path


@pytest.fixture
def conn(db_path):
    connection = database.get_connection()
    yield connection
    connection.close()


@pytest.fixture
def seeded(db_path):
    """Demo catalog with today's daily offer and a week of pickup slots."""
    seed_mock_data(date.today())


@pytest.fixture
def items(seeded, conn):
    """Seeded menu items by name."""
    repo = MenuRepository(conn)
    return {
        entry["name"]: repo.get_by_name(entry["name"])
        for entries in MOCK_ITEMS.values()
        for entry in entries
    }


@pytest.fixture
def client(db_path):
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def staff_headers(client):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def pickup_day():
    """A day after today that has seeded pickup slots."""
    return next_open_day(date.today())
