"""
Database seeder – creates a default admin account on first startup.

⚠️  FOR DEVELOPMENT ONLY.
    Set SEED_DEMO_DATA=false in production.

Default credentials:
    username : admin
    password : Admin1234!
    email    : admin@kiscsibe.local
"""
import logging

from kiscsibe.core.security import hash_password
from kiscsibe.db.database import get_connection
from kiscsibe.models.user import UserRole
from kiscsibe.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Seed data – change these values freely during development
# ---------------------------------------------------------------------------
ADMIN_USERNAME = "admin"
ADMIN_EMAIL = "admin@kiscsibe.local"
ADMIN_PASSWORD = "Admin1234!"
ADMIN_FULL_NAME = "Default Admin"


def seed_admin() -> None:
    """
    Insert the default admin user if it does not already exist.
    Safe to call on every startup – it is a no-op when the user is present.
    """
    conn = get_connection()
    try:
        repo = UserRepository(conn)
        if repo.get_by_login(ADMIN_USERNAME):
            logger.info("Seeder: admin user '%s' already exists – skipping.", ADMIN_USERNAME)
            return

        repo.create(
            email=ADMIN_EMAIL,
            username=ADMIN_USERNAME,
            hashed_password=hash_password(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            full_name=ADMIN_FULL_NAME,
        )
        conn.commit()
        logger.info(
            "Seeder: created default admin user '%s' (email: %s).",
            ADMIN_USERNAME,
            ADMIN_EMAIL,
        )
    finally:
        conn.close()
