"""Application configuration loaded via pydantic settings."""

from typing import List
import secrets

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Strongly-typed application settings with environment overrides."""

    # Application
    APP_NAME: str = "Kiscsibe Ordering API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Database
    DATABASE_URL: str = "sqlite:///./kiscsibe/kiscsibe.db"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Development seed data (admin account, demo catalog, pickup slots)
    SEED_DEMO_DATA: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_LEVELS: str = "TRACE,ERROR,WARNING,INFO"
    LOG_FILE_PATH: str = "./kiscsibe/logs/app.log"

    # Side dishes
    SIDE_CATEGORY_NAMES: List[str] = ["Köretek", "Extra köretek", "Hagyományos köretek"]
    SIDE_OVERFLOW_POLICY: str = "evict_oldest"  # or "reject"

    # Session-local storage keys
    CART_STORAGE_KEY: str = "kiscsibe-cart"
    FAVORITES_STORAGE_KEY: str = "kiscsibe-favorites"
    COOKIE_CONSENT_STORAGE_KEY: str = "kiscsibe-cookie-consent"
    NOTIFICATION_CONSENT_STORAGE_KEY: str = "kiscsibe-notification-consent"
    MAX_FAVORITES: int = 5

    # Staff notifications
    SEEN_ORDERS_CAPACITY: int = 500
    NOTIFICATION_BOOTSTRAP_LIMIT: int = 100

    # Opening hours (pickup validation), [open, close)
    WEEKDAY_OPEN_HOUR: int = 7
    WEEKDAY_CLOSE_HOUR: int = 15
    SATURDAY_OPEN_HOUR: int = 8
    SATURDAY_CLOSE_HOUR: int = 14

    class Config:
        """Configure environment file loading behavior."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
