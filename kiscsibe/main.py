"""
Application entry point.
Run with:  uvicorn kiscsibe.main:app --reload

⚠️  DEVELOPMENT NOTE:
    A default admin user and a demo catalog are seeded on startup
    (see kiscsibe/db/seeder.py and kiscsibe/db/mock_seeder.py).
    Set SEED_DEMO_DATA=false before deploying to production.
"""
import logging

from fastapi import FastAPI

from kiscsibe.core.logging_config import configure_logging
from fastapi.middleware.cors import CORSMiddleware

from kiscsibe.core.config import settings
from kiscsibe.api.v1.router import api_router
from kiscsibe.db.database import init_db
from kiscsibe.db.seeder import seed_admin
from kiscsibe.db.mock_seeder import seed_mock_data

configure_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    logger = logging.getLogger(__name__)
    logger.info("Starting FastAPI application setup")
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Ordering API for a small restaurant: menu with side dishes, "
            "daily offers, session carts and favorites, pickup orders and "
            "a staff dashboard."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_router)

    # ── Startup / shutdown events ───────────────────────────────────────────
    @app.on_event("startup")
    def on_startup() -> None:
        """Initialize the database and development seed data."""
        logger.info("Initializing database and seed data")
        init_db()
        if settings.SEED_DEMO_DATA:
            # ⚠️ DEV ONLY
            seed_admin()
            seed_mock_data()

    return app


app = create_app()
