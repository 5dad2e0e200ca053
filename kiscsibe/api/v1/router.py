"""
Central v1 API router – registers all endpoint sub-routers.
"""
from fastapi import APIRouter
import logging

from kiscsibe.api.v1.endpoints import auth, carts, daily, favorites, menu, orders, preferences, staff

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/v1")

logger.info("Registering v1 API routers")
api_router.include_router(auth.router)
api_router.include_router(menu.router)
api_router.include_router(daily.router)
api_router.include_router(carts.router)
api_router.include_router(favorites.router)
api_router.include_router(preferences.router)
api_router.include_router(orders.router)
api_router.include_router(staff.router)
