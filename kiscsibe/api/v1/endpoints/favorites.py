"""
Favorite order endpoints:
  GET    /favorites/{session_id}                          – Saved favorites, newest first
  POST   /favorites/{session_id}                          – Save the current cart
  DELETE /favorites/{session_id}/{favorite_id}            – Remove a favorite
  GET    /favorites/{session_id}/{favorite_id}/validation – Check item availability
  POST   /favorites/{session_id}/{favorite_id}/reorder    – Add a favorite to the cart
"""
from fastapi import APIRouter, Depends, Path, status
import logging

from kiscsibe.core.dependencies import SESSION_ID_PATTERN, db_dependency
from kiscsibe.schemas.cart import CartResponse
from kiscsibe.schemas.favorite import (
    FavoriteCreate,
    FavoriteResponse,
    FavoriteValidationResponse,
)
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.favorite_service import FavoriteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "/{session_id}",
    response_model=list[FavoriteResponse],
    summary="List saved favorites",
)
def list_favorites(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    return FavoriteService(conn).list_favorites(session_id)


@router.post(
    "/{session_id}",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save the current cart as a favorite",
)
def save_favorite(
    data: FavoriteCreate,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    """Only the newest favorites are kept; saving past the limit drops the oldest."""
    return FavoriteService(conn).save(session_id, data.name)


@router.delete(
    "/{session_id}/{favorite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a favorite",
)
def remove_favorite(
    favorite_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    FavoriteService(conn).remove(session_id, favorite_id)


@router.get(
    "/{session_id}/{favorite_id}/validation",
    response_model=FavoriteValidationResponse,
    summary="Check whether every favorite item is still available",
)
def validate_favorite(
    favorite_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    return FavoriteService(conn).validate(session_id, favorite_id)


@router.post(
    "/{session_id}/{favorite_id}/reorder",
    response_model=CartResponse,
    summary="Add every item of a favorite to the cart",
)
def reorder_favorite(
    favorite_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    logger.info("Reorder requested favorite=%s session=%s", favorite_id, session_id)
    FavoriteService(conn).reorder(session_id, favorite_id)
    state = CartService(conn).open_store(session_id).state
    return CartResponse.from_state(session_id, state)
