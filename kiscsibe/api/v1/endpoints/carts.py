"""
Session cart endpoints (anonymous, keyed by a browser session id):
  GET    /carts/{session_id}                    – Current cart with totals
  POST   /carts/{session_id}/items              – Add a menu item as a new line
  PATCH  /carts/{session_id}/items/{line_id}    – Set a line's quantity (<= 0 removes)
  DELETE /carts/{session_id}/items/{line_id}    – Remove a line
  DELETE /carts/{session_id}                    – Empty the cart
  POST   /carts/{session_id}/menu               – Add a complete daily menu combo
  POST   /carts/{session_id}/daily              – Add a daily offer selection
  GET    /carts/{session_id}/validation         – Check side dish requirements
  POST   /carts/{session_id}/checkout           – Submit the cart as an order
"""
from fastapi import APIRouter, Depends, Path, status
import logging

from kiscsibe.core.dependencies import SESSION_ID_PATTERN, db_dependency
from kiscsibe.schemas.cart import (
    CartItemAdd,
    CartMenuAdd,
    CartQuantityUpdate,
    CartResponse,
    CartValidationResponse,
)
from kiscsibe.schemas.daily import DailyCartAdd
from kiscsibe.schemas.order import CheckoutRequest, OrderResponse
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.checkout_service import CheckoutValidator
from kiscsibe.services.daily_package_service import DailyPackageService
from kiscsibe.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carts", tags=["Carts"])


def _cart_response(conn, session_id: str) -> CartResponse:
    state = CartService(conn).open_store(session_id).state
    return CartResponse.from_state(session_id, state)


@router.get(
    "/{session_id}",
    response_model=CartResponse,
    summary="Get the session cart",
)
def get_cart(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    return _cart_response(conn, session_id)


@router.post(
    "/{session_id}/items",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a menu item to the cart",
)
def add_item(
    data: CartItemAdd,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    """
    Every add creates a new line, even for an identical item. Name and price
    are copied from the catalog at this moment.
    """
    logger.info("Add to cart requested session=%s item id=%s", session_id, data.item_id)
    CartService(conn).add_item(session_id, data)
    return _cart_response(conn, session_id)


@router.patch(
    "/{session_id}/items/{line_id}",
    response_model=CartResponse,
    summary="Update a cart line quantity",
)
def update_quantity(
    line_id: str,
    data: CartQuantityUpdate,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    CartService(conn).update_quantity(session_id, line_id, data.quantity)
    return _cart_response(conn, session_id)


@router.delete(
    "/{session_id}/items/{line_id}",
    response_model=CartResponse,
    summary="Remove a cart line",
)
def remove_item(
    line_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    CartService(conn).remove_item(session_id, line_id)
    return _cart_response(conn, session_id)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Empty the cart",
)
def clear_cart(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    CartService(conn).clear(session_id)


@router.post(
    "/{session_id}/menu",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a complete daily menu combo",
)
def add_daily_menu(
    data: CartMenuAdd,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    CartService(conn).add_daily_menu(session_id, data.menu_id)
    return _cart_response(conn, session_id)


@router.post(
    "/{session_id}/daily",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a daily offer selection",
)
def add_daily_selection(
    data: DailyCartAdd,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    """
    A selection covering every package item is added as one line per
    package unit at the package price; otherwise each item is added at its
    own price.
    """
    DailyPackageService(conn).add_to_cart(
        session_id, data.offer_id, data.daily_type, data.as_mapping()
    )
    return _cart_response(conn, session_id)


@router.get(
    "/{session_id}/validation",
    response_model=CartValidationResponse,
    summary="Validate side dish choices before checkout",
)
def validate_cart(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    state = CartService(conn).open_store(session_id).state
    return CheckoutValidator(conn).validate_cart_sides(state.items)


@router.post(
    "/{session_id}/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit the cart as an order",
)
def checkout(
    data: CheckoutRequest,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    """
    Re-validates sides, re-prices every line from the catalog, takes daily
    portions and the pickup slot, then stores the order and empties the
    cart. Any failure leaves nothing behind.
    """
    logger.info("Checkout requested session=%s", session_id)
    return OrderService(conn).submit(session_id, data)
