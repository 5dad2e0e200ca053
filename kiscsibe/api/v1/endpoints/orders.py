"""
Customer order lookup:
  GET /orders/{code}?phone=...   – Order status and lines by order code
"""
from fastapi import APIRouter, Depends, Query

from kiscsibe.core.dependencies import db_dependency
from kiscsibe.schemas.order import OrderLookupResponse
from kiscsibe.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get(
    "/{code}",
    response_model=OrderLookupResponse,
    summary="Look up an order by its code",
)
def lookup_order(
    code: str,
    phone: str = Query(..., min_length=6, description="Phone number used when ordering"),
    conn=Depends(db_dependency),
):
    """The phone number must match the one given at checkout."""
    return OrderService(conn).lookup(code, phone)
