"""
Staff dashboard endpoints (admin or staff role):
  GET   /staff/orders                          – List orders (status/day filters)
  GET   /staff/orders/{order_id}               – Order with lines and options
  PATCH /staff/orders/{order_id}/status        – Move an order along its workflow
  POST  /staff/orders/{order_id}/archive       – Hide a finished order from the board
  GET   /staff/notifications                   – Pending new-order alerts
  POST  /staff/notifications/dismiss           – Dismiss the current alert
  POST  /staff/notifications/clear-count       – Reset the new-order counter
  GET   /staff/prep-summary                    – Items to prepare for a day
  GET   /staff/prep-summary/pdf                – Printable items-to-prepare sheet
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
import logging

from kiscsibe.core.dependencies import db_dependency, require_staff
from kiscsibe.models.order import OrderStatus
from kiscsibe.models.user import User
from kiscsibe.schemas.order import (
    NotificationFeedResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
    PendingNotificationResponse,
    PrepSummaryResponse,
)
from kiscsibe.services.notification_service import (
    NotificationFeedService,
    OrderNotificationCenter,
)
from kiscsibe.services.order_service import OrderService
from kiscsibe.services.pdf_service import PDFService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staff", tags=["Staff"])


def _feed(center: OrderNotificationCenter) -> NotificationFeedResponse:
    current = center.current
    return NotificationFeedResponse(
        current=PendingNotificationResponse.model_validate(current) if current else None,
        pending=[PendingNotificationResponse.model_validate(n) for n in center.pending],
        new_orders_count=center.new_orders_count,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@router.get(
    "/orders",
    response_model=list[OrderSummaryResponse],
    summary="List orders",
)
def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    day: Optional[date] = Query(None, description="Pickup (or creation) day"),
    include_archived: bool = Query(False),
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return OrderService(conn).list_orders(status, day, include_archived)


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    summary="Get an order with its lines",
)
def get_order(
    order_id: int,
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return OrderService(conn).get_order(order_id)


@router.patch(
    "/orders/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
)
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    conn=Depends(db_dependency),
    current_user: User = Depends(require_staff),
):
    """Completed and cancelled orders cannot change status again."""
    logger.info("User id=%s updating order id=%s", current_user.id, order_id)
    return OrderService(conn).update_status(order_id, data.status)


@router.post(
    "/orders/{order_id}/archive",
    response_model=OrderResponse,
    summary="Archive a finished order",
)
def archive_order(
    order_id: int,
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return OrderService(conn).archive(order_id)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@router.get(
    "/notifications",
    response_model=NotificationFeedResponse,
    summary="Pending new-order alerts",
)
def get_notifications(
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    """
    The first call marks existing orders as seen. Later calls compare the
    recent order list with what was already announced and queue anything
    the live event stream missed.
    """
    return _feed(NotificationFeedService(conn).sync())


@router.post(
    "/notifications/dismiss",
    response_model=NotificationFeedResponse,
    summary="Dismiss the current alert",
)
def dismiss_notification(
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return _feed(NotificationFeedService(conn).dismiss())


@router.post(
    "/notifications/clear-count",
    response_model=NotificationFeedResponse,
    summary="Reset the new-order counter",
)
def clear_notification_count(
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return _feed(NotificationFeedService(conn).clear_count())


# ---------------------------------------------------------------------------
# Prep summary
# ---------------------------------------------------------------------------

@router.get(
    "/prep-summary",
    response_model=PrepSummaryResponse,
    summary="Items to prepare for a day",
)
def prep_summary(
    day: date = Query(..., description="Day (YYYY-MM-DD)"),
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    return OrderService(conn).prep_summary(day)


@router.get(
    "/prep-summary/pdf",
    summary="Printable items-to-prepare sheet",
    response_class=StreamingResponse,
)
def prep_summary_pdf(
    day: date = Query(..., description="Day (YYYY-MM-DD)"),
    conn=Depends(db_dependency),
    _: User = Depends(require_staff),
):
    summary = OrderService(conn).prep_summary(day)
    pdf_buffer = PDFService().generate_prep_summary(summary)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=prep_summary_{day}.pdf"
        },
    )
