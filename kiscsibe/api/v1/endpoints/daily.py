"""
Daily offer endpoints:
  GET  /daily/{offer_date}         – The offer (and menu combo) for a day
  POST /daily/{offer_id}/quote     – Price a package selection
"""
from datetime import date

from fastapi import APIRouter, Depends
import logging

from kiscsibe.core.dependencies import db_dependency
from kiscsibe.schemas.daily import DailyOfferResponse, PackageQuoteResponse, PackageSelection
from kiscsibe.services.daily_package_service import DailyPackageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/daily", tags=["Daily Offers"])


@router.get(
    "/{offer_date}",
    response_model=DailyOfferResponse,
    summary="Get the daily offer for a date",
)
def get_daily_offer(offer_date: date, conn=Depends(db_dependency)):
    offer = DailyPackageService(conn).get_offer_for_date(offer_date)
    return DailyOfferResponse.from_offer(offer)


@router.post(
    "/{offer_id}/quote",
    response_model=PackageQuoteResponse,
    summary="Quote a daily package selection",
)
def quote_package(
    offer_id: int,
    data: PackageSelection,
    conn=Depends(db_dependency),
):
    """
    Selecting every candidate item prices the selection as
    `max(quantity)` packages; any subset is priced item by item.
    """
    logger.info("Quote requested for offer id=%s type=%s", offer_id, data.daily_type.value)
    quote = DailyPackageService(conn).quote(offer_id, data.daily_type, data.as_mapping())
    return PackageQuoteResponse.model_validate(quote)
