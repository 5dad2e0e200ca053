"""
Daily offer packaging.

A customer picking from a daily offer (or its soup + main menu) either takes
every candidate item, which is sold as a flat-priced package, or a subset,
which is sold item by item at standalone prices.
"""
import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional
import logging

from fastapi import HTTPException, status

from kiscsibe.models.cart import CartItem
from kiscsibe.models.daily_offer import DailyOffer, DailyType
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.services.cart_service import CartService
from kiscsibe.services.cart_store import package_item_id

logger = logging.getLogger(__name__)


@dataclass
class PackageQuote:
    is_complete_package: bool
    total_price: int
    total_quantity: int
    effective_quantity: int
    savings: int

    @property
    def visible_savings(self) -> int:
        """Savings as shown to customers: only positive values are surfaced."""
        return self.savings if self.savings > 0 else 0


def compose_package(
    candidates: list[MenuItem],
    package_price: int,
    selection: Mapping[int, int],
) -> PackageQuote:
    """
    Price a selection drawn from *candidates*.

    Quantities below one count as one. A complete selection is ordered as
    ``max(quantity)`` packages; a partial one is the sum of its items.

    Raises:
        ValueError: if the selection is empty or names a non-candidate id.
    """
    if not selection:
        raise ValueError("Select at least one item")
    prices = {c.id: c.price_huf for c in candidates}
    unknown = [item_id for item_id in selection if item_id not in prices]
    if unknown:
        raise ValueError(f"Items {unknown} are not part of this offer")

    quantities = {item_id: max(1, qty) for item_id, qty in selection.items()}
    is_complete = set(quantities) == set(prices)

    if is_complete:
        units = max(quantities.values())
        return PackageQuote(
            is_complete_package=True,
            total_price=package_price * units,
            total_quantity=units,
            effective_quantity=units,
            savings=sum(prices.values()) - package_price,
        )

    return PackageQuote(
        is_complete_package=False,
        total_price=sum(prices[i] * q for i, q in quantities.items()),
        total_quantity=sum(quantities.values()),
        effective_quantity=0,
        savings=0,
    )


@dataclass
class PackageCandidates:
    """What one daily package is made of and how it is sold."""

    daily_type: DailyType
    daily_id: int
    offer: DailyOffer
    items: list[MenuItem]
    package_price: int
    remaining_portions: Optional[int]
    name: str

    @property
    def is_sold_out(self) -> bool:
        return self.remaining_portions is not None and self.remaining_portions <= 0


class DailyPackageService:
    """Business logic for daily offers, menu combos and their pricing."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing DailyPackageService")
        self._conn = conn
        self._daily_repo = DailyOfferRepository(conn)
        self._cart_service = CartService(conn)

    def get_offer_for_date(self, offer_date: date) -> DailyOffer:
        logger.info("Fetching daily offer for date=%s", offer_date)
        offer = self._daily_repo.get_by_date(offer_date)
        if offer is None:
            logger.warning("No daily offer on %s", offer_date)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No daily offer for {offer_date.isoformat()}",
            )
        return offer

    def get_candidates(self, offer_id: int, daily_type: DailyType) -> PackageCandidates:
        """
        Return the package items: every offer item at the offer's package
        price, or the menu-part items at the menu price.
        """
        offer = self._daily_repo.get_by_id(offer_id)
        if offer is None:
            logger.warning("Daily offer id=%s not found", offer_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Daily offer with id={offer_id} not found",
            )

        if daily_type == DailyType.MENU:
            menu = offer.menu
            if menu is None or not offer.menu_part_items:
                logger.warning("Daily offer id=%s has no menu", offer_id)
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Daily offer with id={offer_id} has no menu",
                )
            parts = " + ".join(i.menu_item.name for i in offer.menu_part_items)
            return PackageCandidates(
                daily_type=DailyType.MENU,
                daily_id=menu.id,
                offer=offer,
                items=[i.menu_item for i in offer.menu_part_items],
                package_price=menu.menu_price,
                remaining_portions=menu.remaining_portions,
                name=f"Napi menü: {parts}",
            )

        if offer.package_price is None or not offer.items:
            logger.warning("Daily offer id=%s is not sold as a package", offer_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This daily offer has no package price",
            )
        return PackageCandidates(
            daily_type=DailyType.OFFER,
            daily_id=offer.id,
            offer=offer,
            items=[i.menu_item for i in offer.items],
            package_price=offer.package_price,
            remaining_portions=offer.remaining_portions,
            name=f"Napi ajánlat ({offer.date.isoformat()})",
        )

    def quote(
        self, offer_id: int, daily_type: DailyType, selection: Mapping[int, int]
    ) -> PackageQuote:
        logger.info("Quoting daily %s for offer id=%s", daily_type.value, offer_id)
        package = self.get_candidates(offer_id, daily_type)
        return self._compose(package, selection)

    def add_to_cart(
        self,
        session_id: str,
        offer_id: int,
        daily_type: DailyType,
        selection: Mapping[int, int],
    ) -> list[CartItem]:
        """
        Put a daily selection into the session cart.

        A complete package becomes ``effective_quantity`` lines of quantity 1
        sharing the package id; a partial selection becomes one line per item.
        """
        logger.info(
            "Adding daily %s offer id=%s to cart session=%s",
            daily_type.value,
            offer_id,
            session_id,
        )
        package = self.get_candidates(offer_id, daily_type)
        if package.is_sold_out:
            logger.warning("Daily %s id=%s is sold out", daily_type.value, package.daily_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This daily offer is sold out",
            )
        quote = self._compose(package, selection)
        store = self._cart_service.open_store(session_id)
        offer_date = package.offer.date.isoformat()
        lines: list[CartItem] = []

        if quote.is_complete_package:
            main = package.items[-1]
            for _ in range(quote.effective_quantity):
                lines.append(
                    store.add_item(
                        item_id=package_item_id(package.daily_type, package.daily_id),
                        name=package.name,
                        unit_price=package.package_price,
                        image_url=main.image_url,
                        daily_type=package.daily_type.value,
                        daily_date=offer_date,
                        daily_id=package.daily_id,
                    )
                )
            return lines

        by_id = {item.id: item for item in package.items}
        for item_id, qty in selection.items():
            item = by_id[item_id]
            lines.append(
                store.add_item(
                    item_id=str(item.id),
                    name=item.name,
                    unit_price=item.price_huf,
                    quantity=max(1, qty),
                    image_url=item.image_url,
                    daily_id=package.offer.id,
                )
            )
        return lines

    def _compose(self, package: PackageCandidates, selection: Mapping[int, int]) -> PackageQuote:
        try:
            return compose_package(package.items, package.package_price, selection)
        except ValueError as exc:
            logger.warning("Invalid daily selection: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            )
