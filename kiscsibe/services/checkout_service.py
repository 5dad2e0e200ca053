"""
Checkout validation.
Re-resolves the side policy of every regular cart line at validation time
and reports lines whose side choice does not satisfy it.
"""
import sqlite3
from dataclasses import dataclass, field
from typing import Iterable
import logging

from kiscsibe.models.cart import CartItem
from kiscsibe.services.side_service import SideResolver

logger = logging.getLogger(__name__)


@dataclass
class CartValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


class CheckoutValidator:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing CheckoutValidator")
        self._resolver = SideResolver(conn)

    def validate_cart_sides(self, items: Iterable[CartItem]) -> CartValidation:
        """Return one error per line whose required sides are missing or too many."""
        errors: list[str] = []
        for line in items:
            menu_item_id = line.menu_item_id
            if menu_item_id is None:
                continue
            policy = self._resolver.resolve(menu_item_id, line.daily_id)
            if not policy.is_required:
                continue
            count = len(line.sides)
            if count < policy.min_select:
                errors.append(
                    f"{line.name}: please choose at least {policy.min_select} side(s)"
                )
            elif count > policy.max_select:
                errors.append(
                    f"{line.name}: choose at most {policy.max_select} side(s)"
                )
        logger.info("Validated cart sides lines_with_errors=%s", len(errors))
        return CartValidation(valid=not errors, errors=errors)
