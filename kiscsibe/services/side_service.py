"""
Side dish policy for main items.

SideResolver answers "which sides may accompany this item, how many, and is
the choice mandatory" using a three tier fallback:

    1. explicit menu_item_sides rows for the main item
    2. side-category items offered on the same day (daily offer context)
    3. every active item in a side category

SideSelection is the state of one side picker: it applies radio, toggle and
capacity rules to clicks and reports whether the selection can be confirmed.
"""
import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import logging

from fastapi import HTTPException, status

from kiscsibe.core.config import settings
from kiscsibe.models.cart import CartSide
from kiscsibe.models.menu_item import MenuItem
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.repositories.side_repository import SideRepository

logger = logging.getLogger(__name__)

EVICT_OLDEST = "evict_oldest"
REJECT = "reject"


class SideSource(str, Enum):
    CONFIGURED = "configured"
    DAILY_FALLBACK = "daily_fallback"
    GENERAL_FALLBACK = "general_fallback"
    NONE = "none"


@dataclass
class SideResolution:
    """Outcome of resolving the side policy for one main item."""

    main_item_id: int
    source: SideSource
    candidates: list[MenuItem] = field(default_factory=list)
    min_select: int = 0
    max_select: int = 1
    is_required: bool = False
    default_side_ids: list[int] = field(default_factory=list)

    @property
    def has_side_step(self) -> bool:
        return self.source != SideSource.NONE and bool(self.candidates)

    @property
    def candidate_ids(self) -> list[int]:
        return [c.id for c in self.candidates]

    @classmethod
    def empty(cls, main_item_id: int) -> "SideResolution":
        return cls(main_item_id=main_item_id, source=SideSource.NONE, max_select=0)


@dataclass
class SideConfirmation:
    ok: bool
    sides: list[CartSide]
    message: Optional[str] = None


class SideResolver:
    """Resolve side policies from configuration rows and catalog fallbacks."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing SideResolver")
        self._menu_repo = MenuRepository(conn)
        self._side_repo = SideRepository(conn)
        self._daily_repo = DailyOfferRepository(conn)

    def resolve(
        self, main_item_id: int, daily_offer_id: Optional[int] = None
    ) -> SideResolution:
        """Return the side policy for *main_item_id*, never raising for missing data."""
        logger.info(
            "Resolving sides for item id=%s daily_offer_id=%s", main_item_id, daily_offer_id
        )
        side_categories = settings.SIDE_CATEGORY_NAMES

        rows = self._side_repo.list_for_main(main_item_id)
        if rows:
            main = self._menu_repo.get_by_id(main_item_id)
            first = rows[0]
            is_required = any(r.is_required for r in rows) or bool(
                main and main.requires_side_selection
            )
            resolution = SideResolution(
                main_item_id=main_item_id,
                source=SideSource.CONFIGURED,
                candidates=[r.side_item for r in rows],
                min_select=first.min_select,
                max_select=first.max_select,
                is_required=is_required,
                default_side_ids=[r.side_item_id for r in rows if r.is_default],
            )
            logger.trace("Configured sides found count=%s", len(rows))
            return resolution

        if daily_offer_id is not None:
            daily_sides = self._daily_repo.list_side_candidates(daily_offer_id, side_categories)
            if daily_sides:
                logger.trace("Using daily offer sides count=%s", len(daily_sides))
                return SideResolution(
                    main_item_id=main_item_id,
                    source=SideSource.DAILY_FALLBACK,
                    candidates=daily_sides,
                )

        general = self._menu_repo.list_active_in_categories(side_categories)
        if general:
            logger.trace("Using general side catalog count=%s", len(general))
            return SideResolution(
                main_item_id=main_item_id,
                source=SideSource.GENERAL_FALLBACK,
                candidates=general,
            )

        logger.info("No sides available for item id=%s", main_item_id)
        return SideResolution.empty(main_item_id)

    def resolve_or_404(
        self, main_item_id: int, daily_offer_id: Optional[int] = None
    ) -> SideResolution:
        """Resolve sides for an item that must exist in the catalog."""
        if self._menu_repo.get_by_id(main_item_id) is None:
            logger.warning("Menu item id=%s not found", main_item_id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Menu item with id={main_item_id} not found",
            )
        return self.resolve(main_item_id, daily_offer_id)


class SideSelection:
    """
    Picker state for one main item.

    With ``max_select == 1`` a click replaces the current side. Otherwise a
    click toggles; at capacity the configured overflow policy either evicts
    the oldest pick or ignores the click.
    """

    def __init__(
        self,
        resolution: SideResolution,
        selected_ids: Optional[list[int]] = None,
        overflow_policy: Optional[str] = None,
    ) -> None:
        self._resolution = resolution
        self._by_id = {c.id: c for c in resolution.candidates}
        self._policy = overflow_policy or settings.SIDE_OVERFLOW_POLICY
        initial = resolution.default_side_ids if selected_ids is None else selected_ids
        self._selected: list[int] = []
        for side_id in initial:
            if side_id in self._by_id and side_id not in self._selected:
                self._selected.append(side_id)
        if resolution.max_select > 0:
            # oldest picks fall off if the defaults exceed the cap
            self._selected = self._selected[-resolution.max_select:]

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    def select(self, side_id: int) -> list[int]:
        """Apply one click and return the resulting selection (in pick order)."""
        if side_id not in self._by_id:
            raise ValueError(f"Side id={side_id} is not offered for this item")

        max_select = self._resolution.max_select
        if max_select <= 1:
            self._selected = [side_id]
        elif side_id in self._selected:
            self._selected.remove(side_id)
        elif len(self._selected) < max_select:
            self._selected.append(side_id)
        elif self._policy == REJECT:
            logger.trace("Side selection full, ignoring side id=%s", side_id)
        else:
            evicted = self._selected.pop(0)
            logger.trace("Side selection full, evicted side id=%s", evicted)
            self._selected.append(side_id)
        return self.selected_ids

    def confirm(self) -> SideConfirmation:
        """Report whether the current picks satisfy the minimum."""
        sides = [CartSide(id=i, name=self._by_id[i].name) for i in self._selected]
        min_select = self._resolution.min_select
        if len(sides) < min_select:
            return SideConfirmation(
                ok=False,
                sides=sides,
                message=f"Please choose at least {min_select} side(s)",
            )
        return SideConfirmation(ok=True, sides=sides)
