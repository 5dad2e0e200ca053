from datetime import date

import pytest

from kiscsibe.models.menu_item import MenuItem
from kiscsibe.repositories.daily_offer_repository import DailyOfferRepository
from kiscsibe.repositories.menu_repository import MenuRepository
from kiscsibe.services.side_service import (
    EVICT_OLDEST,
    REJECT,
    SideResolution,
    SideResolver,
    SideSelection,
    SideSource,
)


RIZS = MenuItem(id=11, name="Rizs", price_huf=500)
KRUMPLI = MenuItem(id=12, name="Krumpli", price_huf=600)
GALUSKA = MenuItem(id=13, name="Galuska", price_huf=600)


def _resolution(min_select=0, max_select=1, defaults=None):
    return SideResolution(
        main_item_id=1,
        source=SideSource.CONFIGURED,
        candidates=[RIZS, KRUMPLI, GALUSKA],
        min_select=min_select,
        max_select=max_select,
        is_required=min_select > 0,
        default_side_ids=defaults or [],
    )


# ---------------------------------------------------------------------------
# Picker rules
# ---------------------------------------------------------------------------

def test_single_choice_replaces_previous_pick():
    selection = SideSelection(_resolution(max_select=1))
    selection.select(RIZS.id)
    assert selection.select(KRUMPLI.id) == [KRUMPLI.id]


def test_multi_choice_click_toggles_membership():
    selection = SideSelection(_resolution(max_select=3))
    selection.select(RIZS.id)
    selection.select(KRUMPLI.id)
    assert selection.select(RIZS.id) == [KRUMPLI.id]


def test_full_selection_evicts_oldest_pick():
    selection = SideSelection(_resolution(max_select=2), overflow_policy=EVICT_OLDEST)
    selection.select(RIZS.id)
    selection.select(KRUMPLI.id)
    assert selection.select(GALUSKA.id) == [KRUMPLI.id, GALUSKA.id]


def test_full_selection_ignores_click_with_reject_policy():
    selection = SideSelection(_resolution(max_select=2), overflow_policy=REJECT)
    selection.select(RIZS.id)
    selection.select(KRUMPLI.id)
    assert selection.select(GALUSKA.id) == [RIZS.id, KRUMPLI.id]


def test_unknown_side_is_rejected():
    selection = SideSelection(_resolution())
    with pytest.raises(ValueError):
        selection.select(999)


def test_default_sides_are_preselected():
    selection = SideSelection(_resolution(max_select=2, defaults=[KRUMPLI.id]))
    assert selection.selected_ids == [KRUMPLI.id]


def test_confirm_requires_minimum():
    selection = SideSelection(_resolution(min_select=1))

    refused = selection.confirm()
    assert not refused.ok
    assert refused.message == "Please choose at least 1 side(s)"

    selection.select(RIZS.id)
    accepted = selection.confirm()
    assert accepted.ok
    assert [s.name for s in accepted.sides] == ["Rizs"]


# ---------------------------------------------------------------------------
# Resolver fallback tiers
# ---------------------------------------------------------------------------

def test_configured_sides_win(items, conn):
    resolution = SideResolver(conn).resolve(items["Rántott szelet"].id)

    assert resolution.source == SideSource.CONFIGURED
    assert {c.name for c in resolution.candidates} == {"Rizs", "Krumpli"}
    assert (resolution.min_select, resolution.max_select) == (1, 1)
    assert resolution.is_required
    assert resolution.has_side_step


def test_daily_offer_sides_are_used_without_configuration(items, conn):
    daily_repo = DailyOfferRepository(conn)
    offer = daily_repo.get_by_date(date.today())
    daily_repo.add_item(offer.id, items["Rizs"].id)

    resolution = SideResolver(conn).resolve(items["Csirkepaprikás"].id, offer.id)

    assert resolution.source == SideSource.DAILY_FALLBACK
    assert resolution.candidate_ids == [items["Rizs"].id]
    assert not resolution.is_required
    assert (resolution.min_select, resolution.max_select) == (0, 1)


def test_general_side_category_is_last_fallback(items, conn):
    resolution = SideResolver(conn).resolve(items["Gulyás"].id)

    assert resolution.source == SideSource.GENERAL_FALLBACK
    assert {c.name for c in resolution.candidates} == {"Rizs", "Krumpli", "Galuska"}
    assert not resolution.is_required


def test_no_candidates_means_no_side_step(conn):
    repo = MenuRepository(conn)
    soups = repo.create_category("Levesek")
    gulyas = repo.create("Gulyás", 1200, category_id=soups.id)

    resolution = SideResolver(conn).resolve(gulyas.id)

    assert resolution.source == SideSource.NONE
    assert not resolution.has_side_step
    assert resolution.candidates == []
