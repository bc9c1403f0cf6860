"""Fulfillment Rules - tests for the pure per-category decisions.

Tests cover:
    - matches_category is case-insensitive and exact
    - decide_standard: sell / delay / no-op
    - decide_seasonal: all four branches, branch order, strict season boundaries,
      missing season bounds
    - decide_perishable: fresh / expired / exhausted / expiry boundary,
      naive timestamps, missing expiry
"""

from datetime import timedelta

import pytest

from fulfillment.core.domain_types import ProductCategory
from fulfillment.core.errors import InvalidProductStateError
from fulfillment.core.fulfillment_rules import (
    ItemAction,
    decide_perishable,
    decide_seasonal,
    decide_standard,
    matches_category,
)


# ─── matches_category ────────────────────────────────────────────

@pytest.mark.parametrize("tag", ["standard", "STANDARD", "Standard", "sTaNdArD"])
def test_matches_category_ignores_case(make_product, tag):
    assert matches_category(make_product(tag), ProductCategory.STANDARD)


@pytest.mark.parametrize("tag", [" standard", "standards", "std", "", None])
def test_matches_category_is_exact(make_product, tag):
    assert not matches_category(make_product(tag), ProductCategory.STANDARD)


def test_matches_category_accepts_custom_tags(make_product):
    assert matches_category(make_product("Bundle"), "bundle")


# ─── decide_standard ─────────────────────────────────────────────

def test_standard_in_stock_decrements(make_product):
    p = make_product("standard", available_quantity=30, lead_time_days=15)
    assert decide_standard(p).action is ItemAction.DECREMENT


def test_standard_out_of_stock_with_lead_time_delays(make_product):
    p = make_product("standard", available_quantity=0, lead_time_days=10)
    assert decide_standard(p).action is ItemAction.DELAY


def test_standard_out_of_stock_without_lead_time_is_noop(make_product):
    p = make_product("standard", available_quantity=0, lead_time_days=0)
    assert decide_standard(p).action is ItemAction.NOOP


def test_decisions_do_not_mutate(make_product, now):
    p = make_product(
        "seasonal", available_quantity=3, lead_time_days=4,
        season_start=now - timedelta(days=1), season_end=now + timedelta(days=1),
    )
    decide_standard(p)
    decide_seasonal(p, now)
    assert p.available_quantity == 3
    assert p.lead_time_days == 4


# ─── decide_seasonal ─────────────────────────────────────────────

def _seasonal(make_product, now, *, available, lead, start_days, end_days):
    return make_product(
        "seasonal",
        available_quantity=available,
        lead_time_days=lead,
        season_start=now + timedelta(days=start_days),
        season_end=now + timedelta(days=end_days),
    )


def test_seasonal_in_season_with_stock_decrements(make_product, now):
    p = _seasonal(make_product, now, available=30, lead=15, start_days=-2, end_days=58)
    assert decide_seasonal(p, now).action is ItemAction.DECREMENT


def test_seasonal_restock_after_season_end_zeroes(make_product, now):
    p = _seasonal(make_product, now, available=0, lead=20, start_days=-5, end_days=10)
    assert decide_seasonal(p, now).action is ItemAction.OUT_OF_STOCK_ZEROED


def test_seasonal_season_not_started_is_out_of_stock(make_product, now):
    p = _seasonal(make_product, now, available=30, lead=15, start_days=180, end_days=240)
    assert decide_seasonal(p, now).action is ItemAction.OUT_OF_STOCK


def test_seasonal_in_season_out_of_stock_restock_in_time_delays(make_product, now):
    p = _seasonal(make_product, now, available=0, lead=5, start_days=-2, end_days=10)
    assert decide_seasonal(p, now).action is ItemAction.DELAY


def test_seasonal_late_restock_wins_over_not_started(make_product, now):
    """Season not started AND restock after its end: the zeroing branch fires first."""
    p = _seasonal(make_product, now, available=4, lead=20, start_days=5, end_days=10)
    assert decide_seasonal(p, now).action is ItemAction.OUT_OF_STOCK_ZEROED


def test_seasonal_season_over_with_stock_zeroes(make_product, now):
    p = _seasonal(make_product, now, available=7, lead=3, start_days=-30, end_days=-1)
    assert decide_seasonal(p, now).action is ItemAction.OUT_OF_STOCK_ZEROED


def test_seasonal_exact_season_start_is_not_in_season(make_product, now):
    p = _seasonal(make_product, now, available=5, lead=2, start_days=0, end_days=30)
    assert decide_seasonal(p, now).action is ItemAction.DELAY


def test_seasonal_exact_season_end_is_not_in_season(make_product, now):
    p = _seasonal(make_product, now, available=5, lead=0, start_days=-30, end_days=0)
    assert decide_seasonal(p, now).action is ItemAction.DELAY


def test_seasonal_restock_landing_on_season_end_is_in_time(make_product, now):
    p = _seasonal(make_product, now, available=0, lead=10, start_days=-1, end_days=10)
    assert decide_seasonal(p, now).action is ItemAction.DELAY


def test_seasonal_restock_one_day_past_season_end_zeroes(make_product, now):
    p = _seasonal(make_product, now, available=0, lead=11, start_days=-1, end_days=10)
    assert decide_seasonal(p, now).action is ItemAction.OUT_OF_STOCK_ZEROED


def test_seasonal_missing_bounds_fall_through_to_delay(make_product, now):
    p = make_product("seasonal", available_quantity=5, lead_time_days=3)
    assert decide_seasonal(p, now).action is ItemAction.DELAY


def test_seasonal_naive_bounds_are_read_as_utc(make_product, now):
    p = make_product(
        "seasonal", available_quantity=5, lead_time_days=3,
        season_start=(now - timedelta(days=1)).replace(tzinfo=None),
        season_end=(now + timedelta(days=1)).replace(tzinfo=None),
    )
    assert decide_seasonal(p, now).action is ItemAction.DECREMENT


# ─── decide_perishable ───────────────────────────────────────────

def test_perishable_fresh_with_stock_decrements(make_product, now):
    p = make_product(
        "perishable", available_quantity=30, expiry_date=now + timedelta(days=26),
    )
    assert decide_perishable(p, now).action is ItemAction.DECREMENT


def test_perishable_expired_with_stock_expires(make_product, now):
    p = make_product(
        "perishable", available_quantity=6, expiry_date=now - timedelta(days=2),
    )
    assert decide_perishable(p, now).action is ItemAction.EXPIRE


def test_perishable_fresh_but_exhausted_expires(make_product, now):
    p = make_product(
        "perishable", available_quantity=0, expiry_date=now + timedelta(days=2),
    )
    assert decide_perishable(p, now).action is ItemAction.EXPIRE


def test_perishable_expiring_exactly_now_expires(make_product, now):
    p = make_product("perishable", available_quantity=3, expiry_date=now)
    assert decide_perishable(p, now).action is ItemAction.EXPIRE


def test_perishable_naive_expiry_is_read_as_utc(make_product, now):
    p = make_product(
        "perishable", available_quantity=3,
        expiry_date=(now + timedelta(hours=1)).replace(tzinfo=None),
    )
    assert decide_perishable(p, now).action is ItemAction.DECREMENT


def test_perishable_without_expiry_is_rejected(make_product, now):
    p = make_product("perishable", available_quantity=3)
    with pytest.raises(InvalidProductStateError) as exc_info:
        decide_perishable(p, now)
    assert exc_info.value.field == "expiry_date"
    assert exc_info.value.context.product_id == p.id
