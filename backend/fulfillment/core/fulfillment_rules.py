"""Fulfillment Rules - per-category decisions over one product and "now".

Invariants:
    - Every decide_* function is PURE: returns an ItemDecision, does NOT mutate
    - Shell applies the decision (handle_products.py): mutate, persist, notify
    - Seasonal branches evaluated in fixed order; comparisons are strict
    - A missing season bound makes every comparison against it False
    - A perishable product without expiry_date is rejected before any mutation

Design Decisions:
    - Decision enum over returning dicts: the shell switches on a closed set of
      actions, and tests assert on a single value
    - `now` passed in, never read here: the shell reads the clock once per item
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from fulfillment.core.domain_types import ProductCategory, ensure_utc
from fulfillment.core.errors import ErrorContext, InvalidProductStateError
from fulfillment.core.repository_protocols import ProductLike


class ItemAction(str, Enum):
    """What the shell must do with one order item."""
    DECREMENT = "decrement"
    DELAY = "delay"
    OUT_OF_STOCK = "out_of_stock"
    OUT_OF_STOCK_ZEROED = "out_of_stock_zeroed"
    EXPIRE = "expire"
    NOOP = "noop"


@dataclass(frozen=True)
class ItemDecision:
    action: ItemAction
    reason: str


def matches_category(product: ProductLike, category: str) -> bool:
    """Case-insensitive exact match of the product's tag."""
    tag = product.category
    if tag is None:
        return False
    if isinstance(category, ProductCategory):
        category = category.value
    return tag.casefold() == category.casefold()


def _after(left: datetime | None, right: datetime | None) -> bool:
    """left > right; False when either side is missing."""
    if left is None or right is None:
        return False
    return ensure_utc(left) > ensure_utc(right)


def decide_standard(product: ProductLike) -> ItemDecision:
    """Standard stock: sell, else wait for replenishment, else nothing."""
    if product.available_quantity > 0:
        return ItemDecision(ItemAction.DECREMENT, "in stock")
    if product.lead_time_days > 0:
        return ItemDecision(ItemAction.DELAY, "out of stock, restock pending")
    return ItemDecision(ItemAction.NOOP, "out of stock, no lead time")


def decide_seasonal(product: ProductLike, now: datetime) -> ItemDecision:
    """Seasonal availability. Branch order matters at season boundaries."""
    start, end = product.season_start, product.season_end

    in_season = _after(now, start) and _after(end, now)
    if product.available_quantity > 0 and in_season:
        return ItemDecision(ItemAction.DECREMENT, "in season, in stock")

    restock_at = now + timedelta(days=product.lead_time_days)
    if _after(restock_at, end):
        return ItemDecision(
            ItemAction.OUT_OF_STOCK_ZEROED, "restock lands after season end",
        )

    if _after(start, now):
        return ItemDecision(ItemAction.OUT_OF_STOCK, "season not started")

    return ItemDecision(ItemAction.DELAY, "restock lands within season")


def decide_perishable(product: ProductLike, now: datetime) -> ItemDecision:
    """Perishable stock: sell while fresh, otherwise zero and report expiry."""
    if product.expiry_date is None:
        raise InvalidProductStateError(
            f"Perishable product '{product.name}' has no expiry date",
            "expiry_date",
            ErrorContext(product_id=product.id),
        )
    if product.available_quantity > 0 and _after(product.expiry_date, now):
        return ItemDecision(ItemAction.DECREMENT, "fresh, in stock")
    return ItemDecision(ItemAction.EXPIRE, "expired or exhausted")
