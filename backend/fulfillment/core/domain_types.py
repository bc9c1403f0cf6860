"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - OrderId, ProductId wrap ints - never use bare int ids in domain logic
    - All valid categories and notification kinds encoded as Enums
    - Every timestamp compared by the core is tz-aware UTC (ensure_utc)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: category tags serialize to JSON and compare against raw DB values
"""

from datetime import datetime, timezone
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

OrderId = NewType("OrderId", int)
ProductId = NewType("ProductId", int)


# ─── Enums ───────────────────────────────────────────────────────

class ProductCategory(str, Enum):
    """Category tags that select an inventory policy (case-insensitive match)."""
    STANDARD = "standard"
    SEASONAL = "seasonal"
    PERISHABLE = "perishable"


class NotificationKind(str, Enum):
    """The three signals a policy can emit."""
    DELAY = "delay"
    OUT_OF_STOCK = "out_of_stock"
    EXPIRATION = "expiration"


# ─── Time ────────────────────────────────────────────────────────

def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on read)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
