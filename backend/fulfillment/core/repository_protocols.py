"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via explicit construction

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the rules in core/fulfillment_rules.py that decide what to do are never async
    - Notifier outcomes are not part of the contract (fire-and-forget)
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol

from fulfillment.core.domain_types import OrderId, ProductId


class ProductLike(Protocol):
    """Structural contract for Product objects handled by the policies.

    Avoids coupling the handlers to the ORM model while giving mypy
    real type information (unlike Any).
    """
    id: ProductId
    name: str
    category: str | None
    available_quantity: int
    lead_time_days: int
    season_start: datetime | None
    season_end: datetime | None
    expiry_date: datetime | None


class OrderLike(Protocol):
    """Structural contract for an Order loaded together with its items."""
    id: OrderId
    items: Iterable[ProductLike]


class InventoryStore(Protocol):
    """Contract for order/product persistence - implemented by shell.

    persist_product applies the given field changes and writes them in one
    step; concurrent calls must not lose each other's changes.
    """
    async def load_order_with_items(
        self, order_id: OrderId,
    ) -> OrderLike | None: ...
    async def persist_product(
        self, product: ProductLike, **changes: object,
    ) -> None: ...


class Notifier(Protocol):
    """Contract for customer/ops notifications - implemented by shell."""
    async def send_delay_notification(
        self, lead_time_days: int, product_name: str,
    ) -> None: ...
    async def send_out_of_stock_notification(self, product_name: str) -> None: ...
    async def send_expiration_notification(
        self, product_name: str, expiry_date: datetime,
    ) -> None: ...


Clock = Callable[[], datetime]
