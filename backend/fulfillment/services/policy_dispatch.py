"""Policy Dispatch - explicit routing from a product's category tag to its policy.

Invariants:
    - Policies are consulted in registration order; the first match wins
    - Category matching is case-insensitive exact comparison
    - Unknown categories return None (never raises) - the item is skipped

Design Decisions:
    - Registry of (category, handler) pairs over a class per category:
      every mapping visible in one place
    - Adding a category means registering one more ProductPolicy; neither this
      class nor OrderProcessor changes
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from fulfillment.core.domain_types import ProductCategory
from fulfillment.core.fulfillment_rules import matches_category
from fulfillment.core.repository_protocols import ProductLike
from fulfillment.services.handle_products import ProductHandlers

PolicyHandler = Callable[[ProductLike, asyncio.Event | None], Awaitable[None]]


@dataclass(frozen=True)
class ProductPolicy:
    """One category tag (a ProductCategory or any custom tag) bound to its handler."""
    category: str
    handler: PolicyHandler

    def can_handle(self, product: ProductLike) -> bool:
        return matches_category(product, self.category)

    async def handle(
        self, product: ProductLike, cancel_event: asyncio.Event | None = None,
    ) -> None:
        await self.handler(product, cancel_event)


class PolicyDispatch:
    """Selects the single applicable policy for a product."""

    def __init__(self, policies: Iterable[ProductPolicy]):
        self._policies: tuple[ProductPolicy, ...] = tuple(policies)

    @classmethod
    def default(cls, handlers: ProductHandlers) -> "PolicyDispatch":
        return cls([
            ProductPolicy(ProductCategory.STANDARD, handlers.handle_standard),
            ProductPolicy(ProductCategory.SEASONAL, handlers.handle_seasonal),
            ProductPolicy(ProductCategory.PERISHABLE, handlers.handle_perishable),
        ])

    @property
    def policies(self) -> tuple[ProductPolicy, ...]:
        return self._policies

    def select_policy(self, product: ProductLike) -> ProductPolicy | None:
        for policy in self._policies:
            if policy.can_handle(product):
                return policy
        return None
