"""Product Handlers - apply category decisions to one product: mutate, persist, notify.

Invariants:
    - Decisions come from core/fulfillment_rules.py; this module never re-derives them
    - The clock is read exactly once per handled product
    - Every mutation is handed to the store as changes and applied there,
      under its writer lock; handlers never set product fields themselves
    - A cancelled item leaves its product untouched
    - available_quantity never drops below 0
    - notify_delay persists BEFORE notifying; out-of-stock and expiration
      notifications are emitted BEFORE the write
    - Persist and notify are cancellation checkpoints
    - Notifier failures are logged and ignored (fire-and-forget)

Design Decisions:
    - One class, one method per category: mirrors the three policies one-to-one,
      dispatch table lives in policy_dispatch.py
    - cancel_event passed per call, not per instance: one ProductHandlers can
      serve several process_order calls
    - DatabaseError from the store propagates untouched: store failure is fatal
      for the whole order
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from fulfillment.core.domain_types import NotificationKind, utc_now
from fulfillment.core.errors import ErrorContext
from fulfillment.core.fulfillment_rules import (
    ItemAction, ItemDecision,
    decide_perishable, decide_seasonal, decide_standard,
)
from fulfillment.core.repository_protocols import (
    Clock, InventoryStore, Notifier, ProductLike,
)
from fulfillment.services.cancellation import raise_if_cancelled

logger = logging.getLogger(__name__)


class ProductHandlers:
    """Inventory policy handlers for standard, seasonal and perishable products."""

    def __init__(
        self, store: InventoryStore, notifier: Notifier, clock: Clock = utc_now,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock

    # ─── Shared delay procedure ──────────────────────────────────

    async def notify_delay(
        self, lead_time_days: int, product: ProductLike,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Record the lead time, persist, then emit a delay notification.

        Not deduplicated: every call emits a new notification even when the
        lead time is unchanged.
        """
        name = product.name
        await self._persist(product, cancel_event, lead_time_days=lead_time_days)
        await self._notify(
            NotificationKind.DELAY, product, cancel_event,
            self.notifier.send_delay_notification, lead_time_days, name,
        )

    # ─── Policies ────────────────────────────────────────────────

    async def handle_standard(
        self, product: ProductLike, cancel_event: asyncio.Event | None = None,
    ) -> None:
        await self._apply(product, decide_standard(product), cancel_event)

    async def handle_seasonal(
        self, product: ProductLike, cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Seasonal availability, evaluated against a single clock read."""
        now = self.clock()
        await self._apply(product, decide_seasonal(product, now), cancel_event)

    async def handle_perishable(
        self, product: ProductLike, cancel_event: asyncio.Event | None = None,
    ) -> None:
        now = self.clock()
        await self._apply(product, decide_perishable(product, now), cancel_event)

    # ─── Shell ───────────────────────────────────────────────────

    async def _apply(
        self, product: ProductLike, decision: ItemDecision,
        cancel_event: asyncio.Event | None,
    ) -> None:
        logger.debug(
            f"Product {product.id}: {decision.action.value} ({decision.reason})",
            extra={"product_id": product.id, "category": product.category},
        )
        action = decision.action

        if action is ItemAction.DECREMENT:
            await self._persist(
                product, cancel_event,
                available_quantity=max(product.available_quantity - 1, 0),
            )
        elif action is ItemAction.DELAY:
            await self.notify_delay(product.lead_time_days, product, cancel_event)
        elif action is ItemAction.OUT_OF_STOCK_ZEROED:
            await self._notify(
                NotificationKind.OUT_OF_STOCK, product, cancel_event,
                self.notifier.send_out_of_stock_notification, product.name,
            )
            await self._persist(product, cancel_event, available_quantity=0)
        elif action is ItemAction.OUT_OF_STOCK:
            await self._notify(
                NotificationKind.OUT_OF_STOCK, product, cancel_event,
                self.notifier.send_out_of_stock_notification, product.name,
            )
            await self._persist(product, cancel_event)
        elif action is ItemAction.EXPIRE:
            await self._notify(
                NotificationKind.EXPIRATION, product, cancel_event,
                self.notifier.send_expiration_notification,
                product.name, product.expiry_date,
            )
            await self._persist(product, cancel_event, available_quantity=0)

    async def _persist(
        self, product: ProductLike, cancel_event: asyncio.Event | None,
        **changes: object,
    ) -> None:
        raise_if_cancelled(
            cancel_event, "persist", ErrorContext(product_id=product.id),
        )
        await self.store.persist_product(product, **changes)

    async def _notify(
        self,
        kind: NotificationKind,
        product: ProductLike,
        cancel_event: asyncio.Event | None,
        send: Callable[..., Awaitable[None]],
        *args: object,
    ) -> None:
        raise_if_cancelled(
            cancel_event, "notify", ErrorContext(product_id=product.id),
        )
        try:
            await send(*args)
        except Exception as e:
            logger.warning(
                f"{kind.value} notification for '{product.name}' failed: {e}",
                extra={"product_id": product.id, "notification": kind.value},
                exc_info=True,
            )
