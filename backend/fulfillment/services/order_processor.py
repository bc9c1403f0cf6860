"""Order Processor - loads an order and fans its items out to their policies.

Invariants:
    - Unknown order id → returns None, no policy invoked, no store write
    - Items without a matching policy are skipped silently (no error, no mutation)
    - One asyncio task per matched item; all joined before returning
    - First failing task cancels the rest and its exception propagates;
      writes already committed by other items are NOT rolled back
    - cancel_event observed at load, persist and notify

Design Decisions:
    - create_task + gather over TaskGroup: failures surface as the original
      exception type (DatabaseError, OperationCancelledError), not ExceptionGroup
    - Processor knows nothing about categories: PolicyDispatch owns selection
"""

import asyncio
import logging
from dataclasses import dataclass

from fulfillment.core.domain_types import OrderId, utc_now
from fulfillment.core.errors import ErrorContext
from fulfillment.core.repository_protocols import (
    Clock, InventoryStore, Notifier,
)
from fulfillment.services.cancellation import raise_if_cancelled
from fulfillment.services.handle_products import ProductHandlers
from fulfillment.services.policy_dispatch import PolicyDispatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOrderResult:
    order_id: OrderId


class OrderProcessor:
    """Top-level fulfillment entry point."""

    def __init__(self, store: InventoryStore, dispatch: PolicyDispatch):
        self.store = store
        self.dispatch = dispatch

    async def process_order(
        self, order_id: OrderId, cancel_event: asyncio.Event | None = None,
    ) -> ProcessOrderResult | None:
        """Apply every item's policy. Returns None when the order does not exist."""
        raise_if_cancelled(cancel_event, "load", ErrorContext(order_id=order_id))
        order = await self.store.load_order_with_items(order_id)
        if order is None:
            logger.info(
                f"Order {order_id} not found", extra={"order_id": order_id},
            )
            return None

        items = list(order.items)
        tasks: list[asyncio.Task] = []
        skipped = 0
        for product in items:
            policy = self.dispatch.select_policy(product)
            if policy is None:
                skipped += 1
                logger.debug(
                    f"No policy for category '{product.category}', skipping",
                    extra={"order_id": order.id, "product_id": product.id},
                )
                continue
            tasks.append(asyncio.create_task(
                policy.handle(product, cancel_event),
                name=f"order-{order.id}-product-{product.id}",
            ))

        await _join(tasks)

        logger.info(
            f"Order {order.id} processed: {len(items)} items, "
            f"{len(tasks)} handled, {skipped} skipped",
            extra={"order_id": order.id},
        )
        return ProcessOrderResult(order_id=OrderId(order.id))


async def _join(tasks: list[asyncio.Task]) -> None:
    """Wait for all tasks; on any failure cancel the stragglers and re-raise."""
    if not tasks:
        return
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def build_order_processor(
    store: InventoryStore, notifier: Notifier, clock: Clock = utc_now,
) -> OrderProcessor:
    """Explicit wiring: handlers → default dispatch → processor."""
    handlers = ProductHandlers(store, notifier, clock)
    return OrderProcessor(store, PolicyDispatch.default(handlers))
