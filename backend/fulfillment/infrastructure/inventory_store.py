"""Inventory Store - SQLAlchemy implementation of the InventoryStore protocol.

Invariants:
    - One store per request, wrapping that request's AsyncSession
    - All writes go through a single asyncio.Lock: the shared AsyncSession is
      never flushed/committed by two item tasks at once (single writer)
    - Product fields are mutated only under that lock (persist_product(**changes)),
      so no change can land inside another task's flush and be dropped
    - Each persist_product call commits independently: a later failure or
      cancellation does not roll back earlier items
    - Every SQLAlchemyError is rolled back and re-raised as DatabaseError
    - Requires a session created with expire_on_commit=False

Design Decisions:
    - Serialized writer over a session per item: policy evaluation and
      notifications still run concurrently, only the write path is queued
    - Order and items loaded in one round-trip (selectinload) before fan-out,
      so item tasks never read through the session
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fulfillment.core.domain_types import OrderId
from fulfillment.core.errors import DatabaseError, ErrorContext
from fulfillment.models.order import Order
from fulfillment.models.product import Product

logger = logging.getLogger(__name__)


class SqlAlchemyInventoryStore:
    """Loads orders with their items and persists product mutations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._write_lock = asyncio.Lock()

    async def load_order_with_items(self, order_id: OrderId) -> Order | None:
        try:
            result = await self.db.execute(
                select(Order)
                .options(selectinload(Order.items))
                .where(Order.id == order_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to load order {order_id}: {e}",
                extra={"order_id": order_id, "error_code": "DATABASE_ERROR"},
            )
            raise DatabaseError(
                "Could not load order", "load", ErrorContext(order_id=order_id),
            ) from e

    async def persist_product(self, product: Product, **changes: object) -> None:
        """Apply changes to the product and commit them, one writer at a time.

        Field changes are set only while the writer lock is held, so a
        concurrent commit never flushes them half-applied.
        """
        product_id = product.id
        async with self._write_lock:
            try:
                for attr, value in changes.items():
                    setattr(product, attr, value)
                self.db.add(product)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    f"Failed to persist product {product_id}: {e}",
                    extra={"product_id": product_id, "error_code": "DATABASE_ERROR"},
                )
                raise DatabaseError(
                    "Could not save product", "commit",
                    ErrorContext(product_id=product_id),
                ) from e
