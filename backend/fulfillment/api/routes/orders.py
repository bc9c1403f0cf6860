"""Order Routes - HTTP entry point for order fulfillment.

Invariants:
    - POST /orders/{order_id}/processOrder → 200 {"id": order_id} | 404 empty body
    - Route holds no business logic: builds the processor and maps the result
    - One InventoryStore per request, bound to the request's AsyncSession
    - A client disconnect sets the request's cancel_event; the processor's
      checkpoints then abort with OperationCancelledError (499)

Design Decisions:
    - Not-found is a None result from the processor, mapped here to a bare 404
      (no error envelope: nothing failed)
    - get_order_processor is its own dependency so tests can swap the whole engine
    - Disconnect detected by polling request.is_disconnected(): a plain POST
      has no stream to notice the client leaving
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fulfillment.core.domain_types import OrderId
from fulfillment.core.repository_protocols import Notifier
from fulfillment.infrastructure.database import get_db
from fulfillment.infrastructure.inventory_store import SqlAlchemyInventoryStore
from fulfillment.schemas.order import ProcessOrderResponse
from fulfillment.services.notification_service import get_notifier
from fulfillment.services.order_processor import OrderProcessor, build_order_processor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])

DISCONNECT_POLL_SECONDS = 0.1


def get_order_processor(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> OrderProcessor:
    """Per-request wiring of store, notifier and policies."""
    return build_order_processor(SqlAlchemyInventoryStore(db), notifier)


async def watch_disconnect(
    request: Request,
    cancel_event: asyncio.Event,
    interval: float = DISCONNECT_POLL_SECONDS,
) -> None:
    """Set cancel_event as soon as the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info(
                f"Client disconnected from {request.url.path}, cancelling",
                extra={"path": request.url.path},
            )
            cancel_event.set()
            return
        await asyncio.sleep(interval)


@router.post(
    "/{order_id}/processOrder",
    response_model=ProcessOrderResponse,
    responses={404: {"description": "Order not found"}},
)
async def process_order(
    order_id: int,
    request: Request,
    processor: OrderProcessor = Depends(get_order_processor),
):
    """Apply inventory policies to every item of the order."""
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel_event))
    try:
        result = await processor.process_order(OrderId(order_id), cancel_event)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
    if result is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return ProcessOrderResponse(id=result.order_id)
