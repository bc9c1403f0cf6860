"""Cooperative cancellation checkpoint shared by processor and handlers."""

import asyncio

from fulfillment.core.errors import ErrorContext, OperationCancelledError


def raise_if_cancelled(
    cancel_event: asyncio.Event | None, stage: str,
    context: ErrorContext | None = None,
) -> None:
    """Raise OperationCancelledError when the caller has set the event."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(stage, context)
