"""Notification Service - default delivery channel: one structured log line per signal.

Invariants:
    - Implements the Notifier protocol (core/repository_protocols.py)
    - Never raises for a well-formed call; no retries, no deduplication

Design Decisions:
    - Log-based delivery as the default channel: email/SMS transports plug in
      by implementing the same three async methods
    - get_notifier() is the FastAPI dependency; tests override it with a recorder
"""

import logging
from datetime import datetime

from fulfillment.core.domain_types import NotificationKind

logger = logging.getLogger(__name__)


class LoggingNotificationService:
    """Emits delay / out-of-stock / expiration notifications to the log."""

    async def send_delay_notification(
        self, lead_time_days: int, product_name: str,
    ) -> None:
        logger.info(
            f"Delay: '{product_name}' back in stock in {lead_time_days} day(s)",
            extra={
                "notification": NotificationKind.DELAY.value,
                "product_name": product_name,
                "lead_time_days": lead_time_days,
            },
        )

    async def send_out_of_stock_notification(self, product_name: str) -> None:
        logger.info(
            f"Out of stock: '{product_name}'",
            extra={
                "notification": NotificationKind.OUT_OF_STOCK.value,
                "product_name": product_name,
            },
        )

    async def send_expiration_notification(
        self, product_name: str, expiry_date: datetime,
    ) -> None:
        logger.info(
            f"Expired: '{product_name}' (expiry {expiry_date.isoformat()})",
            extra={
                "notification": NotificationKind.EXPIRATION.value,
                "product_name": product_name,
                "expiry_date": expiry_date.isoformat(),
            },
        )


_notifier = LoggingNotificationService()


def get_notifier() -> LoggingNotificationService:
    """FastAPI dependency for the notification channel."""
    return _notifier
