"""Root conftest - shared test configuration and port fakes.

Invariants:
    - Tests never reach a real PostgreSQL (DATABASE_URL forced to SQLite)
    - Time-based scenarios use FIXED_NOW through the fixed_clock fixture
    - Fakes record every port call so tests assert on outcomes, not on mocks' internals
"""

import asyncio
import itertools
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)

from fulfillment.core.errors import DatabaseError  # noqa: E402

FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@dataclass(eq=False)
class FakeProduct:
    """ProductLike with identity hashing (orders hold items in a set)."""
    id: int
    name: str
    category: str | None
    available_quantity: int = 0
    lead_time_days: int = 0
    season_start: datetime | None = None
    season_end: datetime | None = None
    expiry_date: datetime | None = None


@dataclass
class FakeOrder:
    id: int
    items: set = field(default_factory=set)


class RecordingNotifier:
    """Notifier fake: records ("delay", days, name) / ("out_of_stock", name) /
    ("expiration", name, expiry) tuples; raises after recording when fail=True."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail = False

    async def send_delay_notification(self, lead_time_days, product_name):
        self._record(("delay", lead_time_days, product_name))

    async def send_out_of_stock_notification(self, product_name):
        self._record(("out_of_stock", product_name))

    async def send_expiration_notification(self, product_name, expiry_date):
        self._record(("expiration", product_name, expiry_date))

    def of_kind(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]

    def _record(self, call: tuple) -> None:
        self.calls.append(call)
        if self.fail:
            raise RuntimeError("delivery channel down")


class InMemoryInventoryStore:
    """InventoryStore fake: writes recorded as (id, available, lead_time) snapshots."""

    def __init__(self):
        self.orders: dict[int, FakeOrder] = {}
        self.writes: list[tuple[int, int, int]] = []
        self.loads = 0
        self.fail_on_persist: int | None = None
        self.persist_delay = 0.0

    def add_order(self, order_id: int, items=()) -> FakeOrder:
        order = FakeOrder(order_id, set(items))
        self.orders[order_id] = order
        return order

    async def load_order_with_items(self, order_id):
        self.loads += 1
        await asyncio.sleep(0)
        return self.orders.get(order_id)

    async def persist_product(self, product, **changes):
        await asyncio.sleep(self.persist_delay)
        if self.fail_on_persist == product.id:
            raise DatabaseError("simulated outage", "commit")
        for attr, value in changes.items():
            setattr(product, attr, value)
        self.writes.append(
            (product.id, product.available_quantity, product.lead_time_days),
        )

    def writes_for(self, product) -> list[tuple[int, int, int]]:
        return [w for w in self.writes if w[0] == product.id]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store():
    return InMemoryInventoryStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def make_product():
    """Factory for FakeProduct with unique ids."""
    ids = itertools.count(1)

    def _make(category="standard", name=None, **fields) -> FakeProduct:
        pid = next(ids)
        return FakeProduct(
            id=pid, name=name or f"Product {pid}", category=category, **fields,
        )

    return _make
