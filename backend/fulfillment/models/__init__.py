"""ORM Models - SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Order is the aggregate read by the engine; Product carries inventory state

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves relationship() targets
      before any query runs
"""

from fulfillment.models.product import Product  # noqa: F401
from fulfillment.models.order import Order, order_items  # noqa: F401
