"""Order ORM - a purchase request referencing a set of products.

Invariants:
    - items is a set: a product appears at most once per order (composite PK)
    - Orders and products are created outside the engine; the engine only reads
      orders and never deletes either side

Design Decisions:
    - Many-to-many through order_items: the same product row is shared by
      every order that contains it, so inventory writes hit one row
    - lazy="selectin" + explicit selectinload in the store: no lazy IO in async code
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fulfillment.db.base import Base
from fulfillment.models.product import Product

order_items = Table(
    "order_items",
    Base.metadata,
    Column(
        "order_id", Integer,
        ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "product_id", Integer,
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items: Mapped[set[Product]] = relationship(
        Product, secondary=order_items, collection_class=set, lazy="selectin",
    )
