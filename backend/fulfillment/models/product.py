"""Product ORM - a sellable item and its mutable inventory state.

Invariants:
    - id is an autoincrement integer assigned by the store
    - available_quantity is the only column the fulfillment engine writes
      (plus lead_time_days through the delay procedure)
    - available_quantity >= 0 and lead_time_days >= 0 enforced by CHECK constraints
    - season_start/season_end only meaningful for seasonal, expiry_date for perishable

Design Decisions:
    - category stored as free text, not an Enum column: unknown tags are legal
      and are skipped by the dispatcher
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fulfillment.db.base import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(
            "available_quantity >= 0", name="ck_products_available_non_negative",
        ),
        CheckConstraint(
            "lead_time_days >= 0", name="ck_products_lead_time_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    available_quantity: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    lead_time_days: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    season_start: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    season_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    expiry_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"Product(id={self.id!r}, name={self.name!r}, "
            f"category={self.category!r}, available={self.available_quantity!r})"
        )
