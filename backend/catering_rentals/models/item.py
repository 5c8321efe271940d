"""Catalog item model — tables, chairs, plates and other rentable equipment."""

from decimal import Decimal

from sqlalchemy import Boolean, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from catering_rentals.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Item(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable catalog item.

    ``price`` is the current catalog price. Bookings snapshot it into
    ``rental_items.price_at_booking`` so later price changes never alter
    existing orders. Items are deactivated via ``is_active``, never deleted.
    """

    __tablename__ = "items"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name!r}, price={self.price})>"
