"""Rental line item model."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering_rentals.database import Base, UUIDPrimaryKeyMixin


class RentalItem(UUIDPrimaryKeyMixin, Base):
    """Quantity of one catalog item on one rental, priced at booking time."""

    __tablename__ = "rental_items"

    rental_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rentals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("items.id"),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_at_booking: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    rental: Mapped["Rental"] = relationship(back_populates="items")  # type: ignore[name-defined]  # noqa: F821
    item: Mapped["Item"] = relationship()  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_rental_items_quantity"),)

    def __repr__(self) -> str:
        return f"<RentalItem(id={self.id}, rental_id={self.rental_id}, item_id={self.item_id}, quantity={self.quantity})>"
