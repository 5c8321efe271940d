"""Rental model — the root aggregate of a booking."""

import uuid
from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering_rentals.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Rental(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A booking of catalog items by one customer."""

    __tablename__ = "rentals"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id"),
        nullable=False,
        index=True,
    )
    rental_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[date | None] = mapped_column(Date, default=None)
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        index=True,
    )  # active, returned, overdue
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    customer: Mapped["Customer"] = relationship(back_populates="rentals")  # type: ignore[name-defined]  # noqa: F821
    items: Mapped[list["RentalItem"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="rental", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'returned', 'overdue')", name="ck_rentals_status"),
        Index("ix_rentals_rental_date", "rental_date"),
    )

    def __repr__(self) -> str:
        return f"<Rental(id={self.id}, customer_id={self.customer_id}, status={self.status})>"
