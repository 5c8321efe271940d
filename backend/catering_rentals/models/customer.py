"""Customer domain model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering_rentals.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Customer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Customer model — people and businesses who rent equipment."""

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_number: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    rentals: Mapped[list["Rental"]] = relationship(back_populates="customer")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name!r})>"
