"""Pydantic v2 schemas for rentals and their line items."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

RentalStatus = Literal["active", "returned", "overdue"]

RENTAL_STATUSES: tuple[RentalStatus, ...] = ("active", "returned", "overdue")

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RentalCreate(BaseModel):
    """Payload inserted into ``rentals``; new bookings always start active."""

    customer_id: uuid.UUID
    rental_date: date
    return_date: date | None = None
    status: RentalStatus = "active"
    notes: str | None = None


class RentalUpdate(BaseModel):
    """Full rewrite of a rental's schedule and notes."""

    rental_date: date
    return_date: date | None = None
    notes: str | None = None
    updated_at: datetime


class RentalStatusUpdate(BaseModel):
    status: RentalStatus
    updated_at: datetime


class RentalItemCreate(BaseModel):
    """One line item; ``price_at_booking`` snapshots the catalog price."""

    rental_id: uuid.UUID
    item_id: uuid.UUID
    quantity: int = Field(..., ge=1)
    price_at_booking: Decimal = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RentalResponse(BaseModel):
    """A stored rental row."""

    id: uuid.UUID
    customer_id: uuid.UUID
    rental_date: date
    return_date: date | None = None
    status: RentalStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RentalItemResponse(BaseModel):
    """A stored line item, with the catalog name resolved at read time."""

    id: uuid.UUID
    rental_id: uuid.UUID
    item_id: uuid.UUID
    quantity: int
    price_at_booking: Decimal
    created_at: datetime
    item_name: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.price_at_booking
