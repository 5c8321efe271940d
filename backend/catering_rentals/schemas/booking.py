"""Pydantic v2 schemas for booking views and workflows.

A *booking* is a rental together with its customer and line items. It is
assembled in memory from three tables and never stored as such.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from catering_rentals.schemas.customer import CustomerResponse
from catering_rentals.schemas.notification import Redirect, Toast
from catering_rentals.schemas.rental import RentalItemResponse, RentalResponse, RentalStatus

StatusFilter = Literal["all", "active", "returned", "overdue"]

STATUS_LABELS: dict[str, str] = {
    "active": "Active",
    "returned": "Returned",
    "overdue": "Overdue",
}


def booking_total(items: list[RentalItemResponse]) -> Decimal:
    """Sum of quantity x price_at_booking over ``items``."""
    return sum((item.quantity * item.price_at_booking for item in items), Decimal("0"))


class BookingWithDetails(RentalResponse):
    """Rental row plus its owning customer and line items."""

    customer: CustomerResponse
    items: list[RentalItemResponse] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> Decimal:
        return booking_total(self.items)


# ---------------------------------------------------------------------------
# List view
# ---------------------------------------------------------------------------


class BookingCard(BaseModel):
    """Compact summary row for the booking list."""

    id: uuid.UUID
    status: RentalStatus
    status_label: str
    customer_name: str
    rental_date: date
    rental_date_display: str
    total_amount: Decimal
    edit_url: str

    @classmethod
    def from_booking(cls, booking: BookingWithDetails) -> "BookingCard":
        return cls(
            id=booking.id,
            status=booking.status,
            status_label=STATUS_LABELS[booking.status],
            customer_name=booking.customer.name,
            rental_date=booking.rental_date,
            rental_date_display=f"{booking.rental_date:%b} {booking.rental_date.day}, {booking.rental_date.year}",
            total_amount=booking.total_amount,
            edit_url=f"/rental/{booking.id}/edit",
        )


class StatCard(BaseModel):
    label: str
    value: int


class BookingListResponse(BaseModel):
    """Filtered booking cards plus counts over the full, unfiltered set."""

    status_filter: StatusFilter
    counts: dict[str, int]
    stats: list[StatCard]
    bookings: list[BookingCard]
    empty_title: str | None = None
    empty_hint: str | None = None
    toast: Toast | None = None


# ---------------------------------------------------------------------------
# Booking wizard
# ---------------------------------------------------------------------------


class SelectedItemRequest(BaseModel):
    item_id: uuid.UUID
    quantity: int = Field(..., ge=0)


class BookingSubmitRequest(BaseModel):
    """Both wizard steps in one body: customer info, then item quantities.

    Step-1 fields left unset keep the wizard's current value (today's date
    for a new booking, the stored value when editing).
    """

    customer_mode: Literal["new", "existing"] = "new"
    existing_customer_id: uuid.UUID | None = None
    customer_name: str | None = None
    contact_number: str | None = None
    address: str | None = None
    rental_date: date | None = None
    return_date: date | None = None
    notes: str | None = None
    items: list[SelectedItemRequest] = []


class WriteResultResponse(BaseModel):
    """Outcome of a multi-step write."""

    ok: bool
    rental_id: uuid.UUID | None = None
    failed_step: str | None = None
    toast: Toast | None = None
    redirect: Redirect | None = None


# ---------------------------------------------------------------------------
# Single-booking editor
# ---------------------------------------------------------------------------


class RentalEditRequest(BaseModel):
    """Inline edits applied before saving; quantities keyed by line-item id."""

    customer_name: str
    customer_phone: str
    customer_address: str = ""
    status: RentalStatus
    quantities: dict[uuid.UUID, int] = {}


class RentalEditorResponse(BaseModel):
    booking: BookingWithDetails
    short_id: str
    item_count: int
    unit_count: int
    total_amount: Decimal
    toast: Toast | None = None
    redirect: Redirect | None = None
