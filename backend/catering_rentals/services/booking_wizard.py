"""Two-step booking wizard: customer information, then item selection.

The wizard runs in *create* mode for new bookings and in *edit* mode when
opened with an existing booking. Step 1 collects customer and schedule
fields; step 2 is an :class:`ItemQuantityPicker`. Submitting writes through
the data gateway one table at a time:

- create: customer (only when new) -> rental -> line items
- edit: customer -> rental -> delete all line items -> insert line items

There is no rollback. If a step fails, earlier steps stay committed and the
outcome names the failed step.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from catering_rentals.gateway import DataGateway, GatewayError, eq
from catering_rentals.schemas.booking import BookingWithDetails
from catering_rentals.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from catering_rentals.schemas.item import ItemResponse
from catering_rentals.schemas.rental import RentalCreate, RentalItemCreate, RentalUpdate
from catering_rentals.services.catalog import load_catalog, load_customers
from catering_rentals.services.errors import BlockingPrompt
from catering_rentals.services.item_picker import ItemQuantityPicker, SelectedItem
from catering_rentals.services.notifications import NotificationCenter
from catering_rentals.services.outcome import WriteOutcome

logger = logging.getLogger(__name__)

WizardStep = Literal["customer", "items"]

CUSTOMER_FIELDS = ("customer_name", "contact_number", "address")
TRACKED_FIELDS = (*CUSTOMER_FIELDS, "rental_date", "return_date", "notes")

UNKNOWN_ITEM_NAME = "Unknown Item"


class CustomerInfo(BaseModel):
    """Step-1 form values."""

    model_config = ConfigDict(frozen=True)

    customer_name: str = ""
    contact_number: str = ""
    address: str = ""
    rental_date: date = Field(default_factory=date.today)
    return_date: date | None = None
    notes: str = ""

    @classmethod
    def from_booking(cls, booking: BookingWithDetails) -> CustomerInfo:
        return cls(
            customer_name=booking.customer.name,
            contact_number=booking.customer.contact_number,
            address=booking.customer.address or "",
            rental_date=booking.rental_date,
            return_date=booking.return_date,
            notes=booking.notes or "",
        )


class BookingWizard:
    """State machine for creating or editing one booking."""

    def __init__(
        self,
        gateway: DataGateway,
        *,
        catalog: Sequence[ItemResponse] = (),
        customers: Sequence[CustomerResponse] = (),
        editing: BookingWithDetails | None = None,
        notifications: NotificationCenter | None = None,
        success_redirect_delay_ms: int = 1500,
    ) -> None:
        self._gateway = gateway
        self.notifications = notifications or NotificationCenter()
        self.success_redirect_delay_ms = success_redirect_delay_ms
        self.customers: tuple[CustomerResponse, ...] = tuple(customers)
        self.editing = editing

        self.step: WizardStep = "customer"
        self.is_new_customer = True
        self.selected_customer_id: uuid.UUID | None = None
        self.submitting = False
        self.closed = False

        initial_items: list[SelectedItem] = []
        if editing is not None:
            self.initial_info = CustomerInfo.from_booking(editing)
            initial_items = [
                SelectedItem(
                    item_id=item.item_id,
                    name=item.item_name or UNKNOWN_ITEM_NAME,
                    price=item.price_at_booking,
                    quantity=item.quantity,
                )
                for item in editing.items
            ]
        else:
            self.initial_info = CustomerInfo()
        self.info = self.initial_info
        self.picker = ItemQuantityPicker(catalog, initial_items)

    @classmethod
    async def open(
        cls,
        gateway: DataGateway,
        *,
        editing: BookingWithDetails | None = None,
        notifications: NotificationCenter | None = None,
        success_redirect_delay_ms: int = 1500,
    ) -> BookingWizard:
        """Load customers and the active catalog, then build the wizard.

        A failed lookup leaves that list empty and shows an error toast.
        """
        notifications = notifications or NotificationCenter()
        customers, catalog = await asyncio.gather(
            load_customers(gateway),
            load_catalog(gateway),
            return_exceptions=True,
        )
        if isinstance(customers, GatewayError):
            logger.error("Error loading customers: %s", customers)
            notifications.error("Failed to load customers")
            customers = []
        if isinstance(catalog, GatewayError):
            logger.error("Error loading items: %s", catalog)
            notifications.error("Failed to load items")
            catalog = []
        for result in (customers, catalog):
            if isinstance(result, BaseException):
                raise result
        return cls(
            gateway,
            catalog=catalog,
            customers=customers,
            editing=editing,
            notifications=notifications,
            success_redirect_delay_ms=success_redirect_delay_ms,
        )

    @property
    def is_edit_mode(self) -> bool:
        return self.editing is not None

    # ------------------------------------------------------------------
    # Step 1: customer information
    # ------------------------------------------------------------------

    def update(self, **changes: object) -> None:
        """Change step-1 fields.

        Customer fields are read-only while an existing customer is selected.
        """
        unknown = set(changes) - set(TRACKED_FIELDS)
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(sorted(unknown))}")
        if not self.is_new_customer and set(changes) & set(CUSTOMER_FIELDS):
            raise BlockingPrompt("Customer details of an existing customer are read-only")
        self.info = CustomerInfo.model_validate({**self.info.model_dump(), **changes})

    @property
    def modified_fields(self) -> frozenset[str]:
        """Fields that differ from their value when the wizard opened (edit mode only)."""
        if not self.is_edit_mode:
            return frozenset()
        return frozenset(
            field for field in TRACKED_FIELDS if getattr(self.info, field) != getattr(self.initial_info, field)
        )

    def use_new_customer(self) -> None:
        self.is_new_customer = True
        self.selected_customer_id = None
        self.info = self.info.model_copy(
            update={field: getattr(self.initial_info, field) for field in CUSTOMER_FIELDS}
        )

    def use_existing_customer(self) -> None:
        self.is_new_customer = False

    def select_customer(self, customer_id: uuid.UUID) -> None:
        """Pick an existing customer and copy their details into the form."""
        customer = next((c for c in self.customers if c.id == customer_id), None)
        if customer is None:
            raise KeyError(customer_id)
        self.is_new_customer = False
        self.selected_customer_id = customer_id
        self.info = self.info.model_copy(
            update={
                "customer_name": customer.name,
                "contact_number": customer.contact_number,
                "address": customer.address or "",
            }
        )

    def advance(self) -> None:
        """Validate step 1 and move to item selection."""
        if self.is_new_customer:
            if not all(getattr(self.info, field).strip() for field in CUSTOMER_FIELDS):
                raise BlockingPrompt("Please fill in all required fields")
        elif self.selected_customer_id is None:
            raise BlockingPrompt("Please select a customer")
        self.step = "items"

    def back(self) -> None:
        self.step = "customer"

    def cancel(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Step 2: submit
    # ------------------------------------------------------------------

    def _line_items(self, rental_id: uuid.UUID) -> list[dict]:
        return [
            RentalItemCreate(
                rental_id=rental_id,
                item_id=selected.item_id,
                quantity=selected.quantity,
                price_at_booking=selected.price,
            ).model_dump(mode="json")
            for selected in self.picker.selected_items
        ]

    def _customer_fields(self) -> dict:
        return {
            "name": self.info.customer_name.strip(),
            "contact_number": self.info.contact_number.strip(),
            "address": self.info.address.strip() or None,
        }

    async def submit(self) -> WriteOutcome:
        """Write the booking. Validation failures raise :class:`BlockingPrompt`.

        A wizard accepts one submit at a time and none after it has closed.
        """
        if self.closed:
            raise BlockingPrompt("This booking form is already closed")
        if self.submitting:
            raise BlockingPrompt("Booking is already being submitted")
        if self.step != "items":
            raise BlockingPrompt("Please complete the customer information first")
        if self.picker.total_quantity <= 0:
            raise BlockingPrompt("Please select at least one item")

        self.submitting = True
        try:
            if self.editing is not None:
                outcome = await self._submit_edit(self.editing)
            else:
                outcome = await self._submit_create()
        finally:
            self.submitting = False

        if outcome.ok:
            self.notifications.success(
                "Booking updated successfully! 🎉" if self.is_edit_mode else "Order successfully placed! 🎉"
            )
            self.notifications.redirect_to("/", self.success_redirect_delay_ms)
            self.closed = True
        else:
            verb = "update" if self.is_edit_mode else "create"
            self.notifications.error(f"Failed to {verb} booking: {outcome.error}")
        return outcome

    async def _submit_create(self) -> WriteOutcome:
        step = "insert_customer"
        rental_id: uuid.UUID | None = None
        try:
            customer_id = None if self.is_new_customer else self.selected_customer_id
            if customer_id is None:
                payload = CustomerCreate(**self._customer_fields()).model_dump(mode="json")
                rows = await self._gateway.insert("customers", payload)
                if not rows:
                    return WriteOutcome(ok=False, failed_step=step, error="Failed to create customer")
                customer_id = uuid.UUID(str(rows[0]["id"]))
                logger.info("Created customer %s", customer_id)

            step = "insert_rental"
            rental = RentalCreate(
                customer_id=customer_id,
                rental_date=self.info.rental_date,
                return_date=self.info.return_date,
                status="active",
                notes=self.info.notes or None,
            )
            rows = await self._gateway.insert("rentals", rental.model_dump(mode="json"))
            if not rows:
                return WriteOutcome(ok=False, failed_step=step, error="Failed to create rental")
            rental_id = uuid.UUID(str(rows[0]["id"]))
            logger.info("Created rental %s for customer %s", rental_id, customer_id)

            step = "insert_rental_items"
            await self._gateway.insert("rental_items", self._line_items(rental_id))
        except GatewayError as exc:
            logger.exception("Error creating booking at step %s", step)
            return WriteOutcome(ok=False, rental_id=rental_id, failed_step=step, error=exc.message)

        return WriteOutcome(ok=True, rental_id=rental_id)

    async def _submit_edit(self, booking: BookingWithDetails) -> WriteOutcome:
        now = datetime.now(timezone.utc)
        step = "update_customer"
        try:
            customer = CustomerUpdate(**self._customer_fields())
            await self._gateway.update(
                "customers",
                customer.model_dump(mode="json", exclude={"updated_at"}),
                filters=[eq("id", booking.customer_id)],
            )

            step = "update_rental"
            rental = RentalUpdate(
                rental_date=self.info.rental_date,
                return_date=self.info.return_date,
                notes=self.info.notes or None,
                updated_at=now,
            )
            await self._gateway.update("rentals", rental.model_dump(mode="json"), filters=[eq("id", booking.id)])

            step = "delete_rental_items"
            await self._gateway.delete("rental_items", filters=[eq("rental_id", booking.id)])

            step = "insert_rental_items"
            await self._gateway.insert("rental_items", self._line_items(booking.id))
        except GatewayError as exc:
            logger.exception("Error updating booking %s at step %s", booking.id, step)
            return WriteOutcome(ok=False, rental_id=booking.id, failed_step=step, error=exc.message)

        logger.info("Updated booking %s (%d line items)", booking.id, len(self.picker.selected_items))
        return WriteOutcome(ok=True, rental_id=booking.id)
