"""Single-booking editor: inline customer, quantity and status edits with a manual save."""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from catering_rentals.gateway import DataGateway, GatewayError, eq
from catering_rentals.schemas.booking import BookingWithDetails, booking_total
from catering_rentals.schemas.customer import CustomerUpdate
from catering_rentals.schemas.rental import RENTAL_STATUSES, RentalItemResponse, RentalStatus, RentalStatusUpdate
from catering_rentals.services.aggregation import load_booking
from catering_rentals.services.errors import BlockingPrompt, MissingRowError
from catering_rentals.services.notifications import NotificationCenter
from catering_rentals.services.outcome import WriteOutcome

logger = logging.getLogger(__name__)

MIN_QUANTITY = 1


class RentalEditor:
    """Edit state for one booking.

    The editable copies (customer fields, ``items``, ``status``) start from
    the loaded booking and are written back only by :meth:`save`.
    """

    def __init__(
        self,
        gateway: DataGateway,
        *,
        notifications: NotificationCenter | None = None,
        success_redirect_delay_ms: int = 1500,
        error_redirect_delay_ms: int = 2000,
    ) -> None:
        self._gateway = gateway
        self.notifications = notifications or NotificationCenter()
        self.success_redirect_delay_ms = success_redirect_delay_ms
        self.error_redirect_delay_ms = error_redirect_delay_ms

        self.booking: BookingWithDetails | None = None
        self.customer_name = ""
        self.customer_phone = ""
        self.customer_address = ""
        self.items: tuple[RentalItemResponse, ...] = ()
        self.status: RentalStatus = "active"
        self.saving = False
        self.load_error: Exception | None = None

    async def load(self, rental_id: uuid.UUID) -> bool:
        """Load the booking. On failure, notify and schedule a redirect to the list."""
        try:
            booking = await load_booking(self._gateway, rental_id)
        except MissingRowError as exc:
            self.load_error = exc
            logger.warning("Cannot edit rental %s: %s", rental_id, exc.message)
            if exc.table == "rentals":
                self.notifications.error("Booking not found")
            else:
                self.notifications.error("Failed to load booking")
            self.notifications.redirect_to("/", self.error_redirect_delay_ms)
            return False
        except GatewayError as exc:
            self.load_error = exc
            logger.exception("Error loading booking %s", rental_id)
            self.notifications.error("Failed to load booking")
            self.notifications.redirect_to("/", self.error_redirect_delay_ms)
            return False

        self.booking = booking
        self.customer_name = booking.customer.name
        self.customer_phone = booking.customer.contact_number
        self.customer_address = booking.customer.address or ""
        self.items = tuple(booking.items)
        self.status = booking.status
        return True

    # ------------------------------------------------------------------
    # Inline edits
    # ------------------------------------------------------------------

    def set_quantity(self, rental_item_id: uuid.UUID, quantity: int) -> None:
        """Set a line item's quantity, never below 1."""
        if not any(item.id == rental_item_id for item in self.items):
            raise KeyError(rental_item_id)
        quantity = max(MIN_QUANTITY, quantity)
        self.items = tuple(
            item.model_copy(update={"quantity": quantity}) if item.id == rental_item_id else item
            for item in self.items
        )

    def set_status(self, status: RentalStatus) -> None:
        if status not in RENTAL_STATUSES:
            raise ValueError(f"unknown status {status!r}")
        self.status = status

    @property
    def total_amount(self) -> Decimal:
        return booking_total(list(self.items))

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def short_id(self) -> str:
        return str(self.booking.id)[:8].upper() if self.booking else ""

    def current(self) -> BookingWithDetails | None:
        """The loaded booking with the in-memory edits applied."""
        if self.booking is None:
            return None
        customer = self.booking.customer.model_copy(
            update={
                "name": self.customer_name,
                "contact_number": self.customer_phone,
                "address": self.customer_address,
            }
        )
        return self.booking.model_copy(update={"customer": customer, "items": list(self.items), "status": self.status})

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    async def save(self) -> WriteOutcome:
        """Write customer, then rental status, then each line item's quantity.

        Writes are issued one at a time with no rollback; a failure leaves the
        earlier writes committed and reports the failed step.
        """
        if self.booking is None:
            raise RuntimeError("no booking loaded")
        if self.saving:
            raise BlockingPrompt("Changes are already being saved")
        booking = self.booking
        now = datetime.now(timezone.utc)

        self.saving = True
        step = "update_customer"
        try:
            customer = CustomerUpdate(
                name=self.customer_name,
                contact_number=self.customer_phone,
                address=self.customer_address,
                updated_at=now,
            )
            await self._gateway.update(
                "customers", customer.model_dump(mode="json"), filters=[eq("id", booking.customer_id)]
            )

            step = "update_rental"
            rental = RentalStatusUpdate(status=self.status, updated_at=now)
            await self._gateway.update("rentals", rental.model_dump(mode="json"), filters=[eq("id", booking.id)])

            for item in self.items:
                step = f"update_rental_item:{item.id}"
                await self._gateway.update("rental_items", {"quantity": item.quantity}, filters=[eq("id", item.id)])
        except GatewayError as exc:
            logger.exception("Error saving booking %s at step %s", booking.id, step)
            self.notifications.error("Failed to save changes")
            return WriteOutcome(ok=False, rental_id=booking.id, failed_step=step, error=exc.message)
        finally:
            self.saving = False

        logger.info("Saved booking %s (status=%s, %d line items)", booking.id, self.status, len(self.items))
        self.notifications.success("Changes saved successfully! 🎉")
        self.notifications.redirect_to("/", self.success_redirect_delay_ms)
        return WriteOutcome(ok=True, rental_id=booking.id)
