"""Booking list view — full aggregated set, status filter, and summary counts."""

import logging
from collections.abc import Sequence

from catering_rentals.gateway import DataGateway, GatewayError
from catering_rentals.schemas.booking import (
    STATUS_LABELS,
    BookingCard,
    BookingListResponse,
    BookingWithDetails,
    StatCard,
    StatusFilter,
)
from catering_rentals.schemas.rental import RENTAL_STATUSES
from catering_rentals.services.aggregation import load_bookings
from catering_rentals.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)

STATUS_FILTERS: tuple[StatusFilter, ...] = ("all", "active", "returned", "overdue")

# Display order of the stats overview
_STATS_ORDER = ("active", "overdue", "returned")


def filter_bookings(bookings: Sequence[BookingWithDetails], status: StatusFilter) -> list[BookingWithDetails]:
    if status == "all":
        return list(bookings)
    return [booking for booking in bookings if booking.status == status]


def status_counts(bookings: Sequence[BookingWithDetails]) -> dict[str, int]:
    """Per-status counts plus ``all``, always over the unfiltered set."""
    counts = {"all": len(bookings)}
    for status in RENTAL_STATUSES:
        counts[status] = sum(1 for booking in bookings if booking.status == status)
    return counts


class BookingListView:
    """State of the booking list for one session.

    ``filtered`` and ``counts`` are computed from ``bookings`` on every read;
    nothing derived is stored.
    """

    def __init__(self, gateway: DataGateway, notifications: NotificationCenter | None = None) -> None:
        self._gateway = gateway
        self.notifications = notifications or NotificationCenter()
        self.bookings: tuple[BookingWithDetails, ...] = ()
        self.status_filter: StatusFilter = "all"

    async def reload(self) -> bool:
        """Replace the full set with a fresh aggregation. Returns False on failure."""
        try:
            self.bookings = tuple(await load_bookings(self._gateway))
        except GatewayError:
            logger.exception("Error loading bookings")
            self.notifications.error("Failed to load bookings")
            return False
        return True

    async def on_wizard_closed(self) -> bool:
        return await self.reload()

    def set_filter(self, status: StatusFilter) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"unknown status filter {status!r}")
        self.status_filter = status

    @property
    def filtered(self) -> list[BookingWithDetails]:
        return filter_bookings(self.bookings, self.status_filter)

    @property
    def counts(self) -> dict[str, int]:
        return status_counts(self.bookings)

    @property
    def stats(self) -> list[StatCard]:
        counts = self.counts
        return [StatCard(label="Total Bookings", value=counts["all"])] + [
            StatCard(label=STATUS_LABELS[status], value=counts[status]) for status in _STATS_ORDER
        ]

    def render(self) -> BookingListResponse:
        filtered = self.filtered
        empty_title = empty_hint = None
        if not filtered:
            if self.status_filter == "all":
                empty_title, empty_hint = "No Bookings Yet", "Create your first booking to get started"
            else:
                empty_title, empty_hint = f"No {self.status_filter} Bookings", "Try selecting a different filter"
        return BookingListResponse(
            status_filter=self.status_filter,
            counts=self.counts,
            stats=self.stats,
            bookings=[BookingCard.from_booking(booking) for booking in filtered],
            empty_title=empty_title,
            empty_hint=empty_hint,
            toast=self.notifications.current,
        )
