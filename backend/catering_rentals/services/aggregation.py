"""Assemble bookings (rental + customer + line items) from three tables.

Related rows are fetched in one batched call per table rather than one call
per rental, then joined in memory through id lookup maps.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from catering_rentals.gateway import DataGateway, Embed, desc, eq, in_
from catering_rentals.schemas.booking import BookingWithDetails
from catering_rentals.schemas.customer import CustomerResponse
from catering_rentals.schemas.rental import RentalItemResponse, RentalResponse
from catering_rentals.services.errors import MissingRowError

logger = logging.getLogger(__name__)

ITEM_NAME_EMBED = Embed("items", ("name",))


def line_item_from_row(row: Mapping[str, Any]) -> RentalItemResponse:
    """Validate a ``rental_items`` row, lifting the embedded catalog name to ``item_name``."""
    related = row.get("items") or {}
    return RentalItemResponse.model_validate({**row, "item_name": related.get("name")})


def assemble_bookings(
    rentals: Iterable[RentalResponse],
    customers: Iterable[CustomerResponse],
    line_items: Iterable[RentalItemResponse],
) -> list[BookingWithDetails]:
    """Combine rentals with their customer and items, keeping the rental order.

    Rentals whose customer is absent from ``customers`` are left out.
    """
    customers_by_id = {customer.id: customer for customer in customers}
    items_by_rental: dict[uuid.UUID, list[RentalItemResponse]] = defaultdict(list)
    for item in line_items:
        items_by_rental[item.rental_id].append(item)

    bookings = []
    for rental in rentals:
        customer = customers_by_id.get(rental.customer_id)
        if customer is None:
            logger.warning("Skipping rental %s: customer %s not found", rental.id, rental.customer_id)
            continue
        bookings.append(
            BookingWithDetails(
                **rental.model_dump(),
                customer=customer,
                items=list(items_by_rental.get(rental.id, [])),
            )
        )
    return bookings


async def load_bookings(gateway: DataGateway) -> list[BookingWithDetails]:
    """Load every booking, newest rental date first."""
    rental_rows = await gateway.select("rentals", order=[desc("rental_date")])
    if not rental_rows:
        return []

    rentals = [RentalResponse.model_validate(row) for row in rental_rows]
    customer_ids = list(dict.fromkeys(rental.customer_id for rental in rentals))
    rental_ids = [rental.id for rental in rentals]

    customer_rows, item_rows = await asyncio.gather(
        gateway.select("customers", filters=[in_("id", customer_ids)]),
        gateway.select("rental_items", filters=[in_("rental_id", rental_ids)], embed=[ITEM_NAME_EMBED]),
    )

    bookings = assemble_bookings(
        rentals,
        [CustomerResponse.model_validate(row) for row in customer_rows],
        [line_item_from_row(row) for row in item_rows],
    )
    logger.info("Loaded %d bookings (%d rentals)", len(bookings), len(rentals))
    return bookings


async def load_booking(gateway: DataGateway, rental_id: uuid.UUID) -> BookingWithDetails:
    """Load one booking.

    The rental and its items are fetched concurrently; the customer is fetched
    afterwards because its id comes from the rental row.

    Raises:
        MissingRowError: the rental or its customer does not exist.
    """
    rental_row, item_rows = await asyncio.gather(
        gateway.select_one("rentals", filters=[eq("id", rental_id)]),
        gateway.select("rental_items", filters=[eq("rental_id", rental_id)], embed=[ITEM_NAME_EMBED]),
    )
    if rental_row is None:
        raise MissingRowError("rentals", rental_id, "Booking not found")
    rental = RentalResponse.model_validate(rental_row)

    customer_row = await gateway.select_one("customers", filters=[eq("id", rental.customer_id)])
    if customer_row is None:
        raise MissingRowError("customers", rental.customer_id, "Customer not found")

    return BookingWithDetails(
        **rental.model_dump(),
        customer=CustomerResponse.model_validate(customer_row),
        items=[line_item_from_row(row) for row in item_rows],
    )
