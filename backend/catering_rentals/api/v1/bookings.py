"""Booking wizard API router.

Each request replays the wizard server-side: step-1 fields are applied and
validated, item quantities are confirmed through the quantity picker, then
the wizard submits. Validation failures surface as 422 blocking prompts.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from catering_rentals.api.deps import get_gateway, get_notifications, get_settings
from catering_rentals.config import Settings
from catering_rentals.gateway import DataGateway, GatewayError
from catering_rentals.schemas.booking import BookingSubmitRequest, SelectedItemRequest, WriteResultResponse
from catering_rentals.services.aggregation import load_booking
from catering_rentals.services.booking_wizard import CUSTOMER_FIELDS, TRACKED_FIELDS, BookingWizard
from catering_rentals.services.errors import MissingRowError
from catering_rentals.services.notifications import NotificationCenter

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _apply_customer_step(wizard: BookingWizard, body: BookingSubmitRequest) -> None:
    provided = body.model_dump(exclude_unset=True, include=set(TRACKED_FIELDS))
    changes = {
        field: ("" if value is None and field != "return_date" else value)
        for field, value in provided.items()
        if not (field == "rental_date" and value is None)
    }

    if body.customer_mode == "existing":
        wizard.use_existing_customer()
        if body.existing_customer_id is not None:
            try:
                wizard.select_customer(body.existing_customer_id)
            except KeyError:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Customer not found",
                )
        changes = {field: value for field, value in changes.items() if field not in CUSTOMER_FIELDS}

    wizard.update(**changes)
    wizard.advance()


def _apply_items(wizard: BookingWizard, items: list[SelectedItemRequest]) -> None:
    """Make the picker selection match ``items``.

    Items already selected at the requested quantity keep their recorded
    price; anything else is confirmed at the current catalog price.
    """
    picker = wizard.picker
    requested: dict[uuid.UUID, int] = {}
    for item in items:
        requested[item.item_id] = item.quantity

    for item_id in list(picker.selection):
        if item_id not in requested:
            picker.remove(item_id)

    for item_id, quantity in requested.items():
        if picker.quantity_of(item_id) == quantity:
            continue
        if quantity == 0:
            picker.remove(item_id)
            continue
        try:
            picker.choose(item_id, quantity)
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Item {item_id} is not in the active catalog",
            )


async def _submit(wizard: BookingWizard, notifications: NotificationCenter, success_status: int):
    outcome = await wizard.submit()
    result = WriteResultResponse(
        ok=outcome.ok,
        rental_id=outcome.rental_id,
        failed_step=outcome.failed_step,
        toast=notifications.current,
        redirect=notifications.redirect,
    )
    if not outcome.ok:
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=result.model_dump(mode="json"))
    return JSONResponse(status_code=success_status, content=result.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=WriteResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a booking through the wizard",
)
async def create_booking(
    body: BookingSubmitRequest,
    gateway: DataGateway = Depends(get_gateway),
    notifications: NotificationCenter = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
):
    """Create the customer (unless an existing one is chosen), the rental, and its items."""
    wizard = await BookingWizard.open(
        gateway,
        notifications=notifications,
        success_redirect_delay_ms=settings.success_redirect_delay_ms,
    )
    _apply_customer_step(wizard, body)
    _apply_items(wizard, body.items)
    return await _submit(wizard, notifications, status.HTTP_201_CREATED)


@router.put(
    "/{rental_id}",
    response_model=WriteResultResponse,
    summary="Edit a booking through the wizard",
)
async def update_booking(
    rental_id: uuid.UUID,
    body: BookingSubmitRequest,
    gateway: DataGateway = Depends(get_gateway),
    notifications: NotificationCenter = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
):
    """Rewrite customer and rental rows and replace the whole item set."""
    try:
        editing = await load_booking(gateway, rental_id)
    except MissingRowError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    except GatewayError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load booking")

    wizard = await BookingWizard.open(
        gateway,
        editing=editing,
        notifications=notifications,
        success_redirect_delay_ms=settings.success_redirect_delay_ms,
    )
    _apply_customer_step(wizard, body)
    _apply_items(wizard, body.items)
    return await _submit(wizard, notifications, status.HTTP_200_OK)
