"""Page routes: the booking list (``/``) and the single-booking editor (``/rental/{id}/edit``)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from catering_rentals.api.deps import get_gateway, get_notifications, get_settings
from catering_rentals.config import Settings
from catering_rentals.gateway import DataGateway
from catering_rentals.schemas.booking import (
    BookingListResponse,
    RentalEditorResponse,
    RentalEditRequest,
    StatusFilter,
    WriteResultResponse,
)
from catering_rentals.services.booking_list import BookingListView
from catering_rentals.services.errors import MissingRowError
from catering_rentals.services.notifications import NotificationCenter
from catering_rentals.services.rental_editor import RentalEditor

router = APIRouter(tags=["views"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _editor(gateway: DataGateway, notifications: NotificationCenter, settings: Settings) -> RentalEditor:
    return RentalEditor(
        gateway,
        notifications=notifications,
        success_redirect_delay_ms=settings.success_redirect_delay_ms,
        error_redirect_delay_ms=settings.error_redirect_delay_ms,
    )


async def _load_or_raise(editor: RentalEditor, rental_id: uuid.UUID) -> None:
    """Load the booking or raise 404/502 carrying the toast and redirect."""
    if await editor.load(rental_id):
        return
    toast = editor.notifications.current
    redirect = editor.notifications.redirect
    missing = isinstance(editor.load_error, MissingRowError)
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND if missing else status.HTTP_502_BAD_GATEWAY,
        detail={
            "message": toast.message if toast else "Failed to load booking",
            "toast": toast.model_dump() if toast else None,
            "redirect": redirect.model_dump() if redirect else None,
        },
    )


def _editor_response(editor: RentalEditor) -> RentalEditorResponse:
    booking = editor.current()
    assert booking is not None
    return RentalEditorResponse(
        booking=booking,
        short_id=editor.short_id,
        item_count=len(editor.items),
        unit_count=editor.unit_count,
        total_amount=editor.total_amount,
        toast=editor.notifications.current,
        redirect=editor.notifications.redirect,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_model=BookingListResponse,
    summary="Booking list with status filter and summary counts",
)
async def booking_list(
    status_filter: StatusFilter = Query("all", alias="status", description="Filter by rental status"),
    gateway: DataGateway = Depends(get_gateway),
    notifications: NotificationCenter = Depends(get_notifications),
) -> BookingListResponse:
    """Aggregate every booking, then filter client-side by status.

    Counts are always taken over the full set, not the filtered one.
    """
    view = BookingListView(gateway, notifications)
    await view.reload()
    view.set_filter(status_filter)
    return view.render()


@router.get(
    "/rental/{rental_id}/edit",
    response_model=RentalEditorResponse,
    summary="Load one booking for editing",
)
async def edit_rental_page(
    rental_id: uuid.UUID,
    gateway: DataGateway = Depends(get_gateway),
    notifications: NotificationCenter = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
) -> RentalEditorResponse:
    editor = _editor(gateway, notifications, settings)
    await _load_or_raise(editor, rental_id)
    return _editor_response(editor)


@router.put(
    "/rental/{rental_id}/edit",
    response_model=WriteResultResponse,
    summary="Save inline edits to one booking",
)
async def save_rental(
    rental_id: uuid.UUID,
    body: RentalEditRequest,
    gateway: DataGateway = Depends(get_gateway),
    notifications: NotificationCenter = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
):
    """Apply the edits and save: customer, then status, then each line item.

    Quantities below 1 are raised to 1. A failed write returns 502 with the
    name of the step that failed; earlier writes are not rolled back.
    """
    editor = _editor(gateway, notifications, settings)
    await _load_or_raise(editor, rental_id)

    editor.customer_name = body.customer_name
    editor.customer_phone = body.customer_phone
    editor.customer_address = body.customer_address
    editor.set_status(body.status)
    for rental_item_id, quantity in body.quantities.items():
        try:
            editor.set_quantity(rental_item_id, quantity)
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Line item {rental_item_id} is not part of this booking",
            )

    outcome = await editor.save()
    result = WriteResultResponse(
        ok=outcome.ok,
        rental_id=outcome.rental_id,
        failed_step=outcome.failed_step,
        toast=notifications.current,
        redirect=notifications.redirect,
    )
    if not outcome.ok:
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=result.model_dump(mode="json"))
    return result
