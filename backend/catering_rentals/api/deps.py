"""Shared API dependencies — single import point for all routers.

The gateway and settings are created once at startup and stored on
``app.state``; routers receive them through these dependencies::

    from catering_rentals.api.deps import get_gateway, get_notifications
"""

from fastapi import Depends, Request

from catering_rentals.config import Settings
from catering_rentals.gateway import DataGateway
from catering_rentals.services.notifications import NotificationCenter


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> DataGateway:
    return request.app.state.gateway


def get_notifications(settings: Settings = Depends(get_settings)) -> NotificationCenter:
    """A fresh notification center per request."""
    return NotificationCenter(default_duration_ms=settings.toast_duration_ms)


__all__ = [
    "get_gateway",
    "get_notifications",
    "get_settings",
]
