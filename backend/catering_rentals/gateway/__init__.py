"""Data gateway backends.

Build one with :func:`create_gateway` at application startup and pass it to
the components that need it; close it with ``await gateway.aclose()`` on
shutdown.
"""

from catering_rentals.config import Settings
from catering_rentals.gateway.base import (
    DataGateway,
    Embed,
    Filter,
    GatewayError,
    Order,
    Row,
    asc,
    desc,
    eq,
    in_,
)


def create_gateway(settings: Settings) -> DataGateway:
    """Instantiate the backend selected by ``settings.gateway_backend``."""
    if settings.gateway_backend == "sql":
        from catering_rentals.gateway.sql import SqlGateway

        return SqlGateway.from_settings(settings)

    from catering_rentals.gateway.rest import RestGateway

    return RestGateway.from_settings(settings)


__all__ = [
    "DataGateway",
    "Embed",
    "Filter",
    "GatewayError",
    "Order",
    "Row",
    "asc",
    "create_gateway",
    "desc",
    "eq",
    "in_",
]
