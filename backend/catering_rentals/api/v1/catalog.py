"""Catalog and customer lookup endpoints used by the booking wizard."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from catering_rentals.api.deps import get_gateway
from catering_rentals.gateway import DataGateway, GatewayError
from catering_rentals.schemas.customer import CustomerResponse
from catering_rentals.schemas.item import CatalogResponse
from catering_rentals.services.catalog import (
    ALL_CATEGORIES,
    category_options,
    filter_items,
    group_items,
    load_catalog,
    load_customers,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get(
    "/customers",
    response_model=list[CustomerResponse],
    summary="List customers by name",
)
async def list_customers(gateway: DataGateway = Depends(get_gateway)) -> list[CustomerResponse]:
    try:
        return await load_customers(gateway)
    except GatewayError:
        logger.exception("Error loading customers")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load customers")


@router.get(
    "/items",
    response_model=CatalogResponse,
    summary="Browse the active catalog",
)
async def list_items(
    search: str = Query("", description="Case-insensitive name substring"),
    category: str = Query(ALL_CATEGORIES, description="Exact category, or 'all'"),
    gateway: DataGateway = Depends(get_gateway),
) -> CatalogResponse:
    """Active items grouped by category; categories always reflect the full catalog."""
    try:
        catalog = await load_catalog(gateway)
    except GatewayError:
        logger.exception("Error loading items")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load items")

    visible = filter_items(catalog, search, category)
    return CatalogResponse(
        categories=category_options(catalog),
        search=search,
        category=category,
        groups=group_items(visible),
        total=len(visible),
    )
