"""Tests for catalog and customer lookups."""

import pytest

from catering_rentals.services.catalog import category_options, filter_items, load_catalog, load_customers

pytestmark = pytest.mark.asyncio


class TestLoadCatalog:
    async def test_active_items_by_category_then_price(self, gateway, catalog) -> None:
        items = await load_catalog(gateway)
        assert [item.name for item in items] == ["Round Table", "Table", "Chair", "Plate"]

    async def test_category_options(self, gateway, catalog) -> None:
        items = await load_catalog(gateway)
        assert category_options(items) == ["all", "Furniture", "Seating", "Serving"]

    async def test_filter_items(self, gateway, catalog) -> None:
        items = await load_catalog(gateway)
        assert [item.name for item in filter_items(items, "table", "Furniture")] == ["Round Table", "Table"]
        assert filter_items(items, "table", "Seating") == []


class TestLoadCustomers:
    async def test_sorted_by_name(self, gateway) -> None:
        await gateway.insert(
            "customers",
            [
                {"name": "Zoya Shaikh", "contact_number": "1"},
                {"name": "Anil Mehta", "contact_number": "2"},
            ],
        )
        assert [c.name for c in await load_customers(gateway)] == ["Anil Mehta", "Zoya Shaikh"]
