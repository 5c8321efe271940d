"""Tests for the catalog and customer lookup endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestListItems:
    async def test_grouped_active_catalog(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/api/v1/items")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["categories"] == ["all", "Furniture", "Seating", "Serving"]
        assert [group["category"] for group in data["groups"]] == ["Furniture", "Seating", "Serving"]
        assert [item["name"] for item in data["groups"][0]["items"]] == ["Round Table", "Table"]
        assert data["groups"][1]["icon"] == "🪑"

    async def test_search_and_category(self, client: AsyncClient, catalog) -> None:
        response = await client.get("/api/v1/items", params={"search": "TABLE", "category": "Furniture"})
        data = response.json()
        assert data["total"] == 2
        assert data["search"] == "TABLE"
        assert data["categories"] == ["all", "Furniture", "Seating", "Serving"]

    async def test_no_matches(self, client: AsyncClient, catalog) -> None:
        data = (await client.get("/api/v1/items", params={"search": "sofa"})).json()
        assert data["total"] == 0
        assert data["groups"] == []


class TestListCustomers:
    async def test_by_name(self, client: AsyncClient, gateway, customer) -> None:
        await gateway.insert("customers", {"name": "Anil Mehta", "contact_number": "111"})
        response = await client.get("/api/v1/customers")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Anil Mehta", "Ravi Kumar"]
