"""Tests for the catalog seed script."""

import pytest

from scripts.seed_data import CATALOG, seed

pytestmark = pytest.mark.asyncio


async def test_seed_is_repeatable(gateway) -> None:
    assert await seed(gateway) == len(CATALOG)
    assert await seed(gateway) == 0

    rows = await gateway.select("items")
    assert len(rows) == len(CATALOG)
    assert all(row["is_active"] for row in rows)


async def test_seed_fills_gaps(gateway) -> None:
    await gateway.insert("items", {"name": "Chair", "category": "Seating", "price": "45.00"})
    assert await seed(gateway) == len(CATALOG) - 1

    [chair] = [row for row in await gateway.select("items") if row["name"] == "Chair"]
    assert str(chair["price"]) == "45.00"
