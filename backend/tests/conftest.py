"""Shared test configuration and fixtures.

Each test gets a fresh database with every table created, wrapped in a real
``SqlGateway``:
- By default a throwaway SQLite file under the test's ``tmp_path``.
- Set ``TEST_DATABASE_URL`` (e.g. ``postgresql+asyncpg://.../catering_test``)
  to run against PostgreSQL instead; tables are dropped after each test.
"""

import os
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from catering_rentals.api.deps import get_gateway
from catering_rentals.config import Settings
from catering_rentals.database import Base, create_engine, create_session_factory
from catering_rentals.gateway import DataGateway, GatewayError, Row
from catering_rentals.gateway.sql import SqlGateway
from catering_rentals.main import create_app

# ---------------------------------------------------------------------------
# Database and gateway
# ---------------------------------------------------------------------------


@pytest.fixture
def database_url(tmp_path) -> str:
    return os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'rentals.db'}"


@pytest.fixture
def settings(database_url: str) -> Settings:
    return Settings(
        _env_file=None,
        gateway_backend="sql",
        database_url=database_url,
        environment="test",
    )


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create all tables before the test and drop them afterwards."""
    engine = create_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def gateway(engine: AsyncEngine) -> SqlGateway:
    return SqlGateway(create_session_factory(engine))


class FlakyGateway(SqlGateway):
    """SQL gateway that fails chosen ``(table, operation)`` calls and logs every call."""

    def __init__(self, session_factory, fail_on: Iterable[tuple[str, str]] = ()) -> None:
        super().__init__(session_factory)
        self.fail_on = set(fail_on)
        self.calls: list[tuple[str, str]] = []

    def _record(self, table: str, operation: str) -> None:
        self.calls.append((table, operation))
        if (table, operation) in self.fail_on:
            raise GatewayError("simulated outage", table=table, operation=operation)

    async def select(self, table, **kwargs):
        self._record(table, "select")
        return await super().select(table, **kwargs)

    async def insert(self, table, rows):
        self._record(table, "insert")
        return await super().insert(table, rows)

    async def update(self, table, values, *, filters):
        self._record(table, "update")
        return await super().update(table, values, filters=filters)

    async def delete(self, table, *, filters):
        self._record(table, "delete")
        return await super().delete(table, filters=filters)


@pytest.fixture
def flaky_gateway(engine: AsyncEngine) -> Callable[..., FlakyGateway]:
    """Factory: ``flaky_gateway(("rental_items", "insert"))`` shares the test database."""

    def make(*fail_on: tuple[str, str]) -> FlakyGateway:
        return FlakyGateway(create_session_factory(engine), fail_on)

    return make


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
def client_for(settings: Settings) -> Callable[[DataGateway], AbstractAsyncContextManager[AsyncClient]]:
    """Factory: ``async with client_for(gateway) as ac`` serves the app over ``gateway``."""

    @asynccontextmanager
    async def make(gateway: DataGateway) -> AsyncIterator[AsyncClient]:
        app = create_app(settings)
        app.dependency_overrides[get_gateway] = lambda: gateway
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
        app.dependency_overrides.clear()

    return make


@pytest_asyncio.fixture
async def client(client_for, gateway: SqlGateway) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test gateway."""
    async with client_for(gateway) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Convenience fixtures: catalog, customers, bookings
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def catalog(gateway: SqlGateway) -> dict[str, Row]:
    """Insert a small catalog and return its rows keyed by item name."""
    rows = await gateway.insert(
        "items",
        [
            {"name": "Chair", "category": "Seating", "price": Decimal("50.00"), "is_active": True},
            {"name": "Table", "category": "Furniture", "price": Decimal("300.00"), "is_active": True},
            {"name": "Round Table", "category": "Furniture", "price": Decimal("400.00"), "is_active": True},
            {"name": "Plate", "category": "Serving", "price": Decimal("15.00"), "is_active": True},
            {"name": "Broken Degh", "category": "Cooking", "price": Decimal("500.00"), "is_active": False},
        ],
    )
    return {row["name"]: row for row in rows}


@pytest_asyncio.fixture
async def customer(gateway: SqlGateway) -> Row:
    rows = await gateway.insert(
        "customers",
        {"name": "Ravi Kumar", "contact_number": "9876543210", "address": "4 Lake View"},
    )
    return rows[0]


BookingFactory = Callable[..., Awaitable[Row]]


@pytest.fixture
def make_booking(gateway: SqlGateway) -> BookingFactory:
    """Factory inserting a rental plus line items; returns the rental row.

    ``items`` is a list of ``(item_row, quantity)`` pairs priced at the item's
    current catalog price.
    """

    async def make(
        customer: Row,
        *,
        rental_date: date = date(2024, 1, 10),
        status: str = "active",
        items: Iterable[tuple[Row, int]] = (),
        notes: str | None = None,
    ) -> Row:
        rental = (
            await gateway.insert(
                "rentals",
                {
                    "customer_id": customer["id"],
                    "rental_date": rental_date,
                    "status": status,
                    "notes": notes,
                },
            )
        )[0]
        lines = [
            {
                "rental_id": rental["id"],
                "item_id": item["id"],
                "quantity": quantity,
                "price_at_booking": item["price"],
            }
            for item, quantity in items
        ]
        if lines:
            await gateway.insert("rental_items", lines)
        return rental

    return make
