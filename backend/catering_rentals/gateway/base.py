"""Data gateway contract shared by the REST and SQL backends.

The gateway exposes the four booking tables through table-level operations
(select / insert / update / delete) that mirror what the hosted data service
offers. Rows travel as plain ``dict`` objects; callers validate them into
pydantic schemas. Every call is its own unit of work: nothing here spans
two calls in a transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

Row = dict[str, Any]

TABLES = ("customers", "items", "rentals", "rental_items")


class GatewayError(Exception):
    """A data service call failed (network, HTTP status, or query error)."""

    def __init__(self, message: str, *, table: str, operation: str) -> None:
        super().__init__(message)
        self.message = message
        self.table = table
        self.operation = operation

    def __str__(self) -> str:
        return f"{self.operation} on {self.table} failed: {self.message}"


@dataclass(frozen=True)
class Filter:
    """Equality or set-membership condition on one column."""

    column: str
    op: Literal["eq", "in"]
    value: Any


@dataclass(frozen=True)
class Order:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class Embed:
    """Related row fetched through a foreign key in the same call.

    ``Embed("items", ("name",))`` on ``rental_items`` attaches
    ``row["items"] = {"name": ...}`` (or ``None`` when the reference dangles).
    """

    table: str
    columns: tuple[str, ...] = ("*",)


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def desc(column: str) -> Order:
    return Order(column, descending=True)


def asc(column: str) -> Order:
    return Order(column)


class DataGateway(ABC):
    """Table-level access to ``customers``, ``items``, ``rentals``, ``rental_items``."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        order: Sequence[Order] = (),
        embed: Sequence[Embed] = (),
        limit: int | None = None,
    ) -> list[Row]:
        """Return rows of ``table`` matching every filter, in ``order``."""

    async def select_one(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        embed: Sequence[Embed] = (),
    ) -> Row | None:
        """Return the single matching row, or ``None`` when there is none."""
        rows = await self.select(table, filters=filters, embed=embed, limit=1)
        return rows[0] if rows else None

    @abstractmethod
    async def insert(self, table: str, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[Row]:
        """Insert one row or a batch and return the stored representation."""

    @abstractmethod
    async def update(self, table: str, values: Mapping[str, Any], *, filters: Sequence[Filter]) -> list[Row]:
        """Update matching rows with ``values`` and return them."""

    @abstractmethod
    async def delete(self, table: str, *, filters: Sequence[Filter]) -> None:
        """Delete matching rows."""

    async def aclose(self) -> None:
        """Release transport resources. Called once at application shutdown."""


def check_table(table: str, operation: str) -> None:
    if table not in TABLES:
        raise GatewayError(f"unknown table {table!r}", table=table, operation=operation)


def as_batch(rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    if isinstance(rows, Mapping):
        return [dict(rows)]
    return [dict(row) for row in rows]


def require_filters(table: str, operation: str, filters: Sequence[Filter]) -> None:
    if not filters:
        raise GatewayError(f"refusing unfiltered {operation}", table=table, operation=operation)
