"""Gateway backend that talks to PostgreSQL directly through SQLAlchemy.

Each gateway call runs in its own session and commits before returning, so a
sequence of calls has exactly the same (non-transactional) semantics as the
REST backend.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import ColumnElement, delete as sa_delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import RelationshipProperty, selectinload

from catering_rentals.config import Settings
from catering_rentals.database import Base, create_engine, create_session_factory
from catering_rentals.gateway.base import (
    DataGateway,
    Embed,
    Filter,
    GatewayError,
    Order,
    Row,
    as_batch,
    check_table,
    require_filters,
)
from catering_rentals.models import Customer, Item, Rental, RentalItem

logger = logging.getLogger(__name__)

MODELS: dict[str, type[Base]] = {
    "customers": Customer,
    "items": Item,
    "rentals": Rental,
    "rental_items": RentalItem,
}


def _coerce(column: Any, value: Any) -> Any:
    """Convert JSON-style operands (ISO strings, numbers) to the column's Python type."""
    if value is None:
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type):
        return value
    if isinstance(value, str):
        if python_type is uuid.UUID:
            return uuid.UUID(value)
        if python_type is datetime:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        if python_type is date:
            return date.fromisoformat(value[:10])
        if python_type is Decimal:
            return Decimal(value)
    if python_type is Decimal and isinstance(value, (int, float)):
        return Decimal(str(value))
    return value


class SqlGateway(DataGateway):
    """Data gateway over an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> SqlGateway:
        engine = create_engine(settings.async_database_url, echo=settings.debug)
        return cls(create_session_factory(engine), engine=engine)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unit_of_work(self, table: str, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise GatewayError(str(getattr(exc, "orig", None) or exc), table=table, operation=operation) from exc

    @staticmethod
    def _model(table: str, operation: str) -> type[Base]:
        check_table(table, operation)
        return MODELS[table]

    @staticmethod
    def _column(model: type[Base], name: str, table: str, operation: str) -> Any:
        column = model.__table__.c.get(name)
        if column is None:
            raise GatewayError(f"unknown column {name!r}", table=table, operation=operation)
        return column

    def _values(self, model: type[Base], values: Mapping[str, Any], table: str, operation: str) -> dict[str, Any]:
        return {key: _coerce(self._column(model, key, table, operation), value) for key, value in values.items()}

    def _condition(self, model: type[Base], f: Filter, table: str, operation: str) -> ColumnElement[bool]:
        column = self._column(model, f.column, table, operation)
        if f.op == "in":
            return column.in_([_coerce(column, v) for v in f.value])
        if f.value is None:
            return column.is_(None)
        return column == _coerce(column, f.value)

    @staticmethod
    def _relationship(model: type[Base], related_table: str, table: str) -> RelationshipProperty:
        for rel in inspect(model).relationships:
            if rel.mapper.local_table.name == related_table and not rel.uselist:
                return rel
        raise GatewayError(f"no relationship to {related_table!r}", table=table, operation="select")

    @staticmethod
    def _to_row(obj: Base) -> Row:
        return {attr.key: getattr(obj, attr.key) for attr in inspect(type(obj)).column_attrs}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        order: Sequence[Order] = (),
        embed: Sequence[Embed] = (),
        limit: int | None = None,
    ) -> list[Row]:
        model = self._model(table, "select")
        stmt = select(model).where(*(self._condition(model, f, table, "select") for f in filters))
        for o in order:
            column = self._column(model, o.column, table, "select")
            stmt = stmt.order_by(column.desc() if o.descending else column.asc())
        relations = [(e, self._relationship(model, e.table, table)) for e in embed]
        for _, rel in relations:
            stmt = stmt.options(selectinload(getattr(model, rel.key)))
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._unit_of_work(table, "select") as session:
            result = await session.execute(stmt)
            objects = list(result.scalars().all())

        rows = []
        for obj in objects:
            row = self._to_row(obj)
            for e, rel in relations:
                related = getattr(obj, rel.key)
                if related is None:
                    row[e.table] = None
                    continue
                full = self._to_row(related)
                row[e.table] = full if "*" in e.columns else {c: full[c] for c in e.columns}
            rows.append(row)
        logger.debug("select %s -> %d rows", table, len(rows))
        return rows

    async def insert(self, table: str, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[Row]:
        model = self._model(table, "insert")
        batch = [self._values(model, row, table, "insert") for row in as_batch(rows)]
        if not batch:
            return []
        async with self._unit_of_work(table, "insert") as session:
            objects = [model(**values) for values in batch]
            session.add_all(objects)
            await session.flush()
            for obj in objects:
                await session.refresh(obj)
            inserted = [self._to_row(obj) for obj in objects]
        logger.debug("insert %s -> %d rows", table, len(inserted))
        return inserted

    async def update(self, table: str, values: Mapping[str, Any], *, filters: Sequence[Filter]) -> list[Row]:
        model = self._model(table, "update")
        require_filters(table, "update", filters)
        changes = self._values(model, values, table, "update")
        stmt = select(model).where(*(self._condition(model, f, table, "update") for f in filters))
        async with self._unit_of_work(table, "update") as session:
            result = await session.execute(stmt)
            objects = list(result.scalars().all())
            for obj in objects:
                for field, value in changes.items():
                    setattr(obj, field, value)
            await session.flush()
            for obj in objects:
                await session.refresh(obj)
            updated = [self._to_row(obj) for obj in objects]
        logger.debug("update %s -> %d rows", table, len(updated))
        return updated

    async def delete(self, table: str, *, filters: Sequence[Filter]) -> None:
        model = self._model(table, "delete")
        require_filters(table, "delete", filters)
        stmt = sa_delete(model).where(*(self._condition(model, f, table, "delete") for f in filters))
        async with self._unit_of_work(table, "delete") as session:
            await session.execute(stmt)

    async def aclose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
