"""Gateway backend for the hosted data service's REST interface.

Speaks the PostgREST dialect: filters as ``?column=eq.value`` /
``?column=in.(a,b)``, ordering as ``order=col.desc,col2.asc``, related rows
via ``select=*,items(name)``, and ``Prefer: return=representation`` so writes
echo the stored rows back.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import httpx

from catering_rentals.config import Settings
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

logger = logging.getLogger(__name__)

_RESERVED = set(',()"')


def _literal(value: Any) -> str:
    """Render a filter operand the way PostgREST expects it in a query string."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _quoted(value: Any) -> str:
    text = _literal(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _jsonable(value: Any) -> Any:
    # Decimal is sent as a numeric string
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _body(row: Mapping[str, Any]) -> dict[str, Any]:
    return {key: _jsonable(value) for key, value in row.items()}


def _params(
    filters: Sequence[Filter] = (),
    order: Sequence[Order] = (),
    embed: Sequence[Embed] = (),
    limit: int | None = None,
    *,
    select: bool = False,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    if select:
        columns = ["*"] + [f"{e.table}({','.join(e.columns)})" for e in embed]
        params.append(("select", ",".join(columns)))
    for f in filters:
        if f.op == "in":
            params.append((f.column, f"in.({','.join(_quoted(v) for v in f.value)})"))
        elif f.value is None:
            params.append((f.column, "is.null"))
        else:
            params.append((f.column, f"eq.{_literal(f.value)}"))
    if order:
        params.append(("order", ",".join(f"{o.column}.{'desc' if o.descending else 'asc'}" for o in order)))
    if limit is not None:
        params.append(("limit", str(limit)))
    return params


class RestGateway(DataGateway):
    """Data gateway over ``httpx.AsyncClient``.

    Usage::

        gateway = RestGateway("https://example.supabase.co/rest/v1", api_key)
        rows = await gateway.select("rentals", order=[desc("rental_date")])
        await gateway.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        kwargs: dict[str, Any] = {"base_url": base_url.rstrip("/"), "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> RestGateway:
        return cls(
            settings.rest_base_url,
            settings.data_service_key,
            timeout=settings.data_service_timeout_seconds,
        )

    async def _request(
        self,
        method: str,
        table: str,
        operation: str,
        *,
        params: list[tuple[str, str]],
        json: Any = None,
        returning: bool = False,
    ) -> list[Row]:
        headers = {"Prefer": "return=representation"} if returning else {}
        try:
            response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise GatewayError(str(exc) or type(exc).__name__, table=table, operation=operation) from exc

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            detail = (payload.get("message") if isinstance(payload, dict) else None) or response.text
            raise GatewayError(
                f"HTTP {response.status_code}: {detail}",
                table=table,
                operation=operation,
            )

        logger.debug("%s /%s -> %s", method, table, response.status_code)
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    async def select(
        self,
        table: str,
        *,
        filters: Sequence[Filter] = (),
        order: Sequence[Order] = (),
        embed: Sequence[Embed] = (),
        limit: int | None = None,
    ) -> list[Row]:
        check_table(table, "select")
        for related in embed:
            check_table(related.table, "select")
        params = _params(filters, order, embed, limit, select=True)
        return await self._request("GET", table, "select", params=params)

    async def insert(self, table: str, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[Row]:
        check_table(table, "insert")
        batch = [_body(row) for row in as_batch(rows)]
        if not batch:
            return []
        return await self._request("POST", table, "insert", params=[], json=batch, returning=True)

    async def update(self, table: str, values: Mapping[str, Any], *, filters: Sequence[Filter]) -> list[Row]:
        check_table(table, "update")
        require_filters(table, "update", filters)
        return await self._request(
            "PATCH", table, "update", params=_params(filters), json=_body(values), returning=True
        )

    async def delete(self, table: str, *, filters: Sequence[Filter]) -> None:
        check_table(table, "delete")
        require_filters(table, "delete", filters)
        await self._request("DELETE", table, "delete", params=_params(filters))

    async def aclose(self) -> None:
        await self._client.aclose()
