"""Tests for the REST gateway against a mocked data service."""

import json
import uuid
from datetime import date
from decimal import Decimal

import httpx
import pytest

from catering_rentals.config import Settings
from catering_rentals.gateway import Embed, GatewayError, asc, create_gateway, desc, eq, in_
from catering_rentals.gateway.rest import RestGateway

pytestmark = pytest.mark.asyncio

BASE_URL = "https://rentals.example.test/rest/v1"
API_KEY = "anon-key"


class Recorder:
    """Mock transport handler that records requests and replies with canned JSON."""

    def __init__(self, status_code: int = 200, payload=None) -> None:
        self.status_code = status_code
        self.payload = [] if payload is None else payload
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _gateway(handler) -> RestGateway:
    return RestGateway(BASE_URL, API_KEY, transport=httpx.MockTransport(handler))


class TestSelect:
    async def test_sends_credentials(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        await gateway.select("customers")
        await gateway.aclose()

        request = recorder.last
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/customers"
        assert request.headers["apikey"] == API_KEY
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"

    async def test_renders_filters_order_and_embed(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        first, second = uuid.uuid4(), uuid.uuid4()
        await gateway.select(
            "rental_items",
            filters=[in_("rental_id", [first, second])],
            order=[desc("created_at"), asc("quantity")],
            embed=[Embed("items", ("name",))],
        )
        await gateway.aclose()

        params = recorder.last.url.params
        assert params["select"] == "*,items(name)"
        assert params["rental_id"] == f"in.({first},{second})"
        assert params["order"] == "created_at.desc,quantity.asc"

    async def test_renders_scalar_filters(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        await gateway.select(
            "rentals",
            filters=[eq("status", "active"), eq("rental_date", date(2024, 1, 10)), eq("return_date", None)],
            limit=1,
        )
        await gateway.aclose()

        params = recorder.last.url.params
        assert params["status"] == "eq.active"
        assert params["rental_date"] == "eq.2024-01-10"
        assert params["return_date"] == "is.null"
        assert params["limit"] == "1"

    async def test_boolean_and_reserved_characters(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        await gateway.select("items", filters=[eq("is_active", True), in_("name", ["Degh (Large)", "Tawa"])])
        await gateway.aclose()

        params = recorder.last.url.params
        assert params["is_active"] == "eq.true"
        assert params["name"] == 'in.("Degh (Large)",Tawa)'

    async def test_returns_rows(self) -> None:
        rows = [{"id": str(uuid.uuid4()), "name": "Chair"}]
        gateway = _gateway(Recorder(payload=rows))
        assert await gateway.select("items") == rows
        await gateway.aclose()

    async def test_select_one(self) -> None:
        recorder = Recorder(payload=[])
        gateway = _gateway(recorder)
        assert await gateway.select_one("rentals", filters=[eq("id", uuid.uuid4())]) is None
        assert recorder.last.url.params["limit"] == "1"
        await gateway.aclose()


class TestWrites:
    async def test_insert_posts_batch_with_representation(self) -> None:
        recorder = Recorder(status_code=201, payload=[{"id": "new"}])
        gateway = _gateway(recorder)
        rental_id = uuid.uuid4()
        rows = await gateway.insert(
            "rental_items",
            [{"rental_id": rental_id, "quantity": 2, "price_at_booking": Decimal("50.00")}],
        )
        await gateway.aclose()

        request = recorder.last
        assert rows == [{"id": "new"}]
        assert request.method == "POST"
        assert request.headers["Prefer"] == "return=representation"
        assert json.loads(request.content) == [
            {"rental_id": str(rental_id), "quantity": 2, "price_at_booking": "50.00"}
        ]

    async def test_decimal_values_keep_full_precision(self) -> None:
        recorder = Recorder(status_code=201, payload=[{"id": "new"}])
        gateway = _gateway(recorder)
        await gateway.insert("items", {"name": "Degh", "price": Decimal("1234567890123.45")})
        await gateway.aclose()

        assert json.loads(recorder.last.content) == [{"name": "Degh", "price": "1234567890123.45"}]

    async def test_insert_empty_batch_skips_request(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        assert await gateway.insert("rental_items", []) == []
        assert recorder.requests == []
        await gateway.aclose()

    async def test_update_patches_filtered_rows(self) -> None:
        recorder = Recorder(payload=[{"status": "returned"}])
        gateway = _gateway(recorder)
        rental_id = uuid.uuid4()
        await gateway.update("rentals", {"status": "returned"}, filters=[eq("id", rental_id)])
        await gateway.aclose()

        request = recorder.last
        assert request.method == "PATCH"
        assert request.url.params["id"] == f"eq.{rental_id}"
        assert json.loads(request.content) == {"status": "returned"}

    async def test_delete(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        rental_id = uuid.uuid4()
        await gateway.delete("rental_items", filters=[eq("rental_id", rental_id)])
        await gateway.aclose()

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.params["rental_id"] == f"eq.{rental_id}"

    async def test_unfiltered_delete_refused(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        with pytest.raises(GatewayError):
            await gateway.delete("rental_items", filters=[])
        assert recorder.requests == []
        await gateway.aclose()


class TestErrors:
    async def test_error_status_uses_service_message(self) -> None:
        gateway = _gateway(Recorder(status_code=400, payload={"message": "invalid input syntax for type uuid"}))
        with pytest.raises(GatewayError) as exc_info:
            await gateway.select("rentals")
        await gateway.aclose()

        error = exc_info.value
        assert error.table == "rentals"
        assert error.operation == "select"
        assert "HTTP 400" in error.message
        assert "invalid input syntax" in error.message

    async def test_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = _gateway(refuse)
        with pytest.raises(GatewayError) as exc_info:
            await gateway.insert("customers", {"name": "Asha Rao"})
        await gateway.aclose()
        assert exc_info.value.operation == "insert"
        assert "connection refused" in exc_info.value.message

    async def test_unknown_table(self) -> None:
        recorder = Recorder()
        gateway = _gateway(recorder)
        with pytest.raises(GatewayError, match="unknown table"):
            await gateway.select("invoices")
        assert recorder.requests == []
        await gateway.aclose()


class TestFactory:
    async def test_create_gateway_selects_rest_backend(self) -> None:
        settings = Settings(
            _env_file=None,
            gateway_backend="rest",
            data_service_url="https://rentals.example.test",
            data_service_key=API_KEY,
        )
        gateway = create_gateway(settings)
        assert isinstance(gateway, RestGateway)
        await gateway.aclose()
