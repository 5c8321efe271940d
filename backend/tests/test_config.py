"""Tests for application settings and backend selection."""

import pytest
from pydantic import ValidationError

from catering_rentals.config import Settings
from catering_rentals.gateway import create_gateway
from catering_rentals.gateway.sql import SqlGateway


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_rest_backend_requires_url(self) -> None:
        with pytest.raises(ValidationError, match="DATA_SERVICE_URL"):
            _settings(gateway_backend="rest", data_service_url="")

    def test_blank_key_rejected_in_production(self) -> None:
        with pytest.raises(ValidationError, match="DATA_SERVICE_KEY"):
            _settings(
                gateway_backend="rest",
                data_service_url="https://rentals.example.test",
                data_service_key="",
                environment="production",
            )

    def test_blank_key_warns_outside_production(self) -> None:
        with pytest.warns(UserWarning, match="DATA_SERVICE_KEY is empty"):
            _settings(
                gateway_backend="rest",
                data_service_url="https://rentals.example.test",
                data_service_key="",
                environment="development",
            )

    def test_rest_base_url(self) -> None:
        settings = _settings(data_service_url="https://rentals.example.test/", data_service_key="k")
        assert settings.rest_base_url == "https://rentals.example.test/rest/v1"
        settings = _settings(data_service_url="https://rentals.example.test/rest/v1", data_service_key="k")
        assert settings.rest_base_url == "https://rentals.example.test/rest/v1"

    def test_async_database_url(self) -> None:
        settings = _settings(gateway_backend="sql", database_url="postgresql://u:p@db:5432/rentals")
        assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/rentals"

    def test_feedback_timings(self) -> None:
        settings = _settings(gateway_backend="sql")
        assert settings.toast_duration_ms == 3000
        assert settings.success_redirect_delay_ms == 1500
        assert settings.error_redirect_delay_ms == 2000

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("GATEWAY_BACKEND", "sql")
        monkeypatch.setenv("TOAST_DURATION_MS", "5000")
        settings = _settings()
        assert settings.gateway_backend == "sql"
        assert settings.toast_duration_ms == 5000


@pytest.mark.asyncio
class TestCreateGateway:
    async def test_sql_backend(self, database_url: str) -> None:
        gateway = create_gateway(_settings(gateway_backend="sql", database_url=database_url))
        assert isinstance(gateway, SqlGateway)
        await gateway.aclose()
