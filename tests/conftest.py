"""Pytest bootstrap configuration.

Mandatory settings are seeded before the application modules are imported.
"""
import os

os.environ.setdefault("POSTGRES_DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("MERCADOPAGO_ACCESS_TOKEN", "test-token")
os.environ.setdefault("MERCADOPAGO_NOTIFICATION_URL", "https://gateway.test/webhook")
os.environ.setdefault("MERCADOPAGO_COLLECTOR_ID", "2023202558")
os.environ.setdefault("MERCADOPAGO_POS_ID", "FIAP2POS001")

import httpx
import pytest

from app.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        POSTGRES_DB_URL="sqlite+aiosqlite://",
        MERCADOPAGO_BASE_URL="https://mp.test",
        MERCADOPAGO_ACCESS_TOKEN="test-token",
        MERCADOPAGO_NOTIFICATION_URL="https://gateway.test/webhook",
        MERCADOPAGO_COLLECTOR_ID="2023202558",
        MERCADOPAGO_POS_ID="FIAP2POS001",
        ORDER_SERVICE_URL="http://orders.test",
    )


@pytest.fixture
def recorded_requests() -> list:
    return []


@pytest.fixture
def http_client_factory(recorded_requests):
    """Builds an AsyncClient whose requests are answered by `handler`."""

    def _factory(handler):
        def _record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        return client

    return _factory
