import json
from unittest.mock import AsyncMock

import httpx
import pytest

from app.core.exceptions import PaymentProviderError, StorageError, ValidationError
from app.db.models.payment import PaymentStatus
from app.db.schemas.payment import ProductItem
from app.services.payment_service import PaymentService, compute_amount
from app.utils.mercadopago import MercadoPagoClient


def _products(*prices):
    return [ProductItem(id=f"p{i}", name=f"Product {i}", unitPrice=price) for i, price in enumerate(prices)]


@pytest.fixture
def store():
    mock = AsyncMock()

    async def _create(payment):
        payment.id = 1
        return payment

    mock.create.side_effect = _create
    return mock


def _qr_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(201, json={"qr_data": "00020101021243650016COM.MERCADOLIBRE", "in_store_order_id": "x"})


def test_amount_is_independent_of_ordering():
    assert compute_amount(_products(0.1, 0.2, 0.3)) == compute_amount(_products(0.3, 0.2, 0.1)) == 0.6
    assert compute_amount(_products(19.99, 0.01, 5.05)) == compute_amount(_products(5.05, 19.99, 0.01)) == 25.05


@pytest.mark.asyncio
async def test_provider_total_is_independent_of_ordering(settings, store, http_client_factory, recorded_requests):
    service = PaymentService(store, MercadoPagoClient(http_client_factory(_qr_handler), settings), settings)

    await service.process_order_payment("ord1", "client1", _products(0.1, 0.2, 0.3))
    await service.process_order_payment("ord2", "client1", _products(0.3, 0.2, 0.1))

    totals = [json.loads(request.content)["total_amount"] for request in recorded_requests]
    assert totals == [0.6, 0.6]
    assert [call.args[0].amount for call in store.create.await_args_list] == [0.6, 0.6]


@pytest.mark.asyncio
async def test_payment_creates_qr_and_stores_pending_record(settings, store, http_client_factory, recorded_requests):
    service = PaymentService(store, MercadoPagoClient(http_client_factory(_qr_handler), settings), settings)

    result = await service.process_order_payment("ord1", "client1", _products(100, 200))

    assert result == {"orderId": "ord1", "qrCode": "00020101021243650016COM.MERCADOLIBRE"}

    request = recorded_requests[0]
    assert request.method == "POST"
    assert str(request.url) == (
        "https://mp.test/instore/orders/qr/seller/collectors/2023202558/pos/FIAP2POS001/qrs"
    )
    assert request.headers["Authorization"] == "Bearer test-token"
    payload = json.loads(request.content)
    assert payload["total_amount"] == 300
    assert payload["external_reference"] == "ord1"
    assert payload["notification_url"] == "https://gateway.test/webhook"
    assert [item["unit_price"] for item in payload["items"]] == [100, 200]
    assert payload["items"][0]["currency_id"] == "BRL"

    saved = store.create.await_args.args[0]
    assert saved.amount == 300
    assert saved.status == PaymentStatus.PENDING
    assert saved.order_id == "ord1"
    assert saved.client_id == "client1"
    assert saved.products[0] == {"id": "p0", "name": "Product 0", "unitPrice": 100}


@pytest.mark.asyncio
async def test_provider_failure_persists_nothing(settings, store, http_client_factory):
    client = http_client_factory(lambda request: httpx.Response(401, json={"message": "invalid token"}))
    service = PaymentService(store, MercadoPagoClient(client, settings), settings)

    with pytest.raises(PaymentProviderError) as exc:
        await service.process_order_payment("ord1", "client1", _products(10))

    assert exc.value.status_code == 401
    store.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_provider_transport_error_persists_nothing(settings, store, http_client_factory):
    def _handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = PaymentService(store, MercadoPagoClient(http_client_factory(_handler), settings), settings)

    with pytest.raises(PaymentProviderError):
        await service.process_order_payment("ord1", "client1", _products(10))
    store.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_qr_data_is_a_provider_error(settings, store, http_client_factory):
    client = http_client_factory(lambda request: httpx.Response(200, json={}))
    service = PaymentService(store, MercadoPagoClient(client, settings), settings)

    with pytest.raises(PaymentProviderError):
        await service.process_order_payment("ord1", "client1", _products(10))
    store.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_storage_failure_is_surfaced(settings, store, http_client_factory):
    store.create.side_effect = StorageError("disk full")
    service = PaymentService(store, MercadoPagoClient(http_client_factory(_qr_handler), settings), settings)

    with pytest.raises(StorageError):
        await service.process_order_payment("ord1", "client1", _products(10))


@pytest.mark.asyncio
async def test_empty_products_are_rejected(settings, store, http_client_factory, recorded_requests):
    service = PaymentService(store, MercadoPagoClient(http_client_factory(_qr_handler), settings), settings)

    with pytest.raises(ValidationError):
        await service.process_order_payment("ord1", "client1", [])
    assert recorded_requests == []
