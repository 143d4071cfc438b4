from fastapi import Request, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import httpx
import redis.asyncio as redis

from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.utils.mercadopago import MercadoPagoClient
from app.services.order_relay import OrderStatusRelay
from app.services.payment_service import PaymentService
from app.services.payment_store import PaymentStore
from app.services.reconciler import NotificationReconciler, FailurePolicy
from app.services.webhook_dedup import WebhookDeduplicator

async def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client

async def get_redis_client(request: Request) -> redis.Redis | None:
    # Redis is optional here; webhook deduplication is skipped without it
    return getattr(request.app.state, "redis_client", None)

async def get_mercadopago_client(
        http_client: httpx.AsyncClient = Depends(get_http_client),
        settings: Settings = Depends(get_settings),
) -> MercadoPagoClient:
    return MercadoPagoClient(http_client, settings)

async def get_order_relay(
        http_client: httpx.AsyncClient = Depends(get_http_client),
        settings: Settings = Depends(get_settings),
) -> OrderStatusRelay:
    return OrderStatusRelay(http_client, settings)

async def get_payment_store(db: AsyncSession = Depends(get_db)) -> PaymentStore:
    return PaymentStore(db)

async def get_payment_service(
        store: PaymentStore = Depends(get_payment_store),
        mercadopago: MercadoPagoClient = Depends(get_mercadopago_client),
        settings: Settings = Depends(get_settings),
) -> PaymentService:
    return PaymentService(store, mercadopago, settings)

async def get_reconciler(
        mercadopago: MercadoPagoClient = Depends(get_mercadopago_client),
        relay: OrderStatusRelay = Depends(get_order_relay),
        store: PaymentStore = Depends(get_payment_store),
        redis_client: redis.Redis | None = Depends(get_redis_client),
        settings: Settings = Depends(get_settings),
) -> NotificationReconciler:
    return NotificationReconciler(
        mercadopago,
        relay,
        store=store,
        dedup=WebhookDeduplicator(redis_client, settings.WEBHOOK_DEDUP_TTL_SECONDS),
        failure_policy=FailurePolicy(settings.WEBHOOK_FAILURE_POLICY),
    )
