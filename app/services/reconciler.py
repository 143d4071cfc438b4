import enum
import logging
from typing import Any, Dict, Optional

from app.core.exceptions import GatewayError, ReconcileError, StorageError, RelayError, ValidationError
from app.db.models.payment import PaymentStatus
from app.services.notifications import (
    MerchantOrderEvent, NotificationEvent, PaymentEvent, UnrecognizedEvent, parse_notification,
)
from app.services.order_relay import OrderStatusRelay
from app.services.payment_store import PaymentStore
from app.services.webhook_dedup import WebhookDeduplicator
from app.utils.mercadopago import MercadoPagoClient

logger = logging.getLogger(__name__)

# Order-service status vocabulary
ORDER_RECEIVED = "Recebido"
ORDER_IN_PREPARATION = "Em Preparação"
ORDER_FAILED = "FAILED"

# Single payment: provider status -> order status
PAYMENT_STATUS_MAP = {
    "approved": ORDER_IN_PREPARATION,
    "rejected": ORDER_FAILED,
}

# Order status -> terminal status of the local payment record
LOCAL_STATUS_MAP = {
    ORDER_IN_PREPARATION: PaymentStatus.SUCCESS,
    ORDER_FAILED: PaymentStatus.FAILED,
}


class FailurePolicy(str, enum.Enum):
    LOG = "log"
    ESCALATE = "escalate"


class ReconcileOutcome(str, enum.Enum):
    RECEIVED = "received"
    RESOLVED = "resolved"
    MAPPED = "mapped"
    RELAYED = "relayed"
    IGNORED = "ignored"
    FAILED = "failed"


def map_payment_status(provider_status: Any) -> Optional[str]:
    """Order status for a single payment, or None when nothing should change."""
    if not isinstance(provider_status, str):
        return None
    return PAYMENT_STATUS_MAP.get(provider_status)


def is_merchant_order_paid(merchant_order: Dict[str, Any]) -> bool:
    payments = merchant_order.get("payments")
    if not isinstance(payments, list):
        return False
    return merchant_order.get("status") == "closed" and any(
        isinstance(p, dict) and p.get("status") == "approved" for p in payments
    )


def map_merchant_order_status(merchant_order: Dict[str, Any]) -> str:
    return ORDER_IN_PREPARATION if is_merchant_order_paid(merchant_order) else ORDER_RECEIVED


class NotificationReconciler:
    def __init__(
            self,
            mercadopago: MercadoPagoClient,
            relay: OrderStatusRelay,
            store: Optional[PaymentStore] = None,
            dedup: Optional[WebhookDeduplicator] = None,
            failure_policy: FailurePolicy = FailurePolicy.LOG,
    ):
        self.mercadopago = mercadopago
        self.relay = relay
        self.store = store
        self.dedup = dedup or WebhookDeduplicator(None, 0)
        self.failure_policy = failure_policy

    async def handle_webhook(self, body: Any) -> ReconcileOutcome:
        logger.debug(f"Received Mercado Pago webhook: {body}")
        event = parse_notification(body)

        if isinstance(event, UnrecognizedEvent):
            logger.info(f"Ignoring unsupported webhook event: {body}")
            return ReconcileOutcome.IGNORED

        try:
            if isinstance(event, PaymentEvent):
                return await self.process_payment(event.payment_id)
            if isinstance(event, MerchantOrderEvent):
                await self.process_merchant_order_notification(event.merchant_order_id)
                return ReconcileOutcome.RELAYED
        except GatewayError as e:
            return self._on_failure(event, e)

        raise TypeError(f"Unhandled notification event: {event!r}")

    def _on_failure(self, event: NotificationEvent, error: GatewayError) -> ReconcileOutcome:
        if isinstance(event, PaymentEvent):
            subject = f"payment {event.payment_id}"
        else:
            subject = f"merchant order {event.merchant_order_id}"
        logger.error(f"Failed to process {subject}: {error}")

        if self.failure_policy == FailurePolicy.ESCALATE:
            raise ReconcileError(f"Failed to process {subject}: {error}") from error
        return ReconcileOutcome.FAILED

    async def process_payment(self, payment_id: str) -> ReconcileOutcome:
        """
        Fetches the payment from Mercado Pago and relays the mapped order status.

        Raises PaymentProviderError when the payment cannot be fetched and
        RelayError when the order service rejects the update.
        """
        logger.debug(f"Fetching payment details for payment ID: {payment_id}")
        payment = await self.mercadopago.get_payment(payment_id)
        logger.debug(f"Payment details received: {payment}")

        order_id = payment.get("external_reference") if isinstance(payment, dict) else None
        if not order_id:
            logger.warning(
                f"Payment {payment_id} does not contain an external reference (orderId). Ignoring."
            )
            return ReconcileOutcome.FAILED

        provider_status = payment.get("status")
        order_status = map_payment_status(provider_status)
        if order_status is None:
            logger.info(f"Payment {payment_id} for order {order_id} is '{provider_status}'; no status change.")
            return ReconcileOutcome.IGNORED

        if not await self.dedup.claim(payment_id, order_status):
            logger.info(f"Payment {payment_id} already relayed as '{order_status}'. Skipping duplicate.")
            return ReconcileOutcome.IGNORED

        logger.info(f"Payment {payment_id} is {provider_status}. Updating order {order_id} to '{order_status}'.")
        await self._record_terminal(order_id, LOCAL_STATUS_MAP[order_status])

        try:
            await self.relay.update_order_status(str(order_id), order_status)
        except RelayError:
            await self.dedup.release(payment_id, order_status)
            raise
        return ReconcileOutcome.RELAYED

    async def process_merchant_order_notification(self, merchant_order_id: str) -> Dict[str, Any]:
        """
        Relays the state of a whole merchant order. Every failure is raised.
        """
        logger.debug(f"Processing merchant order notification for ID: {merchant_order_id}")
        merchant_order = await self.mercadopago.get_merchant_order(merchant_order_id)
        logger.debug(f"Merchant order details: {merchant_order}")

        order_id = merchant_order.get("external_reference") if isinstance(merchant_order, dict) else None
        if not order_id:
            raise ValidationError(f"Merchant order {merchant_order_id} has no external reference")

        order_status = map_merchant_order_status(merchant_order)
        logger.info(f"Order {order_id} will be updated to status: {order_status}")

        if order_status == ORDER_IN_PREPARATION:
            await self._record_terminal(order_id, PaymentStatus.SUCCESS)

        await self.relay.update_order_status(str(order_id), order_status)
        return {"orderId": str(order_id), "status": order_status}

    async def _record_terminal(self, order_id: str, status: PaymentStatus) -> None:
        if self.store is None:
            return
        try:
            updated = await self.store.mark_terminal(str(order_id), status)
        except StorageError as e:
            logger.error(f"Could not record {status.value} for order {order_id}: {e}")
            return
        if not updated:
            logger.info(f"No pending payment for order {order_id}; local record left unchanged.")
