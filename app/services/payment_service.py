import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from app.core.config import Settings
from app.core.exceptions import ValidationError, StorageError, PaymentProviderError
from app.db.models.payment import Payment, PaymentStatus
from app.db.schemas.payment import ProductItem
from app.services.payment_store import PaymentStore
from app.utils.mercadopago import MercadoPagoClient

logger = logging.getLogger(__name__)


def money(x: Decimal | float) -> float:
    return float(Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_amount(products: List[ProductItem]) -> float:
    # Summed as Decimal so the total does not depend on product order
    total = sum((Decimal(str(product.unit_price)) for product in products), Decimal("0"))
    return money(total)


class PaymentService:
    def __init__(
            self,
            store: PaymentStore,
            mercadopago: MercadoPagoClient,
            settings: Settings
    ):
        self.store = store
        self.mercadopago = mercadopago
        self.settings = settings

    def build_qr_payload(self, order_id: str, products: List[ProductItem], amount: float) -> Dict[str, Any]:
        return {
            "external_reference": order_id,
            "title": "Product order",
            "description": "Purchase description.",
            "notification_url": self.settings.MERCADOPAGO_NOTIFICATION_URL,
            "total_amount": amount,
            "items": [
                {
                    "id": product.id,
                    "category_id": self.settings.MERCADOPAGO_ITEM_CATEGORY,
                    "currency_id": self.settings.MERCADOPAGO_CURRENCY,
                    "description": f"Product: {product.name}",
                    "picture_url": None,
                    "title": product.name,
                    "quantity": 1,
                    "unit_measure": "unit",
                    "unit_price": money(product.unit_price),
                    "total_amount": money(product.unit_price),
                }
                for product in products
            ],
            "cash_out": {"amount": 0},
        }

    async def process_order_payment(
            self,
            order_id: str,
            client_id: str,
            products: List[ProductItem]
    ) -> Dict[str, str]:
        """
        Creates a QR order on Mercado Pago and stores the Pending payment.
        Provider -> Store -> Caller. Nothing is stored when the provider fails.
        """
        if not products:
            raise ValidationError("At least one product is required")
        if any(product.unit_price < 0 for product in products):
            raise ValidationError("Product unitPrice must not be negative")

        logger.info(f"Processing payment for order {order_id}")
        amount = compute_amount(products)
        payload = self.build_qr_payload(order_id, products, amount)
        logger.debug(f"Sending request to Mercado Pago: {payload}")

        # PaymentProviderError propagates untouched
        response = await self.mercadopago.create_qr_order(payload)
        logger.debug(f"Received response from Mercado Pago: {response}")
        qr_code = response.get("qr_data")
        if not qr_code:
            raise PaymentProviderError(f"Mercado Pago response for order {order_id} has no qr_data")

        payment = Payment(
            order_id=order_id,
            client_id=client_id,
            products=[product.model_dump(by_alias=True) for product in products],
            amount=amount,
            status=PaymentStatus.PENDING,
            qr_code=qr_code,
        )

        try:
            saved = await self.store.create(payment)
        except StorageError:
            logger.error(
                f"QR created on Mercado Pago for order {order_id} but the payment could not be stored; "
                f"the provider order is orphaned until the order is paid again",
                exc_info=True,
            )
            raise

        logger.info(f"Payment {saved.id} saved for order {order_id} (amount={amount})")
        return {"orderId": order_id, "qrCode": qr_code}
