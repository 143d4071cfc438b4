import httpx
import logging
from typing import Any, Dict
from urllib.parse import quote
from app.core.config import Settings
from app.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)

class MercadoPagoClient:
    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.client = http_client
        self.base_url = settings.MERCADOPAGO_BASE_URL.rstrip("/")
        self.access_token = settings.MERCADOPAGO_ACCESS_TOKEN
        self.collector_id = settings.MERCADOPAGO_COLLECTOR_ID
        self.pos_id = settings.MERCADOPAGO_POS_ID
        self.timeout = settings.HTTP_TIMEOUT_SECONDS

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self.client.request(
                method, url, headers=self._get_headers(), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise PaymentProviderError(
                f"Mercado Pago returned {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PaymentProviderError(f"Mercado Pago request failed: {e}") from e
        except ValueError as e:
            raise PaymentProviderError(f"Mercado Pago returned an invalid body: {e}") from e

    async def create_qr_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = (
            f"{self.base_url}/instore/orders/qr/seller/collectors/"
            f"{self.collector_id}/pos/{self.pos_id}/qrs"
        )
        return await self._request("POST", url, json=payload)

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.base_url}/v1/payments/{quote(str(payment_id), safe='')}")

    async def get_merchant_order(self, merchant_order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self.base_url}/merchant_orders/{quote(str(merchant_order_id), safe='')}")
