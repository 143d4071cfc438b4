import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.core.exceptions import RelayError

logger = logging.getLogger(__name__)


def _describe(e: httpx.HTTPError) -> str:
    if isinstance(e, httpx.HTTPStatusError):
        return e.response.text or str(e.response.status_code)
    return str(e) or e.__class__.__name__


class OrderStatusRelay:
    """Forwards order-status reads and writes to the downstream order service."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.client = http_client
        self.base_url = settings.ORDER_SERVICE_URL.rstrip("/")
        self.timeout = settings.HTTP_TIMEOUT_SECONDS

    async def update_order_status(self, order_id: str, status: str) -> Any:
        logger.debug(f"Updating order {order_id} to status: {status}")
        url = f"{self.base_url}/orders/{quote(order_id, safe='')}/status"
        try:
            response = await self.client.patch(
                url,
                json={"status": status},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to update order {order_id}: {_describe(e)}")
            raise RelayError(order_id, status, _describe(e)) from e

        logger.info(f"Order {order_id} updated to '{status}' successfully.")
        try:
            return response.json()
        except ValueError:
            return response.text or None

    async def get_orders_by_status(self, status: str) -> Any:
        logger.debug(f"Fetching orders with status: {status}")
        url = f"{self.base_url}/orders/status/{quote(status, safe='')}"
        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error fetching orders: {_describe(e)}")
            raise RelayError(None, status, _describe(e)) from e
        except ValueError as e:
            raise RelayError(None, status, f"invalid body: {e}") from e
