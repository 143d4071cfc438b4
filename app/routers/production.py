import logging
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_order_relay
from app.core.exceptions import RelayError
from app.db.schemas.production import OrderStatusUpdateRequest, OrderStatusUpdateResponse
from app.services.order_relay import OrderStatusRelay

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/status/{order_status}")
async def get_orders_by_status(
        order_status: str,
        relay: OrderStatusRelay = Depends(get_order_relay),
):
    """
    Orders in a given status, as returned by the order service.
    """
    try:
        return await relay.get_orders_by_status(order_status)
    except RelayError as e:
        logger.error(f"Error fetching orders: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to fetch orders")

@router.patch("/{order_id}/status", response_model=OrderStatusUpdateResponse)
async def update_order_status(
        order_id: str,
        body: OrderStatusUpdateRequest | None = None,
        relay: OrderStatusRelay = Depends(get_order_relay),
):
    if body is None or not body.status:
        logger.warning(f"Invalid request for order {order_id}: status is missing")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    try:
        updated_order = await relay.update_order_status(order_id, body.status)
    except RelayError as e:
        logger.error(f"Error updating order status: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.debug(f"Order updated successfully: {updated_order}")
    return OrderStatusUpdateResponse(
        message="Order status updated successfully",
        order_id=order_id,
        status=body.status,
    )
