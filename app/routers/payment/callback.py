import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.dependencies import get_reconciler
from app.core.exceptions import GatewayError, ReconcileError
from app.db.schemas.production import MerchantOrderResponse
from app.services.reconciler import NotificationReconciler

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("")
async def handle_webhook(
        request: Request,
        reconciler: NotificationReconciler = Depends(get_reconciler),
):
    """
    Mercado Pago notification endpoint.
    Answers 200 whatever the outcome so the provider does not start a
    redelivery storm; only unparseable bodies are rejected.
    """
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

    try:
        outcome = await reconciler.handle_webhook(body)
    except ReconcileError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"status": "ok", "outcome": outcome.value}

@router.post("/merchant-orders/{merchant_order_id}", response_model=MerchantOrderResponse)
async def process_merchant_order(
        merchant_order_id: str,
        reconciler: NotificationReconciler = Depends(get_reconciler),
):
    try:
        result = await reconciler.process_merchant_order_notification(merchant_order_id)
    except GatewayError as e:
        logger.error(f"Failed to process merchant order notification {merchant_order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process merchant order notification")

    return MerchantOrderResponse(order_id=result["orderId"], status=result["status"])
