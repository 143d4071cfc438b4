import logging
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_payment_service, get_payment_store
from app.core.exceptions import PaymentProviderError, StorageError, ValidationError
from app.db.schemas.payment import PaymentCreateRequest, PaymentCreateResponse, PaymentRecordResponse
from app.services.payment_service import PaymentService
from app.services.payment_store import PaymentStore

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=PaymentCreateResponse, status_code=status.HTTP_201_CREATED)
async def process_payment(
        request: PaymentCreateRequest,
        service: PaymentService = Depends(get_payment_service),
):
    """
    Create a Mercado Pago QR code for an order.
    totalAmount from the body is ignored; the amount is recomputed from products.
    """
    logger.info(f"Payment requested for order {request.order_id} ({len(request.products)} products)")
    try:
        result = await service.process_order_payment(
            request.order_id,
            request.client_id,
            request.products,
        )
    except ValidationError as e:
        logger.warning(f"Payment validation failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PaymentProviderError as e:
        logger.error(f"Failed to create QR Code: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to create QR Code")
    except StorageError as e:
        logger.error(f"Failed to store payment: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to store payment")

    return PaymentCreateResponse(order_id=result["orderId"], qr_code=result["qrCode"])

@router.get("/{payment_id}", response_model=PaymentRecordResponse)
async def get_payment(
        payment_id: int,
        store: PaymentStore = Depends(get_payment_store),
):
    try:
        payment = await store.get(payment_id)
    except StorageError as e:
        logger.error(f"Failed to read payment {payment_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to read payment")
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment
