from typing import List
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from app.db.models.payment import PaymentStatus


class ProductItem(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    unit_price: float = Field(..., alias="unitPrice", ge=0)

    model_config = ConfigDict(populate_by_name=True)


class PaymentCreateRequest(BaseModel):
    """Incoming payment request. totalAmount is accepted but recomputed from products."""
    order_id: str = Field(..., alias="orderId", min_length=1)
    client_id: str = Field(..., alias="clientId", min_length=1)
    products: List[ProductItem] = Field(..., min_length=1)
    total_amount: float | None = Field(None, alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)


class PaymentCreateResponse(BaseModel):
    order_id: str = Field(serialization_alias="orderId")
    qr_code: str = Field(serialization_alias="qrCode")


class PaymentRecordResponse(BaseModel):
    id: int
    order_id: str = Field(serialization_alias="orderId")
    client_id: str = Field(serialization_alias="clientId")
    products: list
    amount: float
    status: PaymentStatus
    qr_code: str = Field(serialization_alias="qrCode")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime | None = Field(None, serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)
