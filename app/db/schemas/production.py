from pydantic import BaseModel, Field


class OrderStatusUpdateRequest(BaseModel):
    # Optional so a missing status is answered with 400, not a schema error
    status: str | None = None


class OrderStatusUpdateResponse(BaseModel):
    message: str
    order_id: str = Field(serialization_alias="orderId")
    status: str


class MerchantOrderResponse(BaseModel):
    order_id: str | None = Field(None, serialization_alias="orderId")
    status: str
