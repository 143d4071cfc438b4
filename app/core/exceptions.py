class GatewayError(Exception):
    """Base class for errors raised by the payment gateway services."""


class ValidationError(GatewayError):
    """A required field is missing or invalid."""


class PaymentProviderError(GatewayError):
    """A call to Mercado Pago failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RelayError(GatewayError):
    """The downstream order service rejected or did not answer a call."""

    def __init__(self, order_id: str | None, status: str | None, message: str):
        if order_id is not None:
            text = f"Error updating order {order_id} to '{status}': {message}"
        else:
            text = f"Error fetching orders with status '{status}': {message}"
        super().__init__(text)
        self.order_id = order_id
        self.status = status
        self.reason = message


class StorageError(GatewayError):
    """Reading or writing a payment record failed."""


class ReconcileError(GatewayError):
    """Webhook processing failed and the failure policy asks to escalate."""
