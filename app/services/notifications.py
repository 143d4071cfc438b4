"""
Mercado Pago notification envelopes.

The provider delivers webhooks in several shapes. `parse_notification` turns a
raw body into exactly one of the event types below so the reconciler can
switch on the type instead of inspecting fields.

    {"action": "payment.updated", "type": "payment", "data": {"id": "123"}}
    {"topic": "payment", "resource": "123"}
    {"topic": "merchant_order", "resource": "https://.../merchant_orders/456"}
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Union

PAYMENT_ACTIONS = ("payment.updated", "payment.created")


@dataclass(frozen=True)
class PaymentEvent:
    payment_id: str


@dataclass(frozen=True)
class MerchantOrderEvent:
    merchant_order_id: str


@dataclass(frozen=True)
class UnrecognizedEvent:
    body: Any = field(default=None)


NotificationEvent = Union[PaymentEvent, MerchantOrderEvent, UnrecognizedEvent]


def _as_id(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        # control characters never appear in provider ids
        if not text or not text.isprintable():
            return None
        return text
    return None


def _parse_action_shape(body: Dict[str, Any]) -> PaymentEvent | None:
    if body.get("action") not in PAYMENT_ACTIONS or body.get("type") != "payment":
        return None
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    payment_id = _as_id(data.get("id"))
    return PaymentEvent(payment_id) if payment_id else None


def _parse_topic_shape(body: Dict[str, Any]) -> PaymentEvent | MerchantOrderEvent | None:
    resource = _as_id(body.get("resource"))
    if not resource:
        return None
    topic = body.get("topic")
    if topic == "payment":
        return PaymentEvent(resource)
    if topic == "merchant_order":
        # resource is either the bare id or the merchant order URL
        merchant_order_id = resource.rstrip("/").rsplit("/", 1)[-1]
        return MerchantOrderEvent(merchant_order_id) if merchant_order_id else None
    return None


def parse_notification(body: Any) -> NotificationEvent:
    if not isinstance(body, dict):
        return UnrecognizedEvent(body)

    for parser in (_parse_action_shape, _parse_topic_shape):
        event = parser(body)
        if event is not None:
            return event
    return UnrecognizedEvent(body)
