"""Request and response models for the gateway API."""

from boglepay_api.models.checkout import CheckoutResponse, RefundRequest
from boglepay_api.models.webhooks import InvalidSignatureResponse, WebhookAck

__all__ = [
    "CheckoutResponse",
    "InvalidSignatureResponse",
    "RefundRequest",
    "WebhookAck",
]
