"""Pydantic models for the BoglePay gateway."""

from .checkout import CheckoutRedirect, CheckoutSession, ReturnOutcome
from .enums import (
    CONFIRMED_SESSION_STATUSES,
    CheckoutSessionStatus,
    EventKind,
    OrderStatus,
    ProcessingResult,
    SignatureScheme,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    ErrorCode,
    ErrorResponse,
    GatewayError,
    InvalidSignatureError,
    MalformedPayloadError,
    UnresolvedOrderError,
)
from .order import Order, OrderLineItem
from .webhook import SignedHeader, WebhookEnvelope, WebhookResult

__all__ = [
    # Enums
    "CONFIRMED_SESSION_STATUSES",
    "CheckoutSessionStatus",
    "EventKind",
    "OrderStatus",
    "ProcessingResult",
    "SignatureScheme",
    # Orders
    "Order",
    "OrderLineItem",
    # Checkout
    "CheckoutRedirect",
    "CheckoutSession",
    "ReturnOutcome",
    # Webhooks
    "SignedHeader",
    "WebhookEnvelope",
    "WebhookResult",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "ErrorCode",
    "ErrorResponse",
    "GatewayError",
    "InvalidSignatureError",
    "MalformedPayloadError",
    "UnresolvedOrderError",
]
