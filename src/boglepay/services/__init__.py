"""Gateway services: signature verification, event routing, order resolution,
reconciliation, the BoglePay API client and the storage layer."""

from .boglepay_client import BoglePayClient, BoglePayClientError
from .checkout_service import CheckoutService
from .dynamodb import DynamoDBService
from .events import EVENT_ROUTES, parse_envelope, route_event
from .order_resolver import OrderResolver
from .order_store import DynamoDBOrder, DynamoDBOrderStore, OrderHandle, OrderStore
from .reconciliation import ReconciliationService
from .signature import SignatureVerifier, compute_signature, parse_signature_header
from .ssm_service import SSMService, SSMServiceError
from .webhook_handler import WebhookHandler

__all__ = [
    # API client
    "BoglePayClient",
    "BoglePayClientError",
    # Checkout flow
    "CheckoutService",
    # Storage
    "DynamoDBService",
    "DynamoDBOrder",
    "DynamoDBOrderStore",
    "OrderHandle",
    "OrderStore",
    "SSMService",
    "SSMServiceError",
    # Webhook pipeline
    "EVENT_ROUTES",
    "OrderResolver",
    "ReconciliationService",
    "SignatureVerifier",
    "WebhookHandler",
    "compute_signature",
    "parse_envelope",
    "parse_signature_header",
    "route_event",
]
