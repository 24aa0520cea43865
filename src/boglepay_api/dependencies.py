"""FastAPI dependency injection providers for gateway services.

Factory functions use @lru_cache so each service is built once per process
and shared between requests. Core services never read global state; the
settings loaded here are passed to them explicitly.

Usage in routes:
    from boglepay_api.dependencies import get_webhook_handler

    @router.post("/webhook")
    async def webhook(
        handler: WebhookHandler = Depends(get_webhook_handler),
    ):
        ...

Service Dependency Graph:
    GatewaySettings (get_settings)
    DynamoDBService
        └── DynamoDBOrderStore
                ├── ReconciliationService
                │       ├── WebhookHandler (+ SignatureVerifier, OrderResolver)
                │       └── CheckoutService (+ BoglePayClient)

Testing:
    Use reset_services() to clear cached instances between tests.
"""

import logging
from functools import lru_cache

from boglepay.config import GatewaySettings, load_settings
from boglepay.services.boglepay_client import BoglePayClient
from boglepay.services.checkout_service import CheckoutService
from boglepay.services.dynamodb import DynamoDBService
from boglepay.services.order_resolver import OrderResolver
from boglepay.services.order_store import DynamoDBOrderStore
from boglepay.services.reconciliation import ReconciliationService
from boglepay.services.signature import SignatureVerifier
from boglepay.services.webhook_handler import WebhookHandler
from boglepay.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> GatewaySettings:
    """Get cached GatewaySettings loaded from env and SSM.

    Configuration problems are logged once, when the settings are first
    loaded, so they show up on Lambda as well as under uvicorn.
    """
    settings = load_settings()
    for warning in settings.configuration_warnings():
        logger.warning(warning)
    return settings


@lru_cache
def get_gateway_logger() -> logging.Logger:
    """Get the package logger configured for the settings' debug flag."""
    return configure_logging(debug=get_settings().debug)


@lru_cache
def get_dynamodb_service() -> DynamoDBService:
    return DynamoDBService(environment=get_settings().environment)


@lru_cache
def get_order_store() -> DynamoDBOrderStore:
    """Get cached DynamoDBOrderStore instance.

    Returns:
        DynamoDBOrderStore configured with the DynamoDB service.
    """
    return DynamoDBOrderStore(db=get_dynamodb_service())


@lru_cache
def get_boglepay_client() -> BoglePayClient:
    """Get cached BoglePayClient for the active mode."""
    settings = get_settings()
    return BoglePayClient(
        api_key=settings.api_key,
        api_url=settings.api_url,
        sandbox_mode=settings.sandbox_mode,
        timeout=settings.request_timeout,
        logger=get_gateway_logger(),
    )


@lru_cache
def get_reconciliation_service() -> ReconciliationService:
    return ReconciliationService(store=get_order_store(), logger=get_gateway_logger())


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    """Get cached WebhookHandler instance.

    Returns:
        WebhookHandler wired with verifier, resolver and reconciliation.
    """
    settings = get_settings()
    gateway_logger = get_gateway_logger()
    return WebhookHandler(
        webhook_secret=settings.webhook_secret,
        verifier=SignatureVerifier(
            tolerance_seconds=settings.replay_tolerance_seconds, logger=gateway_logger
        ),
        resolver=OrderResolver(store=get_order_store(), logger=gateway_logger),
        reconciliation=get_reconciliation_service(),
        logger=gateway_logger,
    )


@lru_cache
def get_checkout_service() -> CheckoutService:
    """Get cached CheckoutService instance.

    Returns:
        CheckoutService configured with settings, store and API client.
    """
    return CheckoutService(
        settings=get_settings(),
        store=get_order_store(),
        client=get_boglepay_client(),
        reconciliation=get_reconciliation_service(),
        logger=get_gateway_logger(),
    )


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    get_settings.cache_clear()
    get_gateway_logger.cache_clear()
    get_dynamodb_service.cache_clear()
    get_order_store.cache_clear()
    get_boglepay_client.cache_clear()
    get_reconciliation_service.cache_clear()
    get_webhook_handler.cache_clear()
    get_checkout_service.cache_clear()
