"""Webhook endpoints for BoglePay event deliveries.

Two bindings share one pipeline:
- /wc-api/boglepay_webhook (generic callback URL configured in BoglePay)
- /boglepay/v1/webhook (REST binding)

Neither requires authentication; deliveries are authenticated by their
HMAC signature. Any delivery that passes the signature check is
acknowledged with 200 so BoglePay does not retry it.
"""

import logging

from fastapi import APIRouter, Depends, Request

from boglepay.config import GatewaySettings
from boglepay.models.errors import InvalidSignatureError
from boglepay.services.webhook_handler import WebhookHandler
from boglepay_api.dependencies import get_settings, get_webhook_handler
from boglepay_api.models.webhooks import InvalidSignatureResponse, WebhookAck

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])

WEBHOOK_RESPONSES = {
    200: {
        "description": "Delivery received (including ignored or unresolved events)",
        "model": WebhookAck,
    },
    401: {
        "description": "Signature missing, stale or invalid",
        "model": InvalidSignatureResponse,
    },
}


async def _receive(
    request: Request, handler: WebhookHandler, settings: GatewaySettings
) -> WebhookAck:
    payload = await request.body()
    signature = request.headers.get(settings.signature_header)

    try:
        result = handler.handle(payload, signature)
    except InvalidSignatureError:
        raise
    except Exception:
        # Apply failures are logged and still acknowledged
        logger.exception("Failed to apply BoglePay webhook")
        return WebhookAck()

    logger.debug(
        "Webhook processed: %s (%s)", result.processing_result.value, result.event_type
    )
    return WebhookAck()


@router.post(
    "/wc-api/boglepay_webhook",
    summary="Receive BoglePay webhook (callback URL)",
    description="""
Callback endpoint for BoglePay events. Handles:
- payment.succeeded / checkout.completed: marks the order paid
- payment.failed / checkout.failed: marks the order failed
- refund.created / refund.succeeded: adds a refund note

**No authentication required**: the signature header is verified against
the webhook secret when one is configured.
""",
    response_model=WebhookAck,
    responses=WEBHOOK_RESPONSES,
)
async def handle_callback_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
    settings: GatewaySettings = Depends(get_settings),
) -> WebhookAck:
    """Handle a BoglePay delivery on the callback URL."""
    return await _receive(request, handler, settings)


@router.post(
    "/boglepay/v1/webhook",
    summary="Receive BoglePay webhook (REST)",
    description="Same pipeline as the callback URL, exposed as a REST route.",
    response_model=WebhookAck,
    responses=WEBHOOK_RESPONSES,
)
async def handle_rest_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
    settings: GatewaySettings = Depends(get_settings),
) -> WebhookAck:
    """Handle a BoglePay delivery on the REST route."""
    return await _receive(request, handler, settings)
