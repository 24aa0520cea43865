"""Webhook envelope parsing and event routing."""

from pydantic import ValidationError

from boglepay.models.enums import EventKind
from boglepay.models.errors import MalformedPayloadError
from boglepay.models.webhook import WebhookEnvelope

# Event types BoglePay sends, mapped to the handler that applies them
EVENT_ROUTES: dict[str, EventKind] = {
    "payment.succeeded": EventKind.SUCCEEDED,
    "checkout.completed": EventKind.SUCCEEDED,
    "payment.failed": EventKind.FAILED,
    "checkout.failed": EventKind.FAILED,
    "refund.created": EventKind.REFUND,
    "refund.succeeded": EventKind.REFUND,
}


def parse_envelope(payload: bytes) -> WebhookEnvelope:
    """Decode a raw webhook body.

    Args:
        payload: Raw request body bytes

    Returns:
        Parsed WebhookEnvelope

    Raises:
        MalformedPayloadError: If the body is empty, not JSON, or not an
            object with a string ``event_type`` and object ``data``.
    """
    if not payload or not payload.strip():
        raise MalformedPayloadError(details={"error": "empty payload"})

    try:
        return WebhookEnvelope.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedPayloadError(details={"error": str(e.errors()[0]["msg"])}) from e


def route_event(event_type: str) -> EventKind | None:
    """Return the handler kind for an event type, or None if unhandled."""
    return EVENT_ROUTES.get(event_type)
