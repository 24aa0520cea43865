"""Webhook handler for processing BoglePay events.

Runs the inbound pipeline separately from HTTP routing:
verify signature -> parse envelope -> route -> resolve order -> apply.
"""

import logging

from boglepay.models.enums import EventKind, ProcessingResult
from boglepay.models.errors import (
    InvalidSignatureError,
    MalformedPayloadError,
    UnresolvedOrderError,
)
from boglepay.models.webhook import WebhookResult
from boglepay.utils.logging import log_webhook_event

from .events import parse_envelope, route_event
from .order_resolver import OrderResolver
from .reconciliation import ReconciliationService, extract_transaction_id
from .signature import SignatureVerifier


class WebhookHandler:
    """Handler for BoglePay webhook deliveries.

    Only an invalid signature is raised to the caller. Malformed payloads,
    unhandled event types and unresolved orders are reported through the
    returned WebhookResult and never change any order. Store failures while
    applying an event propagate.
    """

    def __init__(
        self,
        webhook_secret: str,
        verifier: SignatureVerifier,
        resolver: OrderResolver,
        reconciliation: ReconciliationService,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize webhook handler.

        Args:
            webhook_secret: Signing secret; empty disables verification
            verifier: Signature verifier
            resolver: Maps event data to an order
            reconciliation: Applies events to the resolved order
            logger: Logger for pipeline outcomes
        """
        self._secret = webhook_secret
        self._verifier = verifier
        self._resolver = resolver
        self._reconciliation = reconciliation
        self._logger = logger or logging.getLogger(__name__)

    def handle(self, payload: bytes, signature: str | None) -> WebhookResult:
        """Process one webhook delivery.

        Args:
            payload: Raw request body bytes
            signature: Value of the signature header, or None if absent

        Returns:
            WebhookResult describing what happened

        Raises:
            InvalidSignatureError: If a secret is configured and the payload
                does not verify.
        """
        if not self._secret:
            self._logger.warning(
                "BoglePay webhook secret not configured; accepting unverified webhook"
            )
        elif not self._verifier.verify(payload, signature, self._secret):
            self._logger.error("BoglePay webhook signature verification failed")
            raise InvalidSignatureError()

        try:
            envelope = parse_envelope(payload)
        except MalformedPayloadError as e:
            log_webhook_event(
                self._logger,
                "",
                result=ProcessingResult.MALFORMED.value,
                error=(e.details or {}).get("error", e.message),
            )
            return WebhookResult(
                processing_result=ProcessingResult.MALFORMED, message=e.message
            )

        event_type = envelope.event_type
        data = envelope.data
        log_webhook_event(self._logger, event_type, result="received")

        kind = route_event(event_type)
        if kind is None:
            log_webhook_event(
                self._logger, event_type, result=ProcessingResult.IGNORED.value
            )
            return WebhookResult(
                processing_result=ProcessingResult.IGNORED,
                event_type=event_type,
                message=f"Event type '{event_type}' not handled",
            )

        try:
            order = self._resolver.resolve(data)
        except UnresolvedOrderError as e:
            log_webhook_event(
                self._logger,
                event_type,
                result=ProcessingResult.UNRESOLVED.value,
                **(e.details or {}),
            )
            return WebhookResult(
                processing_result=ProcessingResult.UNRESOLVED,
                event_type=event_type,
                message=e.message,
            )

        if kind == EventKind.SUCCEEDED:
            result = self._reconciliation.apply_succeeded(order, data)
        elif kind == EventKind.FAILED:
            result = self._reconciliation.apply_failed(order, data)
        else:
            result = self._reconciliation.apply_refund(order, data)

        log_webhook_event(
            self._logger,
            event_type,
            order_id=order.get_id(),
            transaction_id=extract_transaction_id(data) if kind == EventKind.SUCCEEDED else None,
            result=result.value,
        )
        return WebhookResult(
            processing_result=result,
            event_type=event_type,
            order_id=order.get_id(),
        )
