"""Unit tests for the webhook processing pipeline.

Covers the end-to-end flow from raw payload to order state:
- signature rejection
- malformed, unhandled and unresolved deliveries
- succeeded, failed and refund events applied to stored orders
"""

import logging
import time
from unittest.mock import MagicMock

import pytest

from boglepay.models.enums import OrderStatus, ProcessingResult
from boglepay.models.errors import InvalidSignatureError
from boglepay.services.order_resolver import OrderResolver
from boglepay.services.reconciliation import ReconciliationService
from boglepay.services.signature import SignatureVerifier
from boglepay.services.webhook_handler import WebhookHandler
from conftest import TEST_WEBHOOK_SECRET, signed_header, webhook_body


def _handler(store, secret: str = TEST_WEBHOOK_SECRET) -> WebhookHandler:
    return WebhookHandler(
        webhook_secret=secret,
        verifier=SignatureVerifier(),
        resolver=OrderResolver(store=store),
        reconciliation=ReconciliationService(store=store),
    )


@pytest.fixture
def handler(order_store) -> WebhookHandler:
    return _handler(order_store)


class TestSignedDeliveries:
    def test_succeeded_event_marks_order_paid(self, make_order, handler, order_store) -> None:
        make_order(42)
        payload = webhook_body(
            "payment.succeeded",
            {"transaction_id": "txn_1", "custom_fields": {"woo_order_id": 42}},
        )

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.SUCCESS
        assert result.order_id == 42
        stored = order_store.get_order(42).get_order()
        assert stored.status == OrderStatus.PAID
        assert stored.transaction_id == "txn_1"
        assert len(stored.notes) == 1

    def test_redelivery_is_duplicate(self, make_order, handler, order_store) -> None:
        make_order(42)
        payload = webhook_body(
            "checkout.completed",
            {"transaction_id": "txn_1", "custom_fields": {"woo_order_id": 42}},
        )

        handler.handle(payload, signed_header(payload))
        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.DUPLICATE
        assert len(order_store.get_order(42).get_order().notes) == 1

    def test_failed_event_by_session_id(self, make_order, handler, order_store) -> None:
        make_order(42, metadata={"checkout_session_id": "cs_1"})
        payload = webhook_body(
            "payment.failed", {"checkout_session_id": "cs_1", "failure_message": "Declined"}
        )

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.SUCCESS
        stored = order_store.get_order(42).get_order()
        assert stored.status == OrderStatus.FAILED
        assert stored.notes == ["Payment failed via BoglePay: Declined"]

    def test_refund_event_adds_note(self, make_order, handler, order_store) -> None:
        make_order(42, status=OrderStatus.PAID, metadata={"public_token": "pt_1"})
        payload = webhook_body(
            "refund.succeeded", {"id": "re_1", "amount_cents": 2599, "public_token": "pt_1"}
        )

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.NOTED
        stored = order_store.get_order(42).get_order()
        assert stored.status == OrderStatus.PAID
        assert stored.notes == ["Refund of 25.99 USD processed via BoglePay. Refund ID: re_1"]


class TestRejectedAndSkippedDeliveries:
    def test_invalid_signature_raises_without_state_change(
        self, make_order, handler, order_store
    ) -> None:
        make_order(42)
        payload = webhook_body("payment.succeeded", {"custom_fields": {"woo_order_id": 42}})
        header = signed_header(payload, secret="whsec_wrong")

        with pytest.raises(InvalidSignatureError):
            handler.handle(payload, header)

        assert order_store.get_order(42).get_status() == OrderStatus.PENDING

    def test_missing_signature_raises(self, handler) -> None:
        with pytest.raises(InvalidSignatureError):
            handler.handle(webhook_body("payment.succeeded", {}), None)

    def test_stale_signature_raises(self, make_order, handler, order_store) -> None:
        make_order(42)
        payload = webhook_body("payment.succeeded", {"custom_fields": {"woo_order_id": 42}})
        header = signed_header(payload, timestamp=int(time.time()) - 600)

        with pytest.raises(InvalidSignatureError):
            handler.handle(payload, header)

        assert order_store.get_order(42).get_status() == OrderStatus.PENDING

    def test_malformed_payload(self, handler) -> None:
        payload = b"{not json"

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.MALFORMED

    def test_unknown_event_type_skips_order_lookup(self) -> None:
        store = MagicMock()
        handler = _handler(store)
        payload = webhook_body("customer.created", {"custom_fields": {"woo_order_id": 42}})

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.IGNORED
        assert result.event_type == "customer.created"
        store.get_order.assert_not_called()
        store.find_orders_by_metadata.assert_not_called()

    def test_missing_event_type_is_ignored(self, handler) -> None:
        payload = b'{"data": {}}'

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.IGNORED

    def test_unresolved_order(self, handler, caplog) -> None:
        payload = webhook_body("payment.succeeded", {"custom_fields": {"woo_order_id": 999}})

        with caplog.at_level(logging.ERROR):
            result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.UNRESOLVED
        assert "unresolved" in caplog.text

    def test_store_failure_propagates(self) -> None:
        store = MagicMock()
        store.get_order.return_value.is_paid.return_value = False
        store.mark_paid.side_effect = RuntimeError("table unavailable")
        handler = _handler(store)
        payload = webhook_body("payment.succeeded", {"custom_fields": {"woo_order_id": 42}})

        with pytest.raises(RuntimeError):
            handler.handle(payload, signed_header(payload))


class TestUnverifiedMode:
    def test_empty_secret_accepts_unsigned_payload(
        self, make_order, order_store, caplog
    ) -> None:
        make_order(42)
        handler = _handler(order_store, secret="")
        payload = webhook_body(
            "payment.succeeded",
            {"transaction_id": "txn_1", "custom_fields": {"woo_order_id": 42}},
        )

        with caplog.at_level(logging.WARNING):
            result = handler.handle(payload, None)

        assert result.processing_result == ProcessingResult.SUCCESS
        assert "not configured" in caplog.text
        assert order_store.get_order(42).is_paid()


class TestLiteralDeliveries:
    def test_card_declined_fails_resolved_order(self, make_order, order_store) -> None:
        make_order(42)
        resolver = MagicMock()
        resolver.resolve.return_value = order_store.get_order(42)
        handler = WebhookHandler(
            webhook_secret=TEST_WEBHOOK_SECRET,
            verifier=SignatureVerifier(),
            resolver=resolver,
            reconciliation=ReconciliationService(store=order_store),
        )
        payload = b'{"event_type":"payment.failed","data":{"failure_message":"card_declined"}}'

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.SUCCESS
        resolver.resolve.assert_called_once_with({"failure_message": "card_declined"})
        stored = order_store.get_order(42).get_order()
        assert stored.status == OrderStatus.FAILED
        assert any("card_declined" in note for note in stored.notes)

    def test_unknown_thing_acknowledged_without_lookup(self) -> None:
        resolver = MagicMock()
        reconciliation = MagicMock()
        handler = WebhookHandler(
            webhook_secret=TEST_WEBHOOK_SECRET,
            verifier=SignatureVerifier(),
            resolver=resolver,
            reconciliation=reconciliation,
        )
        payload = b'{"event_type":"unknown.thing"}'

        result = handler.handle(payload, signed_header(payload))

        assert result.processing_result == ProcessingResult.IGNORED
        assert result.event_type == "unknown.thing"
        resolver.resolve.assert_not_called()
        assert reconciliation.method_calls == []
