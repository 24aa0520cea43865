"""Applies verified payment events to an order's payment state.

Transitions (payment dimension only):

- pending -> paid on a succeeded event or a confirmed return-URL poll.
  Both paths go through ``mark_paid``, whose store-level conditional write
  guarantees a single paid transition per order.
- pending -> failed on a failed event. Applied unconditionally; repeats
  re-apply the same status and add another note.
- refunds are recorded as notes only. Redelivery of the same refund event
  appends a duplicate note.
"""

import logging
from typing import Any, Mapping

from boglepay.models.checkout import CheckoutSession
from boglepay.models.enums import OrderStatus, ProcessingResult

from .order_store import OrderHandle, OrderStore

DEFAULT_FAILURE_MESSAGE = "Payment failed"


def extract_transaction_id(data: Mapping[str, Any]) -> str:
    """Transaction reference of a succeeded event: ``transaction_id``, else ``id``."""
    for key in ("transaction_id", "id"):
        value = data.get(key)
        if value is not None:
            return str(value)
    return ""


def format_amount(amount_cents: Any, currency: str) -> str:
    """Render an amount in cents as ``12.34 USD``."""
    try:
        amount = int(amount_cents) / 100
    except (TypeError, ValueError):
        amount = 0.0
    return f"{amount:.2f} {currency}"


class ReconciliationService:
    """State machine for webhook and return-flow payment updates."""

    def __init__(self, store: OrderStore, logger: logging.Logger | None = None) -> None:
        """Initialize reconciliation service.

        Args:
            store: Order store providing the atomic paid transition
            logger: Logger for audit messages
        """
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    def mark_paid(self, order: OrderHandle, transaction_id: str, source: str) -> bool:
        """Move an order to paid exactly once.

        Args:
            order: Order to update
            transaction_id: Canonical payment reference
            source: Human-readable origin for the audit note

        Returns:
            True if this call performed the transition, False if the order
            was already paid (checked before and during the write).
        """
        if order.is_paid():
            self._logger.debug("Order %s already paid, skipping", order.get_id())
            return False

        if not self._store.mark_paid(order, transaction_id):
            self._logger.info(
                "Order %s was marked paid concurrently, skipping", order.get_id()
            )
            return False

        order.append_note(
            f"Payment confirmed via BoglePay {source}. Transaction ID: {transaction_id}"
        )
        return True

    def apply_succeeded(self, order: OrderHandle, data: Mapping[str, Any]) -> ProcessingResult:
        """Apply a payment.succeeded / checkout.completed event."""
        transaction_id = extract_transaction_id(data)

        if not self.mark_paid(order, transaction_id, "webhook"):
            return ProcessingResult.DUPLICATE

        session_id = data.get("checkout_session_id")
        if session_id is not None:
            order.set_metadata("checkout_session_id", str(session_id))

        self._logger.info(
            "Order %s marked as paid via webhook (transaction %s)",
            order.get_id(),
            transaction_id,
        )
        return ProcessingResult.SUCCESS

    def apply_failed(self, order: OrderHandle, data: Mapping[str, Any]) -> ProcessingResult:
        """Apply a payment.failed / checkout.failed event."""
        reason = data.get("failure_message") or DEFAULT_FAILURE_MESSAGE

        order.set_status(OrderStatus.FAILED)
        order.append_note(f"Payment failed via BoglePay: {reason}")

        self._logger.info("Order %s marked as failed via webhook: %s", order.get_id(), reason)
        return ProcessingResult.SUCCESS

    def apply_refund(self, order: OrderHandle, data: Mapping[str, Any]) -> ProcessingResult:
        """Record a refund.created / refund.succeeded event as an order note."""
        amount = format_amount(data.get("amount_cents", 0), order.get_order().currency)
        refund_id = str(data.get("id") or "")

        order.append_note(f"Refund of {amount} processed via BoglePay. Refund ID: {refund_id}")

        self._logger.info(
            "Refund noted via webhook for order %s (refund %s, amount %s)",
            order.get_id(),
            refund_id,
            amount,
        )
        return ProcessingResult.NOTED

    def confirm_from_session(
        self, order: OrderHandle, session: CheckoutSession
    ) -> ProcessingResult:
        """Apply a checkout session fetched on the customer's return.

        Returns:
            SUCCESS if the order was marked paid now, DUPLICATE if it was
            already paid, PENDING if the session is not paid yet.
        """
        if not session.is_confirmed:
            return ProcessingResult.PENDING

        if not self.mark_paid(order, session.transaction_id or "", "return"):
            return ProcessingResult.DUPLICATE

        self._logger.info(
            "Payment completed on return for order %s (transaction %s)",
            order.get_id(),
            session.transaction_id,
        )
        return ProcessingResult.SUCCESS
