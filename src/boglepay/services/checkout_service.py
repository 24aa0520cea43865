"""Hosted checkout flow: session creation, customer return and cancel.

The customer is redirected to the BoglePay hosted page at
``<hosted_checkout_url>/c/<public_token>``. On return the session is polled
once and, if paid, the order is confirmed through the same state machine
the webhook uses.
"""

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from boglepay.models.checkout import CheckoutRedirect, ReturnOutcome
from boglepay.models.enums import OrderStatus, ProcessingResult
from boglepay.models.errors import ErrorCode, GatewayError
from boglepay.models.order import Order
from boglepay.utils.logging import log_gateway_operation

from .boglepay_client import BoglePayClient, BoglePayClientError
from .order_store import OrderHandle, OrderStore
from .reconciliation import ReconciliationService

if TYPE_CHECKING:
    from boglepay.config import GatewaySettings

RETURN_PATH = "/wc-api/boglepay_return"
CANCEL_PATH = "/wc-api/boglepay_cancel"
SESSION_EXPIRY_MINUTES = 30

AWAITING_CONFIRMATION_NOTE = "Customer returned from BoglePay. Awaiting payment confirmation."
CANCELLED_NOTE = "Customer cancelled payment on BoglePay checkout page."


def replace_url_placeholders(url: str, order: Order) -> str:
    """Fill ``{order_id}``, ``{order_key}`` and ``{order_number}`` in a URL template."""
    replacements = {
        "{order_id}": str(order.order_id),
        "{order_key}": order.order_key,
        "{order_number}": order.order_number,
    }
    for placeholder, value in replacements.items():
        url = url.replace(placeholder, value)
    return url


class CheckoutService:
    """Starts hosted checkouts and handles the customer coming back."""

    def __init__(
        self,
        settings: "GatewaySettings",
        store: OrderStore,
        client: BoglePayClient,
        reconciliation: ReconciliationService,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize checkout service.

        Args:
            settings: Gateway settings (URLs and mode)
            store: Order store
            client: BoglePay API client
            reconciliation: State machine used to confirm returns
            logger: Logger for checkout operations
        """
        self._settings = settings
        self._store = store
        self._client = client
        self._reconciliation = reconciliation
        self._logger = logger or logging.getLogger(__name__)

    def _site_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._settings.site_url.rstrip('/')}/{path.lstrip('/')}"

    def _endpoint_url(self, path: str, order: Order) -> str:
        query = urlencode({"order_id": order.order_id, "key": order.order_key})
        return f"{self._site_url(path)}?{query}"

    def success_url(self, order: Order) -> str:
        """URL BoglePay sends the customer to after paying."""
        if self._settings.custom_success_url:
            return replace_url_placeholders(self._settings.custom_success_url, order)
        return self._endpoint_url(RETURN_PATH, order)

    def cancel_url(self, order: Order) -> str:
        """URL BoglePay sends the customer to after abandoning payment."""
        if self._settings.custom_cancel_url:
            return replace_url_placeholders(self._settings.custom_cancel_url, order)
        return self._endpoint_url(CANCEL_PATH, order)

    def thank_you_url(self, order: Order) -> str:
        return self._site_url(replace_url_placeholders(self._settings.thank_you_url, order))

    def checkout_page_url(self) -> str:
        return self._site_url(self._settings.checkout_url)

    def hosted_checkout_url(self, public_token: str) -> str:
        return f"{self._settings.hosted_checkout_url.rstrip('/')}/c/{public_token}"

    def build_checkout_params(self, order: Order) -> dict[str, Any]:
        """Build checkout session parameters from an order.

        Args:
            order: Order being paid

        Returns:
            Request body for creating a checkout session
        """
        line_items: list[dict[str, Any]] = [
            {"description": line.name, "amount_cents": line.total_cents}
            for line in order.line_items
        ]
        if order.shipping_cents > 0:
            line_items.append({"description": "Shipping", "amount_cents": order.shipping_cents})
        if order.tax_cents > 0:
            # Tax is already calculated by the store
            line_items.append(
                {"description": "Tax", "amount_cents": order.tax_cents, "is_tax_exempt": True}
            )

        return {
            "amount_cents": order.total_cents,
            "currency": order.currency,
            "description": f"Order #{order.order_number}",
            "success_url": self.success_url(order),
            "cancel_url": self.cancel_url(order),
            "invoice_customer_email": order.billing_email or "",
            "invoice_customer_name": order.billing_name or "",
            "line_items": line_items,
            "custom_fields": {
                "woo_order_id": order.order_id,
                "woo_order_number": order.order_number,
                "source": "woocommerce",
            },
            "expires_in_minutes": SESSION_EXPIRY_MINUTES,
        }

    def _get_order(self, order_id: int) -> OrderHandle:
        order = self._store.get_order(order_id)
        if order is None:
            raise GatewayError(ErrorCode.ORDER_NOT_FOUND, details={"order_id": str(order_id)})
        return order

    def start_checkout(self, order_id: int) -> CheckoutRedirect:
        """Create a checkout session for an order.

        Args:
            order_id: Order to pay

        Returns:
            CheckoutRedirect pointing at the hosted checkout page

        Raises:
            GatewayError: GATEWAY_DISABLED, API_NOT_CONFIGURED, ORDER_NOT_FOUND,
                or CHECKOUT_SESSION_FAILED when BoglePay rejects the request.
        """
        if not self._settings.enabled:
            self._logger.warning(
                "BoglePay gateway disabled; refusing checkout for order %s", order_id
            )
            raise GatewayError(ErrorCode.GATEWAY_DISABLED)

        if not self._client.is_configured():
            self._logger.error("BoglePay API not configured; cannot start checkout")
            raise GatewayError(ErrorCode.API_NOT_CONFIGURED)

        handle = self._get_order(order_id)
        order = handle.get_order()
        params = self.build_checkout_params(order)

        try:
            session = self._client.create_checkout_session(params)
        except BoglePayClientError as e:
            log_gateway_operation(
                self._logger, "start_checkout", order_id=order_id, error=str(e)
            )
            details = {"order_id": str(order_id), "error": str(e)}
            if e.code:
                details["processor_code"] = e.code
            raise GatewayError(ErrorCode.CHECKOUT_SESSION_FAILED, details=details) from e

        handle.set_metadata("checkout_session_id", session.id)
        if session.public_token:
            handle.set_metadata("public_token", session.public_token)

        redirect = self.hosted_checkout_url(session.public_token)
        log_gateway_operation(
            self._logger,
            "start_checkout",
            order_id=order_id,
            session_id=session.id,
            amount_cents=params["amount_cents"],
            checkout_url=redirect,
        )
        return CheckoutRedirect(redirect=redirect, checkout_session_id=session.id)

    def _valid_order(self, order_id: int, order_key: str) -> OrderHandle | None:
        order = self._store.get_order(order_id)
        if order is None or order.get_order().order_key != order_key:
            return None
        return order

    def handle_return(self, order_id: int, order_key: str) -> ReturnOutcome:
        """Handle the customer returning from the hosted checkout.

        An unknown order or wrong key sends the customer back to checkout.
        Otherwise the session is polled once; processor errors count as
        "not confirmed yet" and the webhook completes the order later.
        """
        order = self._valid_order(order_id, order_key)
        if order is None:
            self._logger.error(
                "Invalid return: order %s not found or key mismatch", order_id
            )
            return ReturnOutcome(redirect=self.checkout_page_url(), order_id=order_id)

        thank_you = self.thank_you_url(order.get_order())
        if order.is_paid():
            return ReturnOutcome(redirect=thank_you, confirmed=True, order_id=order_id)

        session_id = order.get_metadata("checkout_session_id")
        if session_id:
            try:
                session = self._client.get_checkout_session(session_id)
            except BoglePayClientError as e:
                log_gateway_operation(
                    self._logger,
                    "handle_return",
                    order_id=order_id,
                    session_id=session_id,
                    error=str(e),
                )
            else:
                result = self._reconciliation.confirm_from_session(order, session)
                if result != ProcessingResult.PENDING:
                    return ReturnOutcome(redirect=thank_you, confirmed=True, order_id=order_id)

        # Webhook has not arrived yet
        if order.get_status() == OrderStatus.PENDING:
            order.append_note(AWAITING_CONFIRMATION_NOTE)

        log_gateway_operation(
            self._logger,
            "handle_return",
            order_id=order_id,
            session_id=session_id,
            status=order.get_status().value,
        )
        return ReturnOutcome(redirect=thank_you, confirmed=False, order_id=order_id)

    def handle_cancel(self, order_id: int, order_key: str) -> ReturnOutcome:
        """Handle the customer abandoning the hosted checkout."""
        checkout = self.checkout_page_url()
        order = self._valid_order(order_id, order_key)
        if order is None:
            return ReturnOutcome(redirect=checkout, order_id=order_id)

        order.append_note(CANCELLED_NOTE)
        log_gateway_operation(self._logger, "handle_cancel", order_id=order_id)
        return ReturnOutcome(redirect=checkout, order_id=order_id)

    def process_refund(
        self, order_id: int, amount_cents: int | None = None, reason: str = ""
    ) -> None:
        """Request a refund for a paid order.

        BoglePay has no refund endpoint yet, so this always ends in an error
        telling the operator to refund from the dashboard.

        Raises:
            GatewayError: ORDER_NOT_FOUND, MISSING_TRANSACTION_ID, or
                REFUND_NOT_SUPPORTED.
        """
        order = self._get_order(order_id)
        transaction_id = order.get_transaction_id()
        if not transaction_id:
            raise GatewayError(
                ErrorCode.MISSING_TRANSACTION_ID, details={"order_id": str(order_id)}
            )

        log_gateway_operation(
            self._logger,
            "process_refund",
            order_id=order_id,
            amount_cents=amount_cents,
            transaction_id=transaction_id,
            reason=reason,
        )
        raise GatewayError(
            ErrorCode.REFUND_NOT_SUPPORTED,
            details={"order_id": str(order_id), "transaction_id": transaction_id},
        )
