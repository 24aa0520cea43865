"""BoglePay REST API client for checkout sessions.

Thin synchronous wrapper around httpx. Requests authenticate with the
``X-API-Key`` header and exchange JSON bodies.
"""

import logging
import uuid
from typing import Any

import httpx
from pydantic import ValidationError

from boglepay import __version__
from boglepay.models.checkout import CheckoutSession, session_params_summary

DEFAULT_TIMEOUT_SECONDS = 30.0


class BoglePayClientError(Exception):
    """Raised when a BoglePay API call fails."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        response: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and optional processor error details.

        Args:
            message: Human-readable error message.
            code: BoglePay error code if the API returned one.
            status_code: HTTP status code (None for transport errors).
            response: Decoded error body, if any.
        """
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.response = response or {}


class BoglePayClient:
    """Client for the BoglePay checkout session API.

    Usage:
        client = BoglePayClient(api_key="sk_test_...", api_url="https://api.example.com")
        session = client.create_checkout_session({"amount_cents": 1999, "currency": "USD"})
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        sandbox_mode: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key for the active mode.
            api_url: API base URL, without trailing slash.
            sandbox_mode: Whether the key is a sandbox key (logged only).
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
            logger: Logger for request debug output.
        """
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._sandbox_mode = sandbox_mode
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def is_configured(self) -> bool:
        """Whether both an API key and base URL are set."""
        return bool(self._api_key) and bool(self._api_url)

    def create_checkout_session(self, params: dict[str, Any]) -> CheckoutSession:
        """Create a checkout session.

        Args:
            params: Session parameters; ``amount_cents`` and ``currency`` are required.

        Returns:
            The created CheckoutSession.

        Raises:
            BoglePayClientError: If parameters are missing or the API call fails.
        """
        if not params.get("amount_cents"):
            raise BoglePayClientError("amount_cents is required", code="missing_amount")
        if not params.get("currency"):
            raise BoglePayClientError("currency is required", code="missing_currency")

        self._logger.debug("Creating checkout session: %s", session_params_summary(params))
        data = self._request("POST", "/v1/checkout-sessions", json=params)
        return self._session(data)

    def get_checkout_session(self, id_or_token: str) -> CheckoutSession:
        """Fetch a checkout session by session ID or public token."""
        data = self._request("GET", f"/v1/checkout-sessions/{id_or_token}")
        return self._session(data)

    def confirm_checkout_session(
        self,
        id_or_token: str,
        payment_data: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> CheckoutSession:
        """Confirm a checkout session with payment details.

        Args:
            id_or_token: Session ID or public token.
            payment_data: Payment method details.
            idempotency_key: Key that makes retries safe; sent as ``Idempotency-Key``.
        """
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        data = self._request(
            "POST",
            f"/v1/checkout-sessions/{id_or_token}/confirm",
            json=payment_data,
            headers=headers,
        )
        return self._session(data)

    def get_merchant_info(self) -> dict[str, Any]:
        """Return the merchant account the API key belongs to."""
        return self._request("GET", "/v1/me")

    def validate_api_key(self) -> bool:
        """Check the API key by fetching merchant info."""
        try:
            merchant = self.get_merchant_info()
        except BoglePayClientError as e:
            self._logger.warning("BoglePay API key validation failed: %s", e)
            return False
        return bool(merchant.get("id"))

    @staticmethod
    def generate_idempotency_key(order_id: int, action: str = "confirm") -> str:
        """Build a unique idempotency key for an order action."""
        return f"woo_{order_id}_{action}_{uuid.uuid4()}"

    def _session(self, data: dict[str, Any]) -> CheckoutSession:
        try:
            return CheckoutSession.model_validate(data)
        except ValidationError as e:
            self._logger.error("Unexpected checkout session body: %s", e)
            raise BoglePayClientError("Unexpected response body", response=data) from e

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-Key": self._api_key,
            "User-Agent": f"BoglePay-Python/{__version__}",
        }

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a request and decode the JSON response.

        Raises:
            BoglePayClientError: On transport errors, HTTP status >= 400, or a
                non-object response body.
        """
        request_headers = self._headers()
        if headers:
            request_headers.update(headers)

        url = f"{self._api_url}{path}"
        self._logger.debug(
            "BoglePay request: %s %s (%s mode)",
            method,
            path,
            "sandbox" if self._sandbox_mode else "live",
        )

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.request(method, url, json=json, headers=request_headers)
        except httpx.HTTPError as e:
            self._logger.error("BoglePay request failed: %s %s: %s", method, path, e)
            raise BoglePayClientError(f"Request failed: {e}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.status_code >= 400:
            body = data if isinstance(data, dict) else {}
            message = body.get("message") or f"HTTP {response.status_code}"
            self._logger.error(
                "BoglePay API error: %s %s -> %s %s",
                method,
                path,
                response.status_code,
                message,
            )
            raise BoglePayClientError(
                message,
                code=body.get("code"),
                status_code=response.status_code,
                response=body,
            )

        if not isinstance(data, dict):
            raise BoglePayClientError(
                "Unexpected response body", status_code=response.status_code
            )
        return data
