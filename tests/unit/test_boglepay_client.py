"""Unit tests for the BoglePay API client using httpx.MockTransport."""

import json
import re

import httpx
import pytest

from boglepay import __version__
from boglepay.services.boglepay_client import BoglePayClient, BoglePayClientError

API_URL = "https://api.boglepay.test"
API_KEY = "sk_test_abc123"


def _client(handler) -> BoglePayClient:
    return BoglePayClient(
        api_key=API_KEY, api_url=API_URL, transport=httpx.MockTransport(handler)
    )


class Recorder:
    """Mock transport handler that records requests and returns a canned response."""

    def __init__(self, status_code: int = 200, body: object | None = None) -> None:
        self.status_code = status_code
        self.body = {} if body is None else body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


class TestRequests:
    def test_create_checkout_session(self) -> None:
        recorder = Recorder(body={"id": "cs_1", "public_token": "pt_1", "status": "unpaid"})
        params = {"amount_cents": 1999, "currency": "USD"}

        session = _client(recorder).create_checkout_session(params)

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{API_URL}/v1/checkout-sessions"
        assert json.loads(request.content) == params
        assert request.headers["X-API-Key"] == API_KEY
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"] == f"BoglePay-Python/{__version__}"
        assert session.id == "cs_1"
        assert session.public_token == "pt_1"
        assert not session.is_confirmed

    @pytest.mark.parametrize(
        "params", [{"currency": "USD"}, {"amount_cents": 0, "currency": "USD"}, {"amount_cents": 5}]
    )
    def test_create_requires_amount_and_currency(self, params) -> None:
        recorder = Recorder()

        with pytest.raises(BoglePayClientError):
            _client(recorder).create_checkout_session(params)

        assert recorder.requests == []

    def test_get_checkout_session_keeps_extra_fields(self) -> None:
        recorder = Recorder(
            body={"id": "cs_1", "status": "succeeded", "transaction_id": "txn_1", "livemode": False}
        )

        session = _client(recorder).get_checkout_session("cs_1")

        assert recorder.requests[0].method == "GET"
        assert recorder.requests[0].url.path == "/v1/checkout-sessions/cs_1"
        assert session.is_confirmed
        assert session.transaction_id == "txn_1"
        assert session.model_extra == {"livemode": False}

    def test_confirm_sends_idempotency_key(self) -> None:
        recorder = Recorder(body={"id": "cs_1", "status": "paid"})

        _client(recorder).confirm_checkout_session(
            "pt_1", {"payment_method": "card"}, idempotency_key="woo_42_confirm_x"
        )

        request = recorder.requests[0]
        assert request.url.path == "/v1/checkout-sessions/pt_1/confirm"
        assert request.headers["Idempotency-Key"] == "woo_42_confirm_x"
        assert json.loads(request.content) == {"payment_method": "card"}

    def test_confirm_without_idempotency_key(self) -> None:
        recorder = Recorder(body={"id": "cs_1", "status": "paid"})

        _client(recorder).confirm_checkout_session("pt_1", {})

        assert "Idempotency-Key" not in recorder.requests[0].headers

    def test_trailing_slash_in_api_url(self) -> None:
        recorder = Recorder(body={"id": "m_1"})
        client = BoglePayClient(
            api_key=API_KEY, api_url=f"{API_URL}/", transport=httpx.MockTransport(recorder)
        )

        client.get_merchant_info()

        assert str(recorder.requests[0].url) == f"{API_URL}/v1/me"


class TestErrors:
    def test_http_error_carries_processor_details(self) -> None:
        recorder = Recorder(
            status_code=404,
            body={"error": "Not Found", "message": "Checkout session not found", "code": "not_found"},
        )

        with pytest.raises(BoglePayClientError) as exc_info:
            _client(recorder).get_checkout_session("cs_missing")

        error = exc_info.value
        assert str(error) == "Checkout session not found"
        assert error.code == "not_found"
        assert error.status_code == 404
        assert error.response["error"] == "Not Found"

    def test_http_error_without_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(BoglePayClientError) as exc_info:
            _client(handler).get_merchant_info()

        assert str(exc_info.value) == "HTTP 500"
        assert exc_info.value.status_code == 500

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BoglePayClientError) as exc_info:
            _client(handler).get_merchant_info()

        assert exc_info.value.status_code is None

    def test_non_object_body(self) -> None:
        with pytest.raises(BoglePayClientError):
            _client(Recorder(body=[1, 2])).get_merchant_info()

    def test_session_body_without_id(self) -> None:
        with pytest.raises(BoglePayClientError, match="Unexpected response body") as exc_info:
            _client(Recorder(body={"status": "unpaid"})).get_checkout_session("cs_1")

        assert exc_info.value.response == {"status": "unpaid"}

    def test_create_with_unexpected_body(self) -> None:
        recorder = Recorder(body={"public_token": "pt_1"})

        with pytest.raises(BoglePayClientError, match="Unexpected response body"):
            _client(recorder).create_checkout_session({"amount_cents": 1999, "currency": "USD"})

    def test_numeric_transaction_id_kept_as_text(self) -> None:
        recorder = Recorder(body={"id": "cs_1", "status": "paid", "transaction_id": 987})

        session = _client(recorder).get_checkout_session("cs_1")

        assert session.transaction_id == "987"


class TestHelpers:
    def test_is_configured(self) -> None:
        assert BoglePayClient(api_key=API_KEY, api_url=API_URL).is_configured()
        assert not BoglePayClient(api_key="", api_url=API_URL).is_configured()
        assert not BoglePayClient(api_key=API_KEY, api_url="").is_configured()

    def test_validate_api_key(self) -> None:
        assert _client(Recorder(body={"id": "m_1"})).validate_api_key() is True
        assert _client(Recorder(body={"name": "no id"})).validate_api_key() is False
        assert _client(Recorder(status_code=401, body={"message": "bad key"})).validate_api_key() is False

    def test_generate_idempotency_key(self) -> None:
        first = BoglePayClient.generate_idempotency_key(42)
        second = BoglePayClient.generate_idempotency_key(42, "refund")

        assert re.fullmatch(r"woo_42_confirm_[0-9a-f-]{36}", first)
        assert second.startswith("woo_42_refund_")
        assert first != BoglePayClient.generate_idempotency_key(42)
