"""Pytest configuration and fixtures for BoglePay gateway tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto (orders table with metadata indexes)
- Order factory and order store
- Webhook payload signing helpers
"""

import json
import os
import time
from typing import Any, Callable, Generator

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("BOGLEPAY_TABLE_PREFIX", "test-boglepay")
os.environ.setdefault("ENVIRONMENT", "test")

# Secrets come from the environment so settings never reach SSM in tests
os.environ.setdefault("BOGLEPAY_WEBHOOK_SECRET", "whsec_test_secret123")
os.environ.setdefault("BOGLEPAY_SANDBOX_API_KEY", "sk_test_abc123")
os.environ.setdefault("BOGLEPAY_LIVE_API_KEY", "")
os.environ.setdefault("BOGLEPAY_SANDBOX_API_URL", "https://api.boglepay.test")
os.environ.setdefault("BOGLEPAY_HOSTED_CHECKOUT_URL", "https://pay.boglepay.test")
os.environ.setdefault("BOGLEPAY_SITE_URL", "https://shop.example.com")

if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from boglepay.models.enums import OrderStatus  # noqa: E402
from boglepay.models.order import Order, OrderLineItem  # noqa: E402
from boglepay.services.dynamodb import DynamoDBService  # noqa: E402
from boglepay.services.order_store import DynamoDBOrder, DynamoDBOrderStore  # noqa: E402
from boglepay.services.signature import compute_signature  # noqa: E402

TEST_WEBHOOK_SECRET = os.environ["BOGLEPAY_WEBHOOK_SECRET"]


# === Service Cache ===


@pytest.fixture(autouse=True)
def reset_cached_services() -> Generator[None, None, None]:
    """Reset API dependency caches before and after each test.

    Services built inside one test's mock_aws context must not leak into
    the next test.
    """
    from boglepay_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


def _create_orders_table(client: Any) -> None:
    client.create_table(
        TableName="test-boglepay-orders",
        KeySchema=[{"AttributeName": "order_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "order_id", "AttributeType": "N"},
            {"AttributeName": "meta_checkout_session_id", "AttributeType": "S"},
            {"AttributeName": "meta_public_token", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "checkout_session_id-index",
                "KeySchema": [{"AttributeName": "meta_checkout_session_id", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": "public_token-index",
                "KeySchema": [{"AttributeName": "meta_public_token", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def dynamodb_service(aws_credentials: None) -> Generator[DynamoDBService, None, None]:
    """DynamoDBService over a mocked orders table."""
    with mock_aws():
        _create_orders_table(boto3.client("dynamodb", region_name="eu-west-1"))
        yield DynamoDBService(environment="test")


@pytest.fixture
def order_store(dynamodb_service: DynamoDBService) -> DynamoDBOrderStore:
    return DynamoDBOrderStore(db=dynamodb_service)


# === Sample Data ===


@pytest.fixture
def make_order(order_store: DynamoDBOrderStore) -> Callable[..., DynamoDBOrder]:
    """Factory that stores an order and returns its handle.

    Keyword arguments override Order fields; ``metadata`` entries are stored
    as indexed attributes.
    """

    def _make(order_id: int = 42, **overrides: Any) -> DynamoDBOrder:
        fields: dict[str, Any] = {
            "order_id": order_id,
            "order_key": f"wc_order_key{order_id}",
            "order_number": str(order_id),
            "status": OrderStatus.PENDING,
            "currency": "USD",
            "total_cents": 2599,
            "shipping_cents": 500,
            "tax_cents": 100,
            "line_items": [OrderLineItem(name="Index Fund T-Shirt", total_cents=1999)],
            "billing_email": "jack@example.com",
            "billing_name": "Jack Bogle",
        }
        fields.update(overrides)
        return order_store.create_order(Order(**fields))

    return _make


# === Webhook Helpers ===


def webhook_body(event_type: str, data: dict[str, Any]) -> bytes:
    """Serialize a webhook envelope the way BoglePay sends it."""
    return json.dumps({"event_type": event_type, "data": data}).encode("utf-8")


def signed_header(
    payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None
) -> str:
    """Timestamped signature header for a payload (signed now by default)."""
    return compute_signature(payload, secret, int(time.time()) if timestamp is None else timestamp)
