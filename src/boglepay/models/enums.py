"""Enumeration types for BoglePay gateway data models."""

from enum import Enum


class OrderStatus(str, Enum):
    """Payment status of a store order."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CheckoutSessionStatus(str, Enum):
    """Status of a checkout session as reported by BoglePay."""

    UNPAID = "unpaid"
    PAID = "paid"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# Session statuses that confirm the customer has paid
CONFIRMED_SESSION_STATUSES: frozenset[str] = frozenset(
    {CheckoutSessionStatus.PAID.value, CheckoutSessionStatus.SUCCEEDED.value}
)


class EventKind(str, Enum):
    """Handler a webhook event type is routed to."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUND = "refund"


class ProcessingResult(str, Enum):
    """Outcome of handling one webhook delivery or return-flow poll."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    NOTED = "noted"
    IGNORED = "ignored"
    MALFORMED = "malformed"
    UNRESOLVED = "unresolved"
    PENDING = "pending"


class SignatureScheme(str, Enum):
    """Format of the webhook signature header."""

    TIMESTAMPED = "timestamped"
    LEGACY = "legacy"
