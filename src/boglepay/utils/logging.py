"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- Explicit log level configuration from gateway settings
- Helper functions for webhook and gateway operation logging

Usage:
    from boglepay.utils.logging import configure_logging, get_logger

    configure_logging(debug=settings.debug)
    logger = get_logger(__name__)
    logger.info("Checkout started", extra={"order_id": 42})
"""

import json
import logging
import uuid
from contextvars import ContextVar
from typing import Any

PACKAGE_LOGGER = "boglepay"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def configure_logging(debug: bool = False) -> logging.Logger:
    """Configure the gateway package logger.

    Debug messages are emitted only when ``debug`` is set. The level is
    applied on every call so a settings change takes effect immediately.
    Output goes through the root handlers installed by the application.

    Args:
        debug: Whether debug logging is enabled in the gateway settings

    Returns:
        The package logger
    """
    logger = get_logger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger


def _format_context(context: dict[str, Any]) -> str:
    return json.dumps(context, default=str, sort_keys=True)


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    *,
    order_id: int | None = None,
    transaction_id: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook event with structured context.

    Args:
        logger: Logger instance
        event_type: BoglePay event type (e.g., "payment.succeeded")
        order_id: Associated order ID if resolved
        transaction_id: Transaction ID if relevant
        result: Processing result (success, duplicate, ignored, unresolved, ...)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"event_type": event_type}

    if order_id is not None:
        context["order_id"] = order_id
    if transaction_id:
        context["transaction_id"] = transaction_id
    if result:
        context["result"] = result
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Webhook event: {event_type or 'unknown'}"]
    if result:
        msg_parts.append(f"result={result}")
    if order_id is not None:
        msg_parts.append(f"order={order_id}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)
    extra_fields = {"webhook": context}

    if error or result in ("unresolved", "malformed"):
        logger.error(message, extra=extra_fields)
    elif result == "ignored":
        logger.debug(message, extra=extra_fields)
    else:
        logger.info(message, extra=extra_fields)


def log_gateway_operation(
    logger: logging.Logger,
    operation: str,
    *,
    order_id: int | None = None,
    session_id: str | None = None,
    amount_cents: int | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a checkout or payment operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "start_checkout", "handle_return")
        order_id: Order ID if available
        session_id: Checkout session ID if available
        amount_cents: Amount in cents if relevant
        status: Order or session status
        error: Error message if operation failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {}

    if order_id is not None:
        context["order_id"] = order_id
    if session_id:
        context["session_id"] = session_id
    if amount_cents is not None:
        context["amount_cents"] = amount_cents
    if status:
        context["status"] = status
    if error:
        context["error"] = error

    context.update(extra)

    message = f"Gateway operation: {operation}"
    if context:
        message = f"{message} | Context: {_format_context(context)}"

    if error:
        logger.error(message)
    else:
        logger.info(message)
