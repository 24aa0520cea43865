"""Standard error codes for the BoglePay gateway.

All services raise GatewayError (or a subclass) with one of these codes so
the HTTP layer can map them to consistent responses.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Gateway error codes."""

    # Webhook error codes (ERR_WEBHOOK_001-ERR_WEBHOOK_003)
    INVALID_SIGNATURE = "ERR_WEBHOOK_001"
    MALFORMED_PAYLOAD = "ERR_WEBHOOK_002"
    ORDER_NOT_RESOLVED = "ERR_WEBHOOK_003"

    # Order error codes (ERR_ORDER_001)
    ORDER_NOT_FOUND = "ERR_ORDER_001"

    # Processor API error codes (ERR_API_001-ERR_API_003)
    CHECKOUT_SESSION_FAILED = "ERR_API_001"
    API_NOT_CONFIGURED = "ERR_API_002"
    GATEWAY_DISABLED = "ERR_API_003"

    # Refund error codes (ERR_REFUND_001-ERR_REFUND_002)
    REFUND_NOT_SUPPORTED = "ERR_REFUND_001"
    MISSING_TRANSACTION_ID = "ERR_REFUND_002"

    # Configuration error codes (ERR_CONFIG_001)
    SETTINGS_UNAVAILABLE = "ERR_CONFIG_001"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_SIGNATURE: "Invalid signature",
    ErrorCode.MALFORMED_PAYLOAD: "Webhook payload is not a valid event",
    ErrorCode.ORDER_NOT_RESOLVED: "No order matches the webhook identifiers",
    ErrorCode.ORDER_NOT_FOUND: "Order not found",
    ErrorCode.CHECKOUT_SESSION_FAILED: "Payment could not be initiated",
    ErrorCode.API_NOT_CONFIGURED: "BoglePay API URL or API key is not configured",
    ErrorCode.GATEWAY_DISABLED: "BoglePay payments are disabled",
    ErrorCode.REFUND_NOT_SUPPORTED: "Automatic refunds are not yet supported",
    ErrorCode.MISSING_TRANSACTION_ID: "No transaction ID found for this order",
    ErrorCode.SETTINGS_UNAVAILABLE: "Gateway secrets could not be loaded",
}

# Recovery suggestions for operators and clients
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.INVALID_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.MALFORMED_PAYLOAD: "Check the webhook payload sent by BoglePay",
    ErrorCode.ORDER_NOT_RESOLVED: "Compare BoglePay session identifiers with stored orders",
    ErrorCode.ORDER_NOT_FOUND: "Verify the order ID",
    ErrorCode.CHECKOUT_SESSION_FAILED: "Please try again",
    ErrorCode.API_NOT_CONFIGURED: "Configure the API URL and API key for the active mode",
    ErrorCode.GATEWAY_DISABLED: "Enable the gateway with BOGLEPAY_ENABLED",
    ErrorCode.REFUND_NOT_SUPPORTED: "Process the refund manually in your BoglePay dashboard",
    ErrorCode.MISSING_TRANSACTION_ID: "Only paid orders can be refunded",
    ErrorCode.SETTINGS_UNAVAILABLE: "Check SSM parameters and IAM permissions for the environment",
}


class ErrorResponse(BaseModel):
    """Standard error response body."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class GatewayError(Exception):
    """Exception raised by gateway operations.

    Converted to an ErrorResponse by the API exception handlers.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse.from_code(self.code, self.details)


class InvalidSignatureError(GatewayError):
    """Webhook signature missing, stale or not matching the secret."""

    def __init__(self, details: Optional[dict[str, str]] = None):
        super().__init__(ErrorCode.INVALID_SIGNATURE, details)


class MalformedPayloadError(GatewayError):
    """Webhook body is empty, not JSON, or not an event envelope."""

    def __init__(self, details: Optional[dict[str, str]] = None):
        super().__init__(ErrorCode.MALFORMED_PAYLOAD, details)


class UnresolvedOrderError(GatewayError):
    """No local order matches the identifiers carried by an event."""

    def __init__(self, details: Optional[dict[str, str]] = None):
        super().__init__(ErrorCode.ORDER_NOT_RESOLVED, details)
