"""FastAPI exception handlers for converting GatewayError to HTTP responses.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: Request cannot be applied to the order
- 401 Unauthorized: Webhook signature check failed
- 404 Not Found: Order not found
- 501 Not Implemented: Operation not offered by BoglePay
- 502 Bad Gateway: BoglePay rejected or failed the request
- 503 Service Unavailable: Gateway disabled or not configured

Usage:
    from boglepay_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_501_NOT_IMPLEMENTED,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from boglepay.models.errors import ErrorCode, GatewayError, InvalidSignatureError

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Webhook errors
    ErrorCode.INVALID_SIGNATURE: HTTP_401_UNAUTHORIZED,
    ErrorCode.MALFORMED_PAYLOAD: HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_NOT_RESOLVED: HTTP_404_NOT_FOUND,
    # Order errors
    ErrorCode.ORDER_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Processor errors
    ErrorCode.CHECKOUT_SESSION_FAILED: HTTP_502_BAD_GATEWAY,
    ErrorCode.API_NOT_CONFIGURED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.GATEWAY_DISABLED: HTTP_503_SERVICE_UNAVAILABLE,
    # Refund errors
    ErrorCode.REFUND_NOT_SUPPORTED: HTTP_501_NOT_IMPLEMENTED,
    ErrorCode.MISSING_TRANSACTION_ID: HTTP_400_BAD_REQUEST,
    # Configuration errors
    ErrorCode.SETTINGS_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def invalid_signature_handler(
    request: Request, exc: InvalidSignatureError
) -> JSONResponse:
    """Return the minimal body BoglePay expects for a rejected delivery."""
    return JSONResponse(
        status_code=HTTP_401_UNAUTHORIZED,
        content={"error": exc.message},
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Handle GatewayError exceptions and convert to JSON response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The GatewayError exception

    Returns:
        JSONResponse with ErrorResponse body and mapped status code.
    """
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_response().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(InvalidSignatureError, invalid_signature_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GatewayError, gateway_error_handler)  # type: ignore[arg-type]
