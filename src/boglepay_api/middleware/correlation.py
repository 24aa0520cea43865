"""Request correlation for gateway traffic.

Every webhook delivery and checkout redirect gets a correlation ID: the
caller's ``X-Correlation-ID`` when present, otherwise a fresh one. The ID
prefixes gateway log lines for the request and is echoed back in the
response so BoglePay delivery logs can be matched with ours.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from boglepay.utils.logging import clear_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to each gateway request."""

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(self.header_name) or None)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()

        response.headers[self.header_name] = correlation_id
        return response
