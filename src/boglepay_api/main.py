"""FastAPI application for the BoglePay gateway.

Serves the webhook callback, the hosted checkout start endpoint and the
customer return/cancel redirects. Runs on AWS Lambda through Mangum or
locally through uvicorn.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from mangum import Mangum

from boglepay import __version__
from boglepay.utils.logging import LOG_FORMAT, StructuredFormatter
from boglepay_api.dependencies import get_settings
from boglepay_api.exceptions import register_exception_handlers
from boglepay_api.middleware.correlation import CorrelationIdMiddleware
from boglepay_api.routes import checkout_router, webhooks_router

_log_handler = logging.StreamHandler()
_log_handler.setFormatter(StructuredFormatter(LOG_FORMAT))
logging.basicConfig(level=logging.INFO, handlers=[_log_handler])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load settings at start-up so configuration problems are logged early."""
    get_settings()
    yield


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="BoglePay Gateway API",
        description="Webhook receiver and hosted checkout flow for BoglePay payments",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)

    # Register exception handlers for consistent error responses
    register_exception_handlers(app)

    app.include_router(webhooks_router)
    app.include_router(checkout_router)

    @app.get("/api/ping")
    async def ping() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": "boglepay-gateway",
        }

    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("boglepay_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
