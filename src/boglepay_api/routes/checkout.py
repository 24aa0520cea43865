"""Checkout endpoints for the hosted BoglePay payment page.

Provides endpoints for:
- Starting a hosted checkout for an order
- Customer return and cancel redirects from BoglePay
- Refund requests (BoglePay refunds are manual for now)
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from starlette.status import HTTP_302_FOUND

from boglepay.services.checkout_service import CheckoutService
from boglepay_api.dependencies import get_checkout_service
from boglepay_api.models.checkout import CheckoutResponse, RefundRequest

router = APIRouter(tags=["checkout"])


@router.post(
    "/boglepay/v1/orders/{order_id}/checkout",
    summary="Start hosted checkout",
    description="""
Create a BoglePay checkout session for an order and return the hosted
checkout URL. The session ID and public token are stored on the order so
webhooks and the return endpoint can find it.
""",
    response_model=CheckoutResponse,
    responses={
        404: {"description": "Order not found"},
        502: {"description": "BoglePay rejected the checkout session"},
        503: {"description": "BoglePay API not configured"},
    },
)
async def start_checkout(
    order_id: int,
    checkout: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResponse:
    """Start a hosted checkout for an order."""
    redirect = checkout.start_checkout(order_id)
    return CheckoutResponse(result=redirect.result, redirect=redirect.redirect)


@router.get(
    "/wc-api/boglepay_return",
    summary="Customer return from BoglePay",
    description="Polls the checkout session once and redirects to the thank-you page.",
    status_code=HTTP_302_FOUND,
    response_class=RedirectResponse,
)
async def handle_return(
    order_id: int = Query(default=0),
    key: str = Query(default=""),
    checkout: CheckoutService = Depends(get_checkout_service),
) -> RedirectResponse:
    """Redirect a returning customer."""
    outcome = checkout.handle_return(abs(order_id), key)
    return RedirectResponse(outcome.redirect, status_code=HTTP_302_FOUND)


@router.get(
    "/wc-api/boglepay_cancel",
    summary="Customer cancel from BoglePay",
    description="Notes the cancellation and redirects back to the checkout page.",
    status_code=HTTP_302_FOUND,
    response_class=RedirectResponse,
)
async def handle_cancel(
    order_id: int = Query(default=0),
    key: str = Query(default=""),
    checkout: CheckoutService = Depends(get_checkout_service),
) -> RedirectResponse:
    """Redirect a customer who abandoned payment."""
    outcome = checkout.handle_cancel(abs(order_id), key)
    return RedirectResponse(outcome.redirect, status_code=HTTP_302_FOUND)


@router.post(
    "/boglepay/v1/orders/{order_id}/refunds",
    summary="Refund an order",
    description="""
Automatic refunds are not supported by the BoglePay API yet. Paid orders
return 501 with instructions to refund from the BoglePay dashboard.
""",
    responses={
        400: {"description": "Order has no transaction ID"},
        404: {"description": "Order not found"},
        501: {"description": "Refund must be processed manually"},
    },
)
async def request_refund(
    order_id: int,
    body: RefundRequest | None = None,
    checkout: CheckoutService = Depends(get_checkout_service),
) -> None:
    """Request a refund; always ends in an error response."""
    body = body or RefundRequest()
    checkout.process_refund(order_id, amount_cents=body.amount_cents, reason=body.reason)
