"""API routes package.

- checkout: Hosted checkout start, return and cancel redirects, refunds
- webhooks: BoglePay event deliveries

Routers are registered in main.py without a prefix; the paths match the
callback URLs configured in BoglePay.
"""

from boglepay_api.routes.checkout import router as checkout_router
from boglepay_api.routes.webhooks import router as webhooks_router

__all__ = [
    "checkout_router",
    "webhooks_router",
]
