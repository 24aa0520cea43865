"""Checkout endpoint request and response bodies."""

from pydantic import BaseModel, ConfigDict, Field


class CheckoutResponse(BaseModel):
    """Hosted checkout redirect for an order."""

    result: str = Field(default="success", examples=["success"])
    redirect: str = Field(
        ...,
        description="Hosted checkout URL to send the customer to",
        examples=["https://checkout.example.com/c/pt_51c0e7"],
    )


class RefundRequest(BaseModel):
    """Refund request for a paid order."""

    model_config = ConfigDict(strict=True)

    amount_cents: int | None = Field(default=None, ge=1, description="Amount to refund in cents")
    reason: str = Field(default="", description="Reason shown to the operator")
