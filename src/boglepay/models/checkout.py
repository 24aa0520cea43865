"""Checkout session models for the BoglePay hosted payment page."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import CONFIRMED_SESSION_STATUSES


class CheckoutSession(BaseModel):
    """A BoglePay checkout session (processor-owned record).

    Extra fields returned by the API are kept so callers can inspect them.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Checkout session ID", examples=["cs_9f2a61"])
    public_token: str = Field(
        default="",
        description="Public token used in the hosted checkout URL",
        examples=["pt_51c0e7"],
    )
    status: str = Field(default="unpaid", examples=["unpaid", "paid", "succeeded"])
    transaction_id: str | None = Field(default=None, examples=["txn_12ab", 987])

    @field_validator("transaction_id", mode="before")
    @classmethod
    def transaction_id_as_text(cls, v: Any) -> Any:
        """Numeric transaction references are stored as text."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_confirmed(self) -> bool:
        """Whether BoglePay reports the session as paid."""
        return self.status in CONFIRMED_SESSION_STATUSES


class CheckoutRedirect(BaseModel):
    """Result of starting a hosted checkout for an order."""

    result: str = "success"
    redirect: str = Field(..., description="Hosted checkout URL for the customer")
    checkout_session_id: str | None = None


class ReturnOutcome(BaseModel):
    """Where to send the customer after the return or cancel endpoint."""

    model_config = ConfigDict(strict=True)

    redirect: str
    confirmed: bool = False
    order_id: int | None = None


def session_params_summary(params: dict[str, Any]) -> dict[str, Any]:
    """Return the loggable subset of checkout session parameters."""
    return {
        "amount_cents": params.get("amount_cents"),
        "currency": params.get("currency"),
    }
