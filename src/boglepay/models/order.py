"""Order models for the store side of a BoglePay payment."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import OrderStatus


class OrderLineItem(BaseModel):
    """A single line of an order. Amounts are in minor units (cents)."""

    model_config = ConfigDict(strict=True)

    name: str = Field(..., description="Line item description")
    total_cents: int = Field(..., ge=0, description="Line total in cents")


class Order(BaseModel):
    """A store order as seen by the gateway.

    ``metadata`` holds opaque key/value entries written by the gateway
    (``checkout_session_id``, ``public_token``, ...) and is queryable by
    key and value through the order store.
    """

    order_id: int = Field(..., ge=1, description="Numeric order ID")
    order_key: str = Field(..., description="Secret key authenticating return URLs")
    order_number: str = Field(..., description="Customer-facing order number")
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    currency: str = Field(default="USD", description="ISO currency code")
    total_cents: int = Field(..., ge=0, description="Order total in cents")
    shipping_cents: int = Field(default=0, ge=0)
    tax_cents: int = Field(default=0, ge=0)
    line_items: list[OrderLineItem] = Field(default_factory=list)
    billing_email: str | None = None
    billing_name: str | None = None
    transaction_id: str = Field(
        default="",
        description="Canonical payment reference set when the order is paid",
    )
    notes: list[str] = Field(default_factory=list, description="Append-only audit notes")
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        """Whether the order has completed payment."""
        return self.status == OrderStatus.PAID
