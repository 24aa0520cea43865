"""Webhook envelope and signature header models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ProcessingResult, SignatureScheme


class WebhookEnvelope(BaseModel):
    """Decoded body of a BoglePay webhook delivery.

    Only ``event_type`` and specific keys of ``data`` are read; everything
    else in the payload is ignored.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    event_type: str = Field(
        default="",
        description="Event type used for routing",
        examples=["payment.succeeded", "refund.created"],
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Event payload",
    )


class SignedHeader(BaseModel):
    """Parsed value of the webhook signature header.

    The timestamped form is ``t=<unix seconds>,v1=<hex hmac>``. The legacy
    form is a bare hex HMAC of the payload with no timestamp.
    """

    model_config = ConfigDict(frozen=True)

    scheme: SignatureScheme
    hash: str = Field(..., description="Hex-encoded HMAC-SHA256 sent by BoglePay")
    timestamp: int | None = Field(
        default=None,
        description="Signing time in unix seconds (timestamped scheme only)",
    )
    timestamp_text: str | None = Field(
        default=None,
        description="Timestamp exactly as it appeared in the header (signed verbatim)",
    )


class WebhookResult(BaseModel):
    """Outcome of processing a verified webhook delivery."""

    processing_result: ProcessingResult
    event_type: str | None = None
    order_id: int | None = None
    message: str | None = None
