"""Webhook endpoint response bodies."""

from pydantic import BaseModel, Field


class WebhookAck(BaseModel):
    """Acknowledgement returned for every delivery that passes signature checks."""

    received: bool = Field(default=True, examples=[True])


class InvalidSignatureResponse(BaseModel):
    """Body returned when signature verification fails."""

    error: str = Field(default="Invalid signature", examples=["Invalid signature"])
