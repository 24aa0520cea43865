"""Gateway configuration.

Settings are built once by the application and passed explicitly to the
services that need them. Plain values come from ``BOGLEPAY_*`` environment
variables; secrets come from the environment when set, otherwise from SSM
Parameter Store.
"""

import logging
import os
from typing import Mapping

from pydantic import BaseModel, Field

from boglepay.services.signature import DEFAULT_REPLAY_TOLERANCE_SECONDS
from boglepay.models.errors import ErrorCode, GatewayError
from boglepay.services.ssm_service import SSMService, SSMServiceError

logger = logging.getLogger(__name__)

DEFAULT_SIGNATURE_HEADER = "X-BOGLEPAY-SIGNATURE"

ENV_PREFIX = "BOGLEPAY_"

# Secret settings: read from env first, then SSM
SECRET_FIELDS = ("sandbox_api_key", "live_api_key", "webhook_secret")


class GatewaySettings(BaseModel):
    """BoglePay gateway settings."""

    environment: str = "dev"
    enabled: bool = True
    sandbox_mode: bool = True

    sandbox_api_url: str = "https://api.example.com"
    sandbox_api_key: str = ""
    live_api_url: str = "https://api.example.com"
    live_api_key: str = ""

    webhook_secret: str = Field(
        default="",
        description="Webhook signing secret; empty disables verification",
    )
    signature_header: str = DEFAULT_SIGNATURE_HEADER
    replay_tolerance_seconds: int = Field(default=DEFAULT_REPLAY_TOLERANCE_SECONDS, ge=0)

    debug: bool = False
    request_timeout: float = Field(default=30.0, gt=0)

    hosted_checkout_url: str = "https://checkout.example.com"
    site_url: str = "http://localhost:8080"
    custom_success_url: str = ""
    custom_cancel_url: str = ""
    thank_you_url: str = "/checkout/order-received/{order_id}/?key={order_key}"
    checkout_url: str = "/checkout/"

    @property
    def api_key(self) -> str:
        """API key for the active mode."""
        return self.sandbox_api_key if self.sandbox_mode else self.live_api_key

    @property
    def api_url(self) -> str:
        """API base URL for the active mode."""
        return self.sandbox_api_url if self.sandbox_mode else self.live_api_url

    @property
    def mode(self) -> str:
        return "sandbox" if self.sandbox_mode else "live"

    @property
    def is_available(self) -> bool:
        """Whether the gateway can take payments."""
        return self.enabled and bool(self.api_key) and bool(self.api_url)

    @property
    def verifies_signatures(self) -> bool:
        return bool(self.webhook_secret)

    def configuration_warnings(self) -> list[str]:
        """Operator-facing problems with the current configuration."""
        if not self.enabled:
            return []

        warnings = []
        if not self.api_url:
            warnings.append(
                f"BoglePay is enabled but no {self.mode} API URL is configured. "
                "The payment gateway will not work."
            )
        if not self.api_key:
            warnings.append(f"BoglePay is enabled but no {self.mode} API key is configured.")
        if not self.webhook_secret:
            warnings.append(
                "BoglePay webhook secret is not configured; webhook signatures "
                "will not be verified."
            )
        return warnings


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    environ: Mapping[str, str] | None = None,
    ssm: SSMService | None = None,
) -> GatewaySettings:
    """Build GatewaySettings from the environment and SSM.

    Args:
        environ: Environment mapping (defaults to os.environ).
        ssm: SSM service for secrets not present in the environment. Built
            on demand for the configured environment.

    Returns:
        Populated GatewaySettings.

    Raises:
        GatewayError: SETTINGS_UNAVAILABLE if a secret cannot be read from SSM.
    """
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}

    for name, field in GatewaySettings.model_fields.items():
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if field.annotation is bool:
            values[name] = _parse_bool(raw)
        else:
            values[name] = raw

    values.setdefault("environment", env.get("ENVIRONMENT", "dev"))

    missing_secrets = [name for name in SECRET_FIELDS if name not in values]
    if missing_secrets:
        ssm = ssm or SSMService(environment=str(values["environment"]))
        for name in missing_secrets:
            try:
                values[name] = ssm.get_secret(name, default="")
            except SSMServiceError as e:
                logger.error("Could not load gateway secret %s: %s", name, e)
                raise GatewayError(
                    ErrorCode.SETTINGS_UNAVAILABLE, details={"secret": name, "error": str(e)}
                ) from e

    settings = GatewaySettings.model_validate(values)
    logger.info(
        "Gateway settings loaded for environment %s (%s mode)",
        settings.environment,
        settings.mode,
    )
    return settings
