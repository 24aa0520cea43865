"""Webhook signature verification.

BoglePay signs each delivery with HMAC-SHA256 over the raw request body.
Two header formats are accepted:

- ``t=<unix seconds>,v1=<hex>``: the HMAC covers ``"<t>.<body>"`` and the
  timestamp must be within the replay window of the receiver's clock.
- a bare hex HMAC of the body (older integrations, no replay protection).

Every comparison goes through ``hmac.compare_digest``.
"""

import hashlib
import hmac
import logging
import time
from typing import Callable

from boglepay.models.enums import SignatureScheme
from boglepay.models.webhook import SignedHeader

DEFAULT_REPLAY_TOLERANCE_SECONDS = 300


def parse_signature_header(header_value: str) -> SignedHeader:
    """Parse a signature header into its scheme, timestamp and hash.

    Segments are split on ``,`` and then on the first ``=``; segments
    without a value are ignored. When both ``t`` and ``v1`` are present the
    header uses the timestamped scheme, otherwise the whole value is taken
    as a legacy hash.
    """
    parts: dict[str, str] = {}
    for segment in header_value.split(","):
        key, sep, value = segment.partition("=")
        if sep:
            parts[key] = value

    if "t" not in parts or "v1" not in parts:
        return SignedHeader(scheme=SignatureScheme.LEGACY, hash=header_value)

    timestamp_text = parts["t"]
    try:
        timestamp: int | None = int(timestamp_text)
    except ValueError:
        timestamp = None

    return SignedHeader(
        scheme=SignatureScheme.TIMESTAMPED,
        hash=parts["v1"],
        timestamp=timestamp,
        timestamp_text=timestamp_text,
    )


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def compute_signature(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build the header value BoglePay would send for a payload.

    Args:
        payload: Raw request body
        secret: Webhook signing secret
        timestamp: Signing time; None produces a legacy (bare hash) header

    Returns:
        Signature header value
    """
    if timestamp is None:
        return _hmac_hex(secret, payload)
    digest = _hmac_hex(secret, f"{timestamp}.".encode("utf-8") + payload)
    return f"t={timestamp},v1={digest}"


def _digests_equal(expected: str, received: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


class SignatureVerifier:
    """Verifies webhook payloads against the shared signing secret."""

    def __init__(
        self,
        tolerance_seconds: int = DEFAULT_REPLAY_TOLERANCE_SECONDS,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            tolerance_seconds: Allowed distance between the signed timestamp
                and the receiver's clock, in either direction.
            clock: Source of the current unix time.
            logger: Logger for rejection reasons.
        """
        self._tolerance = tolerance_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def verify(
        self,
        payload: bytes,
        header_value: str | None,
        secret: str,
        now: float | None = None,
    ) -> bool:
        """Check a payload against its signature header.

        An empty secret disables verification and always accepts; callers
        are responsible for logging that degraded-trust condition.

        Args:
            payload: Raw request body bytes
            header_value: Signature header value, or None if absent
            secret: Webhook signing secret
            now: Current unix time (defaults to the verifier clock)

        Returns:
            True if the payload is authentic (or verification is disabled)
        """
        if not secret:
            return True

        if not header_value:
            self._logger.warning("Webhook signature header missing")
            return False

        signed = parse_signature_header(header_value)

        if signed.scheme == SignatureScheme.LEGACY:
            return _digests_equal(_hmac_hex(secret, payload), signed.hash)

        if signed.timestamp is None or signed.timestamp_text is None:
            self._logger.warning("Webhook signature timestamp is not an integer")
            return False

        current = int(self._clock() if now is None else now)
        if abs(current - signed.timestamp) > self._tolerance:
            self._logger.warning(
                "Webhook timestamp outside tolerance: timestamp=%s now=%s",
                signed.timestamp,
                current,
            )
            return False

        message = f"{signed.timestamp_text}.".encode("utf-8") + payload
        return _digests_equal(_hmac_hex(secret, message), signed.hash)
