"""Stripe webhook signature verification.

Validates that a webhook delivery was signed by Stripe with the endpoint's
shared secret and has not been replayed outside a tolerance window.

Stripe sends: Stripe-Signature: t=<timestamp>,v1=<signature>[,v1=<signature>...]

The signed message is ``"{timestamp}." + raw_body`` and each ``v1`` value is
the hex HMAC-SHA256 of that message. During secret rotation several ``v1``
values may be present; a match against any of them is accepted.

Security Features:
- Constant-time signature comparison
- Timestamp validation (replay attack prevention)
- Exact raw body bytes, never a re-serialized payload
- Secrets never logged or included in results

Usage:
    from stripe_facility.webhooks import WebhookVerifier

    verifier = WebhookVerifier(secret="whsec_...")
    result = verifier.verify(await request.read(), request.headers.get("Stripe-Signature"))

    match result:
        case Verified(event=event):
            handle(event.event_type, event.payload)
        case Rejected(status=status):
            respond(status.http_status)
"""

from __future__ import annotations

import hashlib
import hmac
import json
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

import structlog

from stripe_facility.core.exceptions import ConfigurationError, MissingSecretError

logger = structlog.get_logger()

DEFAULT_TOLERANCE_SECONDS = 300
SIGNATURE_SCHEME = "v1"

# Unix seconds, at most 20 digits.
_DIGITS = re.compile(r"[0-9]{1,20}")

# Only verify_signature() holds this, so only it can build a VerifiedEvent.
_VERIFICATION_TOKEN = object()


class VerificationStatus(Enum):
    """Outcome of webhook signature verification."""

    VALID = "valid"
    MISSING_SIGNATURE_HEADER = "missing_signature_header"
    MALFORMED_HEADER = "malformed_header"
    SIGNATURE_MISMATCH = "signature_mismatch"
    STALE_TIMESTAMP = "stale_timestamp"
    MALFORMED_PAYLOAD = "malformed_payload"
    MISSING_SECRET = "missing_secret"

    @property
    def http_status(self) -> int:
        """HTTP status a webhook endpoint should answer with."""
        return _HTTP_STATUS[self]

    @property
    def is_authentication_failure(self) -> bool:
        """Whether this outcome may indicate a forged or replayed delivery."""
        return self in (
            VerificationStatus.SIGNATURE_MISMATCH,
            VerificationStatus.STALE_TIMESTAMP,
        )


_HTTP_STATUS = {
    VerificationStatus.VALID: 200,
    VerificationStatus.MISSING_SIGNATURE_HEADER: 400,
    VerificationStatus.MALFORMED_HEADER: 400,
    VerificationStatus.MALFORMED_PAYLOAD: 400,
    VerificationStatus.SIGNATURE_MISMATCH: 401,
    VerificationStatus.STALE_TIMESTAMP: 401,
    VerificationStatus.MISSING_SECRET: 500,
}


class MalformedSignatureHeader(ValueError):
    """Raised by parse_signature_header() for an unparseable header value."""


@dataclass(frozen=True)
class SignatureHeader:
    """Decoded Stripe-Signature header."""

    timestamp: int
    """Claimed signing time, seconds since the epoch."""

    signatures: tuple[str, ...]
    """Hex digests of the v1 scheme, in header order."""


@dataclass(frozen=True)
class VerifiedEvent:
    """A webhook event whose signature and timestamp have been checked.

    Instances are only produced by verify_signature(); constructing one
    directly raises TypeError.
    """

    event_id: str | None
    event_type: str | None
    payload: dict[str, Any]
    timestamp: int
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._token is not _VERIFICATION_TOKEN:
            raise TypeError("VerifiedEvent can only be created by signature verification")

    @property
    def data_object(self) -> dict[str, Any] | None:
        """The ``data.object`` resource of the event, when present."""
        data = self.payload.get("data")
        if isinstance(data, dict) and isinstance(data.get("object"), dict):
            return data["object"]
        return None

    @property
    def livemode(self) -> bool:
        return bool(self.payload.get("livemode", False))


@dataclass(frozen=True)
class Verified:
    """Successful verification."""

    event: VerifiedEvent
    ok: Literal[True] = field(default=True, init=False)

    @property
    def status(self) -> VerificationStatus:
        return VerificationStatus.VALID

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Failed verification."""

    status: VerificationStatus
    reason: str
    """Generic description, safe to log; never contains digests or secrets."""

    timestamp: int | None = None
    """Signed timestamp, when the header could be parsed."""

    ok: Literal[False] = field(default=False, init=False)

    def __bool__(self) -> bool:
        return False


VerificationResult = Verified | Rejected


def parse_signature_header(header_value: str) -> SignatureHeader:
    """Parse a Stripe-Signature header value.

    Items other than ``t`` and ``v1`` (for example the legacy ``v0`` scheme)
    are ignored. When ``t`` appears more than once the first value wins.

    Args:
        header_value: The raw header value.

    Returns:
        The decoded SignatureHeader.

    Raises:
        MalformedSignatureHeader: If an item is not ``key=value``, ``t`` is
            missing or not a decimal integer, or no ``v1`` value is present.
    """
    timestamp: int | None = None
    signatures: list[str] = []

    for item in header_value.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep or not key:
            raise MalformedSignatureHeader("Header items must be key=value pairs")
        value = value.strip()
        if key == "t":
            if timestamp is not None:
                continue
            if not _DIGITS.fullmatch(value):
                raise MalformedSignatureHeader("Timestamp is not a decimal integer")
            timestamp = int(value)
        elif key == SIGNATURE_SCHEME and value:
            signatures.append(value)

    if timestamp is None:
        raise MalformedSignatureHeader("No timestamp in header")
    if not signatures:
        raise MalformedSignatureHeader(f"No {SIGNATURE_SCHEME} signature in header")

    return SignatureHeader(timestamp=timestamp, signatures=tuple(signatures))


def compute_signature(payload: bytes, secret: str, timestamp: int) -> str:
    """Compute the v1 signature of a payload.

    Args:
        payload: The raw body bytes.
        secret: The webhook signing secret.
        timestamp: Unix timestamp included in the signed message.

    Returns:
        Hexadecimal HMAC-SHA256 digest of ``"{timestamp}." + payload``.
    """
    signed_payload = f"{timestamp}.".encode() + payload
    return hmac.new(
        secret.encode("utf-8"),
        signed_payload,
        hashlib.sha256,
    ).hexdigest()


def generate_signature_header(
    payload: bytes,
    secret: str,
    timestamp: int | None = None,
    *,
    scheme: str = SIGNATURE_SCHEME,
) -> str:
    """Build a Stripe-Signature header value for a payload.

    Used for local development and tests, the same way Stripe's test
    helpers sign fixture events.

    Args:
        payload: The raw body bytes.
        secret: The webhook signing secret.
        timestamp: Signing time; defaults to now.
        scheme: Signature scheme label.

    Returns:
        Header value of the form ``t=<timestamp>,<scheme>=<signature>``.
    """
    if timestamp is None:
        timestamp = int(time.time())
    signature = compute_signature(payload, secret, timestamp)
    return f"t={timestamp},{scheme}={signature}"


def _constant_time_compare(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def _decode_event(payload: bytes, timestamp: int) -> VerifiedEvent | None:
    try:
        document = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        return None
    if not isinstance(document, dict):
        return None

    event_id = document.get("id")
    event_type = document.get("type")
    return VerifiedEvent(
        event_id=event_id if isinstance(event_id, str) else None,
        event_type=event_type if isinstance(event_type, str) else None,
        payload=document,
        timestamp=timestamp,
        _token=_VERIFICATION_TOKEN,
    )


def verify_signature(
    payload: bytes,
    signature_header: str | None,
    secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    *,
    now: int | None = None,
) -> VerificationResult:
    """Verify a webhook delivery and decode its event.

    Args:
        payload: The raw request body, exactly as received.
        signature_header: The Stripe-Signature header value, or None.
        secret: The endpoint's signing secret.
        tolerance_seconds: Maximum distance between the signed timestamp
            and now, inclusive. Zero accepts only the current second.
        now: Current Unix time; defaults to the system clock.

    Returns:
        Verified with the decoded event, or Rejected with the reason.
    """
    if not secret:
        return Rejected(
            status=VerificationStatus.MISSING_SECRET,
            reason="No webhook secret configured",
        )

    if not signature_header or not signature_header.strip():
        return Rejected(
            status=VerificationStatus.MISSING_SIGNATURE_HEADER,
            reason="No signature header",
        )

    try:
        header = parse_signature_header(signature_header)
    except MalformedSignatureHeader as e:
        return Rejected(
            status=VerificationStatus.MALFORMED_HEADER,
            reason=str(e),
        )

    expected = compute_signature(payload, secret, header.timestamp)
    # Compare against every candidate so timing does not reveal which one matched.
    matched = False
    for candidate in header.signatures:
        if _constant_time_compare(expected, candidate):
            matched = True
    if not matched:
        return Rejected(
            status=VerificationStatus.SIGNATURE_MISMATCH,
            reason="No signature matches the expected signature for the payload",
            timestamp=header.timestamp,
        )

    current_time = int(time.time()) if now is None else now
    if abs(current_time - header.timestamp) > tolerance_seconds:
        return Rejected(
            status=VerificationStatus.STALE_TIMESTAMP,
            reason="Timestamp outside the tolerance window",
            timestamp=header.timestamp,
        )

    event = _decode_event(payload, header.timestamp)
    if event is None:
        return Rejected(
            status=VerificationStatus.MALFORMED_PAYLOAD,
            reason="Payload is not a JSON object",
            timestamp=header.timestamp,
        )

    return Verified(event=event)


class WebhookVerifier:
    """Signature verifier bound to one endpoint's secret.

    The secret is fixed at construction and the verifier keeps no other
    state, so one instance can serve concurrent requests. Use a separate
    instance (and secret) for each webhook endpoint type.
    """

    __slots__ = ("_secret", "_tolerance_seconds", "_clock", "_name")

    def __init__(
        self,
        secret: str,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        clock: Callable[[], float] = time.time,
        name: str | None = None,
    ) -> None:
        """Initialize the webhook verifier.

        Args:
            secret: The endpoint's signing secret (whsec_...).
            tolerance_seconds: Maximum age of timestamp in seconds (default 5 min).
            clock: Returns the current Unix time; injectable for tests.
            name: Endpoint name used in log events.

        Raises:
            MissingSecretError: If the secret is empty.
            ConfigurationError: If the tolerance is negative.
        """
        if not secret:
            raise MissingSecretError(
                f"Webhook secret for {name or 'this endpoint'} is empty"
            )
        if tolerance_seconds < 0:
            raise ConfigurationError(
                f"Webhook tolerance must not be negative, got {tolerance_seconds}",
                hint="Use 0 to accept only the current second.",
            )
        self._secret = secret
        self._tolerance_seconds = tolerance_seconds
        self._clock = clock
        self._name = name

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def tolerance_seconds(self) -> int:
        return self._tolerance_seconds

    def verify(self, payload: bytes, signature_header: str | None) -> VerificationResult:
        """Verify a webhook delivery against the bound secret.

        Args:
            payload: The raw request body bytes.
            signature_header: The Stripe-Signature header value, or None.

        Returns:
            Verified or Rejected.
        """
        result = verify_signature(
            payload,
            signature_header,
            self._secret,
            self._tolerance_seconds,
            now=int(self._clock()),
        )
        if isinstance(result, Rejected):
            logger.debug(
                "Webhook signature rejected",
                endpoint=self._name,
                status=result.status.value,
            )
        return result

    def sign(self, payload: bytes, timestamp: int | None = None) -> str:
        """Build a valid signature header for a payload under the bound secret."""
        if timestamp is None:
            timestamp = int(self._clock())
        return generate_signature_header(payload, self._secret, timestamp)

    def __repr__(self) -> str:
        return (
            f"WebhookVerifier(name={self._name!r}, "
            f"tolerance_seconds={self._tolerance_seconds})"
        )
