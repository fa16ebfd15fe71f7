"""Stripe Webhook Verification Module.

Verifies that inbound webhook deliveries were signed by Stripe with the
endpoint's secret, within the replay tolerance window, and decodes the
event.

Security Features:
- HMAC-SHA256 over "{timestamp}.{raw body}"
- Constant-time signature comparison
- Multiple v1 signatures accepted during secret rotation
- Timestamp validation (replay attack prevention)
- Typed results instead of exceptions for rejected deliveries

Usage:
    from stripe_facility.webhooks import WebhookVerifier

    verifier = WebhookVerifier(secret="whsec_...")
    result = verifier.verify(payload=raw_body, signature_header=header)

    if result:
        print(f"Verified {result.event.event_type}")
    else:
        print(f"Rejected: {result.status.value}")

Serving endpoints:
    from stripe_facility.webhooks import WebhookHandler, build_verifiers

    handler = WebhookHandler(build_verifiers(settings), on_event=process)
    handler.register_routes(app)
"""

from stripe_facility.webhooks.endpoints import (
    WebhookEndpoint,
    build_verifiers,
    get_endpoint,
)
from stripe_facility.webhooks.handler import STRIPE_SIGNATURE_HEADER, WebhookHandler
from stripe_facility.webhooks.verifier import (
    DEFAULT_TOLERANCE_SECONDS,
    MalformedSignatureHeader,
    Rejected,
    SignatureHeader,
    VerificationResult,
    VerificationStatus,
    Verified,
    VerifiedEvent,
    WebhookVerifier,
    compute_signature,
    generate_signature_header,
    parse_signature_header,
    verify_signature,
)

__all__ = [
    # Verification
    "WebhookVerifier",
    "verify_signature",
    "VerificationResult",
    "VerificationStatus",
    "Verified",
    "Rejected",
    "VerifiedEvent",
    "SignatureHeader",
    "MalformedSignatureHeader",
    "DEFAULT_TOLERANCE_SECONDS",
    # Endpoints
    "WebhookEndpoint",
    "build_verifiers",
    "get_endpoint",
    "WebhookHandler",
    "STRIPE_SIGNATURE_HEADER",
    # Utilities
    "parse_signature_header",
    "compute_signature",
    "generate_signature_header",
]
