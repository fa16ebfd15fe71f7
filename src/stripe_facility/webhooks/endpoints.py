"""Webhook endpoint types and their verifiers.

Each webhook endpoint type (invoice events, customer events) is configured
in the Stripe dashboard with its own signing secret, so each gets its own
WebhookVerifier. In development all endpoints receive events forwarded by
``stripe listen``, which signs with a single CLI secret.

Usage:
    from stripe_facility.webhooks.endpoints import build_verifiers, get_endpoint

    verifiers = build_verifiers(settings)
    verifier = verifiers[get_endpoint("invoice")]
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from stripe_facility.core.exceptions import UnknownWebhookEndpointError
from stripe_facility.webhooks.verifier import WebhookVerifier

if TYPE_CHECKING:
    from stripe_facility.core.config import FacilitySettings

logger = structlog.get_logger()


class WebhookEndpoint(str, Enum):
    """Webhook endpoint types served by the facility."""

    INVOICE = "invoice"
    CUSTOMER = "customer"

    @property
    def event_prefixes(self) -> tuple[str, ...]:
        """Event type prefixes Stripe delivers to this endpoint."""
        return _EVENT_PREFIXES[self]


_EVENT_PREFIXES: dict[WebhookEndpoint, tuple[str, ...]] = {
    WebhookEndpoint.INVOICE: ("invoice.", "invoiceitem."),
    WebhookEndpoint.CUSTOMER: ("customer.",),
}


def get_endpoint(name: str | WebhookEndpoint) -> WebhookEndpoint:
    """Get a webhook endpoint type by name.

    Args:
        name: Endpoint name (case-insensitive) or WebhookEndpoint.

    Returns:
        The matching WebhookEndpoint.

    Raises:
        UnknownWebhookEndpointError: If no endpoint has that name.
    """
    if isinstance(name, WebhookEndpoint):
        return name
    try:
        return WebhookEndpoint(name.strip().lower())
    except ValueError:
        raise UnknownWebhookEndpointError(name) from None


def build_verifiers(
    settings: FacilitySettings,
    clock: Callable[[], float] = time.time,
) -> dict[WebhookEndpoint, WebhookVerifier]:
    """Bind one verifier per configured endpoint type.

    Endpoints without a configured secret are left out, so requests to
    them are answered as unknown routes rather than verified with an
    empty key.

    Args:
        settings: Facility settings holding the secrets.
        clock: Time source handed to every verifier.

    Returns:
        Mapping of endpoint type to its verifier.
    """
    verifiers: dict[WebhookEndpoint, WebhookVerifier] = {}
    for endpoint in WebhookEndpoint:
        secret = settings.webhook_secret_for(endpoint.value)
        if not secret:
            logger.info("Webhook endpoint disabled, no secret configured", endpoint=endpoint.value)
            continue
        verifiers[endpoint] = WebhookVerifier(
            secret=secret,
            tolerance_seconds=settings.webhook_tolerance_seconds,
            clock=clock,
            name=endpoint.value,
        )
    return verifiers
