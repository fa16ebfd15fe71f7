"""StripeFacility - one object wiring credentials, clients and webhook verifiers.

The facility is built from an explicit FacilitySettings value. It selects
the live or test API key once, hands it to every resource client, and binds
one webhook verifier per endpoint type.

Usage:
    from stripe_facility import StripeFacility
    from stripe_facility.core.config import get_settings

    facility = StripeFacility(get_settings())
    customer = facility.customers.create(email="jenny@example.com").unwrap()

    result = facility.verify_webhook("invoice", raw_body, signature_header)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import cached_property

import structlog

from stripe_facility.api import (
    CheckoutSessionsClient,
    CustomersClient,
    InvoiceItemsClient,
    InvoicesClient,
    ProductsClient,
    ResourceClient,
    SubscriptionsClient,
)
from stripe_facility.core.config import Environment, FacilitySettings
from stripe_facility.core.exceptions import MissingCredentialError, MissingSecretError
from stripe_facility.webhooks.endpoints import WebhookEndpoint, build_verifiers, get_endpoint
from stripe_facility.webhooks.verifier import VerificationResult, WebhookVerifier

logger = structlog.get_logger()


class StripeFacility:
    """Entry point to the Stripe resource clients and webhook verification."""

    def __init__(
        self,
        settings: FacilitySettings,
        clock: Callable[[], float] = time.time,
        *,
        webhooks_only: bool = False,
    ) -> None:
        """Initialize the facility.

        Args:
            settings: Credentials, secrets and mode.
            clock: Time source for webhook timestamp checks.
            webhooks_only: Allow running without an API key. Resource
                clients then raise MissingCredentialError when accessed.

        Raises:
            MissingCredentialError: If no API key is configured for the
                active environment and webhooks_only is not set.
        """
        self._settings = settings
        if not webhooks_only and not settings.api_key:
            raise self._missing_credential()
        self._verifiers = build_verifiers(settings, clock=clock)
        logger.debug(
            "Stripe facility ready",
            environment=settings.environment.value,
            webhook_endpoints=[e.value for e in self._verifiers],
        )

    @property
    def mode(self) -> Environment:
        return self._settings.environment

    @property
    def publishable_key(self) -> str | None:
        """Publishable key for the active environment (safe to send to browsers)."""
        return self._settings.active_publishable_key

    def _missing_credential(self) -> MissingCredentialError:
        key_name = "test_secret_key" if self._settings.is_development else "secret_key"
        return MissingCredentialError(
            f"No Stripe API key configured for {self._settings.environment.value} "
            f"(STRIPE_FACILITY_{key_name.upper()})"
        )

    def _client(self, client_class: type[ResourceClient]) -> ResourceClient:
        api_key = self._settings.api_key
        if not api_key:
            raise self._missing_credential()
        return client_class(api_key, stripe_version=self._settings.api_version)

    @cached_property
    def customers(self) -> CustomersClient:
        return self._client(CustomersClient)

    @cached_property
    def products(self) -> ProductsClient:
        return self._client(ProductsClient)

    @cached_property
    def subscriptions(self) -> SubscriptionsClient:
        return self._client(SubscriptionsClient)

    @cached_property
    def invoices(self) -> InvoicesClient:
        return self._client(InvoicesClient)

    @cached_property
    def invoice_items(self) -> InvoiceItemsClient:
        return self._client(InvoiceItemsClient)

    @cached_property
    def checkout(self) -> CheckoutSessionsClient:
        return self._client(CheckoutSessionsClient)

    @property
    def verifiers(self) -> dict[WebhookEndpoint, WebhookVerifier]:
        """Verifiers of every endpoint that has a secret configured."""
        return dict(self._verifiers)

    def verifier(self, endpoint: str | WebhookEndpoint) -> WebhookVerifier:
        """Get the verifier bound to an endpoint type.

        Raises:
            UnknownWebhookEndpointError: If the endpoint type does not exist.
            MissingSecretError: If the endpoint has no secret configured.
        """
        endpoint = get_endpoint(endpoint)
        try:
            return self._verifiers[endpoint]
        except KeyError:
            raise MissingSecretError(
                f"Webhook secret for the {endpoint.value} endpoint is empty"
            ) from None

    def verify_webhook(
        self,
        endpoint: str | WebhookEndpoint,
        payload: bytes,
        signature_header: str | None,
    ) -> VerificationResult:
        """Verify a webhook delivery received on an endpoint."""
        return self.verifier(endpoint).verify(payload, signature_header)

    def __repr__(self) -> str:
        return f"StripeFacility(mode={self.mode.value!r})"
