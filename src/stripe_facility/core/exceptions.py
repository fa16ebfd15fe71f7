"""Exception hierarchy for configuration and programming errors.

Expected failures (rejected webhook deliveries, provider-side API errors)
are returned as values and never raised. The exceptions here cover the
cases that should fail fast: a client built without an API key, a
verifier built without a secret, an endpoint type nobody configured.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stripe_facility.api.base import ProviderError


class FacilityError(Exception):
    """Base class for all stripe-facility errors."""

    hint: str | None = None

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if hint is not None:
            self.hint = hint


class ConfigurationError(FacilityError):
    """Raised when a component is set up with unusable configuration."""


class MissingCredentialError(ConfigurationError):
    """Raised when a resource client is constructed without an API key."""

    hint = "Set STRIPE_FACILITY_SECRET_KEY (or STRIPE_FACILITY_TEST_SECRET_KEY in development)."


class MissingSecretError(ConfigurationError):
    """Raised when a webhook verifier is constructed without a secret."""

    hint = "Set the webhook signing secret for this endpoint type."


class UnknownWebhookEndpointError(ConfigurationError, KeyError):
    """Raised when asking for a webhook endpoint type that does not exist."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(
            f"Unknown webhook endpoint: {endpoint!r}",
            hint="Supported endpoint types are 'invoice' and 'customer'.",
        )
        self.endpoint = endpoint

    def __str__(self) -> str:
        return self.message


class ProviderCallError(FacilityError):
    """Raised by ``Failure.unwrap()`` to turn a provider error into an exception."""

    def __init__(self, error: ProviderError) -> None:
        super().__init__(f"{error.kind.value}: {error.message}")
        self.error = error


def format_error_for_user(exc: BaseException) -> str:
    """Render an exception as a short, user-facing message.

    Args:
        exc: The exception to format.

    Returns:
        Message text, followed by a hint line when one is available.
    """
    if isinstance(exc, FacilityError):
        text = exc.message
        if exc.hint:
            text = f"{text}\nHint: {exc.hint}"
        return text
    return f"Unexpected error: {exc}"
