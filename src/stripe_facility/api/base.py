"""Base resource client and typed API results.

Resource clients forward their arguments to the Stripe SDK unchanged and
return ``Success`` or ``Failure`` instead of raising. A ``Failure`` keeps the
provider's HTTP status, error code, parameter and request id so callers can
decide what to show their users.

The API key is bound when the client is constructed and passed with every
request as a per-request option; the process-wide ``stripe.api_key`` is
never touched.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Generic, Literal, NoReturn, TypeVar

import stripe
import structlog

from stripe_facility.core.exceptions import MissingCredentialError, ProviderCallError
from stripe_facility.observability.metrics import API_CALL_DURATION, API_CALLS

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_LIST_LIMIT = 2

REQUEST_OPTIONS = ("api_key", "stripe_version", "stripe_account")


class ProviderErrorKind(Enum):
    """Classification of errors returned by the Stripe API."""

    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    IDEMPOTENCY = "idempotency"
    CARD = "card"
    CONNECTION = "connection"
    API = "api"


@dataclass(frozen=True)
class ProviderError:
    """A Stripe API error, with the provider's details preserved."""

    kind: ProviderErrorKind
    message: str
    http_status: int | None = None
    code: str | None = None
    param: str | None = None
    request_id: str | None = None

    @classmethod
    def from_stripe_error(cls, error: stripe.StripeError) -> ProviderError:
        """Classify a Stripe SDK exception.

        Args:
            error: The exception raised by the SDK.

        Returns:
            ProviderError with kind, status and code copied from the exception.
        """
        return cls(
            kind=_classify(error),
            message=error.user_message or str(error) or type(error).__name__,
            http_status=error.http_status,
            code=error.code,
            param=getattr(error, "param", None),
            request_id=error.request_id,
        )


def _classify(error: stripe.StripeError) -> ProviderErrorKind:
    if isinstance(error, stripe.AuthenticationError):
        return ProviderErrorKind.AUTHENTICATION
    if isinstance(error, stripe.PermissionError):
        return ProviderErrorKind.PERMISSION
    if isinstance(error, stripe.RateLimitError):
        return ProviderErrorKind.RATE_LIMIT
    if isinstance(error, stripe.CardError):
        return ProviderErrorKind.CARD
    if isinstance(error, stripe.IdempotencyError):
        return ProviderErrorKind.IDEMPOTENCY
    if isinstance(error, stripe.InvalidRequestError):
        if error.http_status == 404 or error.code == "resource_missing":
            return ProviderErrorKind.NOT_FOUND
        return ProviderErrorKind.INVALID_REQUEST
    if isinstance(error, stripe.APIConnectionError):
        return ProviderErrorKind.CONNECTION
    return ProviderErrorKind.API


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful API call."""

    data: T
    ok: Literal[True] = field(default=True, init=False)

    def unwrap(self) -> T:
        return self.data

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed API call."""

    error: ProviderError
    ok: Literal[False] = field(default=False, init=False)

    def unwrap(self) -> NoReturn:
        raise ProviderCallError(self.error)

    def __bool__(self) -> bool:
        return False


ApiResult = Success[T] | Failure


class ResourceClient:
    """Base class for Stripe resource clients.

    Subclasses set ``resource`` (the name used in logs and metrics) and
    ``stripe_resource`` (the SDK class the calls go to).
    """

    resource: ClassVar[str] = "resource"
    stripe_resource: ClassVar[Any] = None

    def __init__(
        self,
        api_key: str,
        *,
        stripe_version: str | None = None,
        stripe_account: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Stripe secret API key.
            stripe_version: Pin an API version for this client's requests.
            stripe_account: Act on behalf of a connected account.

        Raises:
            MissingCredentialError: If the API key is empty.
        """
        if not api_key:
            raise MissingCredentialError(
                f"An API key is required to create the {self.resource} client"
            )
        self._api_key = api_key
        self._stripe_version = stripe_version
        self._stripe_account = stripe_account

    @property
    def request_options(self) -> dict[str, str]:
        """Per-request options sent with every call."""
        options = {"api_key": self._api_key}
        if self._stripe_version:
            options["stripe_version"] = self._stripe_version
        if self._stripe_account:
            options["stripe_account"] = self._stripe_account
        return options

    def _call(
        self,
        operation: str,
        method: Callable[..., Any],
        *args: Any,
        **params: Any,
    ) -> ApiResult[Any]:
        """Invoke an SDK method and wrap the outcome.

        Args:
            operation: Operation name for logs and metrics.
            method: SDK callable to invoke.
            *args: Positional arguments (usually the object id).
            **params: API parameters, forwarded unchanged. Request options
                given here (``stripe_account``, ``stripe_version``) take
                precedence over the ones bound to the client.

        Returns:
            Success with the SDK object, or Failure with the provider error.
        """
        start = time.perf_counter()
        try:
            data = method(*args, **{**self.request_options, **params})
        except stripe.StripeError as e:
            error = ProviderError.from_stripe_error(e)
            API_CALLS.labels(
                resource=self.resource, operation=operation, outcome=error.kind.value
            ).inc()
            logger.warning(
                "Stripe API call failed",
                resource=self.resource,
                operation=operation,
                kind=error.kind.value,
                http_status=error.http_status,
                code=error.code,
                request_id=error.request_id,
            )
            return Failure(error)
        finally:
            API_CALL_DURATION.labels(resource=self.resource).observe(
                time.perf_counter() - start
            )

        API_CALLS.labels(resource=self.resource, operation=operation, outcome="success").inc()
        logger.debug("Stripe API call succeeded", resource=self.resource, operation=operation)
        return Success(data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(stripe_version={self._stripe_version!r})"


class CrudClient(ResourceClient):
    """Resource client with the standard create/retrieve/update/delete/list calls."""

    def create(self, **params: Any) -> ApiResult[Any]:
        """Create a new object."""
        return self._call("create", self.stripe_resource.create, **params)

    def retrieve(self, object_id: str, **params: Any) -> ApiResult[Any]:
        """Retrieve an existing object by id."""
        return self._call("retrieve", self.stripe_resource.retrieve, object_id, **params)

    def update(self, object_id: str, **params: Any) -> ApiResult[Any]:
        """Update an object; parameters not provided are left unchanged."""
        return self._call("update", self.stripe_resource.modify, object_id, **params)

    def delete(self, object_id: str, **params: Any) -> ApiResult[Any]:
        """Permanently delete an object."""
        return self._call("delete", self.stripe_resource.delete, object_id, **params)

    def list(self, limit: int = DEFAULT_LIST_LIMIT, **params: Any) -> ApiResult[Any]:
        """List objects, most recent first."""
        return self._call("list", self.stripe_resource.list, limit=limit, **params)
