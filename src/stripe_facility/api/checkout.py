"""Stripe Checkout sessions."""

from __future__ import annotations

from typing import Any, ClassVar

import stripe

from stripe_facility.api.base import ApiResult, ResourceClient


class CheckoutSessionsClient(ResourceClient):
    """Create hosted Checkout sessions."""

    resource: ClassVar[str] = "checkout_sessions"
    stripe_resource: ClassVar[type[stripe.checkout.Session]] = stripe.checkout.Session

    def create(self, **params: Any) -> ApiResult[Any]:
        """Create a Checkout session.

        Typical parameters: ``mode``, ``line_items``, ``success_url``,
        ``cancel_url`` and ``customer``. Redirect the customer to the
        returned session's ``url``.
        """
        return self._call("create", self.stripe_resource.create, **params)

    def retrieve(self, session_id: str, **params: Any) -> ApiResult[Any]:
        return self._call("retrieve", self.stripe_resource.retrieve, session_id, **params)
