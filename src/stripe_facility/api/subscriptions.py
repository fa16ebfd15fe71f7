"""Stripe subscriptions."""

from __future__ import annotations

from typing import Any, ClassVar

import stripe

from stripe_facility.api.base import DEFAULT_LIST_LIMIT, ApiResult, ResourceClient


class SubscriptionsClient(ResourceClient):
    """Create, retrieve, update, cancel and list subscriptions."""

    resource: ClassVar[str] = "subscriptions"
    stripe_resource: ClassVar[type[stripe.Subscription]] = stripe.Subscription

    def create(self, **params: Any) -> ApiResult[Any]:
        """Create a subscription on an existing customer."""
        return self._call("create", self.stripe_resource.create, **params)

    def retrieve(self, subscription_id: str, **params: Any) -> ApiResult[Any]:
        return self._call("retrieve", self.stripe_resource.retrieve, subscription_id, **params)

    def update(self, subscription_id: str, **params: Any) -> ApiResult[Any]:
        """Update a subscription; changing prices may create prorations."""
        return self._call("update", self.stripe_resource.modify, subscription_id, **params)

    def cancel(self, subscription_id: str, **params: Any) -> ApiResult[Any]:
        """Cancel a subscription immediately.

        Use ``update(id, cancel_at_period_end=True)`` to cancel at the end
        of the current period instead.
        """
        return self._call("cancel", self.stripe_resource.cancel, subscription_id, **params)

    def list(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        status: str | None = None,
        **params: Any,
    ) -> ApiResult[Any]:
        """List subscriptions, optionally filtered by status (e.g. "active", "canceled")."""
        if status:
            params["status"] = status
        return self._call("list", self.stripe_resource.list, limit=limit, **params)
