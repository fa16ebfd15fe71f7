"""Stripe customers."""

from __future__ import annotations

from typing import ClassVar

import stripe

from stripe_facility.api.base import CrudClient


class CustomersClient(CrudClient):
    """Create, retrieve, update, delete and list customers.

    Deleting a customer cannot be undone and immediately cancels any active
    subscriptions on the customer.
    """

    resource: ClassVar[str] = "customers"
    stripe_resource: ClassVar[type[stripe.Customer]] = stripe.Customer
