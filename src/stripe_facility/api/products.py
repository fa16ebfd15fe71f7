"""Stripe products."""

from __future__ import annotations

from typing import ClassVar

import stripe

from stripe_facility.api.base import CrudClient


class ProductsClient(CrudClient):
    """Create, retrieve, update, delete and list products."""

    resource: ClassVar[str] = "products"
    stripe_resource: ClassVar[type[stripe.Product]] = stripe.Product
