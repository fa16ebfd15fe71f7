"""Stripe invoice items."""

from __future__ import annotations

from typing import ClassVar

import stripe

from stripe_facility.api.base import CrudClient


class InvoiceItemsClient(CrudClient):
    """Create, retrieve, update, delete and list invoice items.

    Items created without an ``invoice`` parameter are added to the
    customer's next invoice.
    """

    resource: ClassVar[str] = "invoice_items"
    stripe_resource: ClassVar[type[stripe.InvoiceItem]] = stripe.InvoiceItem
