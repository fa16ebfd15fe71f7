"""Stripe invoices."""

from __future__ import annotations

from typing import Any, ClassVar

import stripe

from stripe_facility.api.base import DEFAULT_LIST_LIMIT, REQUEST_OPTIONS, ApiResult, CrudClient


class InvoicesClient(CrudClient):
    """Invoices: CRUD plus the invoice lifecycle transitions.

    Only draft invoices can be deleted; finalized ones must be voided.
    """

    resource: ClassVar[str] = "invoices"
    stripe_resource: ClassVar[type[stripe.Invoice]] = stripe.Invoice

    def finalize(self, invoice_id: str, **params: Any) -> ApiResult[Any]:
        """Finalize a draft invoice so it can be paid or sent."""
        return self._call("finalize", self.stripe_resource.finalize_invoice, invoice_id, **params)

    def pay(self, invoice_id: str, **params: Any) -> ApiResult[Any]:
        """Attempt payment of an open invoice outside the normal collection schedule."""
        return self._call("pay", self.stripe_resource.pay, invoice_id, **params)

    def send(self, invoice_id: str, **params: Any) -> ApiResult[Any]:
        """Email an invoice to the customer."""
        return self._call("send", self.stripe_resource.send_invoice, invoice_id, **params)

    def void(self, invoice_id: str, **params: Any) -> ApiResult[Any]:
        """Void a finalized invoice."""
        return self._call("void", self.stripe_resource.void_invoice, invoice_id, **params)

    def mark_uncollectible(self, invoice_id: str, **params: Any) -> ApiResult[Any]:
        return self._call(
            "mark_uncollectible",
            self.stripe_resource.mark_uncollectible,
            invoice_id,
            **params,
        )

    def list_lines(
        self,
        invoice_id: str,
        limit: int = DEFAULT_LIST_LIMIT,
        **params: Any,
    ) -> ApiResult[Any]:
        """List the line items of an invoice."""
        return self._call(
            "list_lines",
            self.stripe_resource.list_lines,
            invoice_id,
            limit=limit,
            **params,
        )

    def upcoming(self, customer_id: str, **params: Any) -> ApiResult[Any]:
        """Preview the next invoice of a customer.

        The preview is not a real invoice; it shows pending invoice items
        and the next subscription charge.
        """
        return self._call(
            "upcoming",
            self.stripe_resource.create_preview,
            customer=customer_id,
            **params,
        )

    def upcoming_lines(
        self,
        customer_id: str,
        limit: int = DEFAULT_LIST_LIMIT,
        **params: Any,
    ) -> ApiResult[Any]:
        """List the line items of a customer's next invoice."""
        invoice = self.stripe_resource

        def preview_lines(**preview_params: Any) -> Any:
            preview = invoice.create_preview(**preview_params)
            options = {k: v for k, v in preview_params.items() if k in REQUEST_OPTIONS}
            return invoice.list_lines(preview["id"], limit=limit, **options)

        return self._call("upcoming_lines", preview_lines, customer=customer_id, **params)
