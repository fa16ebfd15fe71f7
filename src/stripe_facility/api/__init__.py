"""Stripe resource clients.

Thin clients over the Stripe SDK. Each is bound to an API key at
construction (an empty key raises MissingCredentialError) and returns
Success or Failure from every call.

Usage:
    from stripe_facility.api import CustomersClient

    customers = CustomersClient(api_key="sk_test_...")
    result = customers.create(email="jenny@example.com")

    if result:
        print(result.data.id)
    else:
        print(result.error.kind, result.error.http_status, result.error.code)
"""

from stripe_facility.api.base import (
    DEFAULT_LIST_LIMIT,
    ApiResult,
    CrudClient,
    Failure,
    ProviderError,
    ProviderErrorKind,
    ResourceClient,
    Success,
)
from stripe_facility.api.checkout import CheckoutSessionsClient
from stripe_facility.api.customers import CustomersClient
from stripe_facility.api.invoice_items import InvoiceItemsClient
from stripe_facility.api.invoices import InvoicesClient
from stripe_facility.api.products import ProductsClient
from stripe_facility.api.subscriptions import SubscriptionsClient

__all__ = [
    # Results
    "ApiResult",
    "Success",
    "Failure",
    "ProviderError",
    "ProviderErrorKind",
    # Base classes
    "ResourceClient",
    "CrudClient",
    "DEFAULT_LIST_LIMIT",
    # Clients
    "CustomersClient",
    "ProductsClient",
    "SubscriptionsClient",
    "InvoicesClient",
    "InvoiceItemsClient",
    "CheckoutSessionsClient",
]
