"""Tests for StripeFacility."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import stripe

from stripe_facility import StripeFacility
from stripe_facility.api import CustomersClient, InvoicesClient
from stripe_facility.core.config import Environment, FacilitySettings
from stripe_facility.core.exceptions import (
    MissingCredentialError,
    MissingSecretError,
    UnknownWebhookEndpointError,
)
from stripe_facility.webhooks import WebhookEndpoint, generate_signature_header
from stripe_facility.webhooks.verifier import Verified, VerificationStatus

BODY = b'{"id":"evt_1","type":"invoice.paid"}'
NOW = 1700000000


@pytest.fixture
def production_settings():
    return FacilitySettings(
        environment="production",
        secret_key="sk_live_abc",
        publishable_key="pk_live_abc",
        test_secret_key="sk_test_abc",
        test_publishable_key="pk_test_abc",
        webhook_secret_invoice="whsec_inv",
        api_version="2024-06-20",
    )


class TestStripeFacility:
    """Tests for the facility object."""

    def test_mode_and_publishable_key(self, production_settings):
        """Test the production mode and keys."""
        facility = StripeFacility(production_settings)
        assert facility.mode == Environment.PRODUCTION
        assert facility.publishable_key == "pk_live_abc"

    def test_development_mode(self):
        """Test development keys."""
        facility = StripeFacility(
            FacilitySettings(
                environment="development",
                test_secret_key="sk_test_abc",
                test_publishable_key="pk_test_abc",
            )
        )
        assert facility.mode == Environment.DEVELOPMENT
        assert facility.publishable_key == "pk_test_abc"

    def test_clients_are_cached(self, production_settings):
        """Test that each client is built once."""
        facility = StripeFacility(production_settings)
        assert isinstance(facility.customers, CustomersClient)
        assert isinstance(facility.invoices, InvoicesClient)
        assert facility.customers is facility.customers

    def test_clients_use_active_key(self, production_settings):
        """Test that clients are bound to the live key in production."""
        facility = StripeFacility(production_settings)
        assert facility.products.request_options == {
            "api_key": "sk_live_abc",
            "stripe_version": "2024-06-20",
        }

    def test_clients_use_test_key_in_development(self, production_settings):
        """Test that clients are bound to the test key in development."""
        settings = production_settings.model_copy(update={"environment": Environment.DEVELOPMENT})
        facility = StripeFacility(settings)
        assert facility.subscriptions.request_options["api_key"] == "sk_test_abc"

    def test_construction_without_key_raises(self):
        """Test that a facility without an API key fails at construction."""
        with pytest.raises(MissingCredentialError, match="STRIPE_FACILITY_SECRET_KEY"):
            StripeFacility(FacilitySettings(webhook_secret_invoice="whsec_inv"))

    def test_construction_without_test_key_raises(self):
        """Test the development message names the test key."""
        settings = FacilitySettings(environment="development", secret_key="sk_live_abc")
        with pytest.raises(MissingCredentialError, match="STRIPE_FACILITY_TEST_SECRET_KEY"):
            StripeFacility(settings)

    def test_webhooks_only_without_key(self):
        """Test a webhooks-only facility: verification works, clients raise on access."""
        facility = StripeFacility(
            FacilitySettings(webhook_secret_invoice="whsec_inv"),
            clock=lambda: NOW,
            webhooks_only=True,
        )
        header = generate_signature_header(BODY, "whsec_inv", NOW)
        assert facility.verify_webhook("invoice", BODY, header)

        with pytest.raises(MissingCredentialError, match="STRIPE_FACILITY_SECRET_KEY"):
            facility.customers
        with pytest.raises(MissingCredentialError):
            facility.checkout

    def test_client_call(self, production_settings):
        """Test a call through a facility client."""
        facility = StripeFacility(production_settings)
        with patch.object(stripe.Customer, "retrieve", return_value={"id": "cus_1"}) as mock:
            result = facility.customers.retrieve("cus_1")

        assert result.unwrap() == {"id": "cus_1"}
        mock.assert_called_once_with(
            "cus_1", api_key="sk_live_abc", stripe_version="2024-06-20"
        )

    def test_repr_hides_keys(self, production_settings):
        """Test that the repr does not include keys."""
        text = repr(StripeFacility(production_settings))
        assert "sk_live_abc" not in text
        assert "production" in text


class TestFacilityWebhooks:
    """Tests for webhook verification through the facility."""

    def test_verify_webhook(self, production_settings):
        """Test verifying an invoice delivery."""
        facility = StripeFacility(production_settings, clock=lambda: NOW)
        header = generate_signature_header(BODY, "whsec_inv", NOW)

        result = facility.verify_webhook("invoice", BODY, header)

        assert isinstance(result, Verified)
        assert result.event.event_type == "invoice.paid"

    def test_verify_webhook_stale(self, production_settings):
        """Test that the facility clock drives the timestamp check."""
        facility = StripeFacility(production_settings, clock=lambda: NOW + 301)
        header = generate_signature_header(BODY, "whsec_inv", NOW)
        result = facility.verify_webhook(WebhookEndpoint.INVOICE, BODY, header)
        assert result.status == VerificationStatus.STALE_TIMESTAMP

    def test_unconfigured_endpoint_raises(self, production_settings):
        """Test that an endpoint without a secret raises."""
        facility = StripeFacility(production_settings)
        with pytest.raises(MissingSecretError):
            facility.verifier("customer")

    def test_unknown_endpoint_raises(self, production_settings):
        """Test that an unknown endpoint type raises."""
        facility = StripeFacility(production_settings)
        with pytest.raises(UnknownWebhookEndpointError):
            facility.verify_webhook("refund", BODY, None)

    def test_verifiers(self, production_settings):
        """Test the configured verifiers."""
        facility = StripeFacility(production_settings)
        assert list(facility.verifiers) == [WebhookEndpoint.INVOICE]
