"""Tests for webhook endpoint types and verifier binding."""

from __future__ import annotations

import pytest

from stripe_facility.core.config import FacilitySettings
from stripe_facility.core.exceptions import ConfigurationError, UnknownWebhookEndpointError
from stripe_facility.webhooks.endpoints import WebhookEndpoint, build_verifiers, get_endpoint
from stripe_facility.webhooks.verifier import VerificationStatus

BODY = b'{"id":"evt_1","type":"invoice.paid"}'
NOW = 1700000000


class TestGetEndpoint:
    """Tests for endpoint lookup."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("invoice", WebhookEndpoint.INVOICE),
            ("customer", WebhookEndpoint.CUSTOMER),
            ("INVOICE", WebhookEndpoint.INVOICE),
            (" Customer ", WebhookEndpoint.CUSTOMER),
            (WebhookEndpoint.INVOICE, WebhookEndpoint.INVOICE),
        ],
    )
    def test_known_endpoints(self, name, expected):
        """Test lookup by name and by member."""
        assert get_endpoint(name) is expected

    def test_unknown_endpoint_raises(self):
        """Test that an unknown endpoint type raises."""
        with pytest.raises(UnknownWebhookEndpointError) as exc_info:
            get_endpoint("charge")
        assert exc_info.value.endpoint == "charge"
        assert "charge" in str(exc_info.value)

    def test_unknown_endpoint_error_types(self):
        """Test that the error is both a ConfigurationError and a KeyError."""
        with pytest.raises(KeyError):
            get_endpoint("refund")
        with pytest.raises(ConfigurationError):
            get_endpoint("refund")

    def test_event_prefixes(self):
        """Test the event families routed to each endpoint."""
        assert "invoice.paid".startswith(WebhookEndpoint.INVOICE.event_prefixes)
        assert "invoiceitem.created".startswith(WebhookEndpoint.INVOICE.event_prefixes)
        assert "customer.updated".startswith(WebhookEndpoint.CUSTOMER.event_prefixes)
        assert not "customer.updated".startswith(WebhookEndpoint.INVOICE.event_prefixes)


class TestBuildVerifiers:
    """Tests for build_verifiers."""

    def test_production_binds_each_secret(self):
        """Test one verifier per configured endpoint secret."""
        settings = FacilitySettings(
            webhook_secret_invoice="whsec_inv",
            webhook_secret_customer="whsec_cus",
        )
        verifiers = build_verifiers(settings, clock=lambda: NOW)

        assert set(verifiers) == {WebhookEndpoint.INVOICE, WebhookEndpoint.CUSTOMER}
        header = verifiers[WebhookEndpoint.INVOICE].sign(BODY)
        assert verifiers[WebhookEndpoint.INVOICE].verify(BODY, header)
        assert (
            verifiers[WebhookEndpoint.CUSTOMER].verify(BODY, header).status
            == VerificationStatus.SIGNATURE_MISMATCH
        )

    def test_unconfigured_endpoints_skipped(self):
        """Test that endpoints without a secret get no verifier."""
        settings = FacilitySettings(webhook_secret_invoice="whsec_inv")
        verifiers = build_verifiers(settings)
        assert list(verifiers) == [WebhookEndpoint.INVOICE]

    def test_no_secrets(self):
        """Test that no secrets means no verifiers."""
        assert build_verifiers(FacilitySettings()) == {}

    def test_development_shares_cli_secret(self):
        """Test that in development every endpoint uses the CLI secret."""
        settings = FacilitySettings(environment="development", webhook_secret_cli="whsec_cli")
        verifiers = build_verifiers(settings, clock=lambda: NOW)

        assert set(verifiers) == set(WebhookEndpoint)
        header = verifiers[WebhookEndpoint.INVOICE].sign(BODY)
        assert verifiers[WebhookEndpoint.CUSTOMER].verify(BODY, header)

    def test_tolerance_and_names(self):
        """Test that verifiers carry the configured tolerance and endpoint name."""
        settings = FacilitySettings(
            webhook_secret_customer="whsec_cus",
            webhook_tolerance_seconds=42,
        )
        verifier = build_verifiers(settings)[WebhookEndpoint.CUSTOMER]
        assert verifier.tolerance_seconds == 42
        assert verifier.name == "customer"
