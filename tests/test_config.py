"""Tests for configuration loading from environment variables and files."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from stripe_facility.core.config import (
    Environment,
    FacilitySettings,
    clear_settings,
    flatten_config,
    get_settings,
    load_config_from_file,
    settings_from_file,
)


class TestFacilitySettings:
    """Test FacilitySettings defaults and environment overrides."""

    def test_default_values(self) -> None:
        """Test default values."""
        settings = FacilitySettings()
        assert settings.environment == Environment.PRODUCTION
        assert settings.secret_key is None
        assert settings.webhook_tolerance_seconds == 300
        assert settings.api_version is None
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000

    def test_env_override_environment(self) -> None:
        """Test STRIPE_FACILITY_ENVIRONMENT env var."""
        with patch.dict(os.environ, {"STRIPE_FACILITY_ENVIRONMENT": "development"}):
            settings = FacilitySettings()
            assert settings.environment == Environment.DEVELOPMENT
            assert settings.is_development is True

    def test_env_override_tolerance(self) -> None:
        """Test STRIPE_FACILITY_WEBHOOK_TOLERANCE_SECONDS env var."""
        with patch.dict(os.environ, {"STRIPE_FACILITY_WEBHOOK_TOLERANCE_SECONDS": "60"}):
            settings = FacilitySettings()
            assert settings.webhook_tolerance_seconds == 60

    def test_negative_tolerance_rejected(self) -> None:
        """Test that a negative tolerance is invalid."""
        with pytest.raises(ValidationError):
            FacilitySettings(webhook_tolerance_seconds=-1)

    def test_invalid_environment_rejected(self) -> None:
        """Test that unknown environments are invalid."""
        with pytest.raises(ValidationError):
            FacilitySettings(environment="staging")

    def test_secret_values_hidden_in_repr(self) -> None:
        """Test that secrets do not appear in repr."""
        settings = FacilitySettings(secret_key="sk_live_abc", webhook_secret_invoice="whsec_inv")
        assert "sk_live_abc" not in repr(settings)
        assert "whsec_inv" not in repr(settings)


class TestCredentialSelection:
    """Test live vs test credential selection."""

    def test_production_uses_live_keys(self) -> None:
        """Test the production API and publishable keys."""
        settings = FacilitySettings(
            environment="production",
            secret_key="sk_live_abc",
            publishable_key="pk_live_abc",
            test_secret_key="sk_test_abc",
            test_publishable_key="pk_test_abc",
        )
        assert settings.api_key == "sk_live_abc"
        assert settings.active_publishable_key == "pk_live_abc"

    def test_development_uses_test_keys(self) -> None:
        """Test the development API and publishable keys."""
        settings = FacilitySettings(
            environment="development",
            secret_key="sk_live_abc",
            publishable_key="pk_live_abc",
            test_secret_key="sk_test_abc",
            test_publishable_key="pk_test_abc",
        )
        assert settings.api_key == "sk_test_abc"
        assert settings.active_publishable_key == "pk_test_abc"

    def test_empty_key_is_none(self) -> None:
        """Test that an empty key reads as not configured."""
        settings = FacilitySettings(secret_key="")
        assert settings.api_key is None


class TestWebhookSecrets:
    """Test per-endpoint webhook secret selection."""

    def test_production_uses_endpoint_secrets(self) -> None:
        """Test that each endpoint gets its own secret in production."""
        settings = FacilitySettings(
            webhook_secret_cli="whsec_cli",
            webhook_secret_invoice="whsec_inv",
            webhook_secret_customer="whsec_cus",
        )
        assert settings.webhook_secret_for("invoice") == "whsec_inv"
        assert settings.webhook_secret_for("customer") == "whsec_cus"

    def test_development_uses_cli_secret(self) -> None:
        """Test that every endpoint shares the CLI secret in development."""
        settings = FacilitySettings(
            environment="development",
            webhook_secret_cli="whsec_cli",
            webhook_secret_invoice="whsec_inv",
        )
        assert settings.webhook_secret_for("invoice") == "whsec_cli"
        assert settings.webhook_secret_for("customer") == "whsec_cli"

    def test_unconfigured_secret(self) -> None:
        """Test that a missing secret is None."""
        settings = FacilitySettings(webhook_secret_invoice="whsec_inv")
        assert settings.webhook_secret_for("customer") is None
        assert settings.webhook_secret_for("unknown") is None

    def test_env_override_endpoint_secret(self) -> None:
        """Test STRIPE_FACILITY_WEBHOOK_SECRET_INVOICE env var."""
        with patch.dict(os.environ, {"STRIPE_FACILITY_WEBHOOK_SECRET_INVOICE": "whsec_env"}):
            settings = FacilitySettings()
            assert settings.webhook_secret_for("invoice") == "whsec_env"


class TestDisplayDict:
    """Test the redacted configuration export."""

    def test_secrets_are_redacted(self) -> None:
        """Test that secrets never appear in the display dict."""
        settings = FacilitySettings(
            secret_key="sk_live_abc",
            publishable_key="pk_live_abc",
            webhook_secret_invoice="whsec_inv",
        )
        display = settings.to_display_dict()

        assert display["credentials"]["secret_key"] == "********"
        assert display["credentials"]["test_secret_key"] == "(not set)"
        assert display["credentials"]["publishable_key"] == "pk_live_abc"
        assert display["webhooks"]["webhook_secret_invoice"] == "********"
        assert display["webhooks"]["webhook_secret_customer"] == "(not set)"
        assert "sk_live_abc" not in str(display)
        assert "whsec_inv" not in str(display)

    def test_sections(self) -> None:
        """Test the display dict layout."""
        display = FacilitySettings().to_display_dict()
        assert display["environment"] == "production"
        assert set(display) == {"environment", "credentials", "webhooks", "api", "server"}
        assert display["api"]["api_version"] == "(account default)"
        assert display["server"] == {"host": "127.0.0.1", "port": 8000}


class TestGlobalSettings:
    """Test the cached settings accessor."""

    def test_get_settings_is_cached(self) -> None:
        """Test that get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_clear_settings_rereads_environment(self) -> None:
        """Test that clear_settings forces a reload."""
        first = get_settings()
        with patch.dict(os.environ, {"STRIPE_FACILITY_PORT": "9000"}):
            clear_settings()
            second = get_settings()
        assert second is not first
        assert second.port == 9000


class TestConfigFiles:
    """Test YAML and TOML configuration files."""

    def test_load_yaml(self, tmp_path) -> None:
        """Test loading a YAML file."""
        path = tmp_path / "facility.yaml"
        path.write_text("environment: development\nport: 9000\n")
        assert load_config_from_file(path) == {"environment": "development", "port": 9000}

    def test_load_empty_yaml(self, tmp_path) -> None:
        """Test that an empty YAML file is an empty config."""
        path = tmp_path / "facility.yml"
        path.write_text("")
        assert load_config_from_file(path) == {}

    def test_load_toml(self, tmp_path) -> None:
        """Test loading a TOML file."""
        path = tmp_path / "facility.toml"
        path.write_text('environment = "production"\n\n[webhook]\nsecret_invoice = "whsec_inv"\n')
        assert load_config_from_file(path) == {
            "environment": "production",
            "webhook": {"secret_invoice": "whsec_inv"},
        }

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config_from_file(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path) -> None:
        """Test that unknown suffixes are rejected."""
        path = tmp_path / "facility.ini"
        path.write_text("[x]\n")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config_from_file(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        """Test that broken YAML raises ValueError."""
        path = tmp_path / "facility.yaml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config_from_file(path)

    def test_invalid_toml(self, tmp_path) -> None:
        """Test that broken TOML raises ValueError."""
        path = tmp_path / "facility.toml"
        path.write_text("key = \n")
        with pytest.raises(ValueError, match="Invalid TOML"):
            load_config_from_file(path)

    def test_flatten_config(self) -> None:
        """Test that nested sections are joined with underscores."""
        assert flatten_config({"webhook": {"secret": {"invoice": "x"}}, "port": 1}) == {
            "webhook_secret_invoice": "x",
            "port": 1,
        }

    def test_settings_from_file(self, tmp_path) -> None:
        """Test building settings from a nested YAML file."""
        path = tmp_path / "facility.yaml"
        path.write_text(
            "environment: production\n"
            "secret_key: sk_live_file\n"
            "webhook:\n"
            "  secret_invoice: whsec_inv\n"
            "  tolerance_seconds: 120\n"
        )
        settings = settings_from_file(path)
        assert settings.api_key == "sk_live_file"
        assert settings.webhook_secret_for("invoice") == "whsec_inv"
        assert settings.webhook_tolerance_seconds == 120
