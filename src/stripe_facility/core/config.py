"""Configuration types with environment variable support.

All settings can be configured via environment variables with the
STRIPE_FACILITY_ prefix.
Example: STRIPE_FACILITY_ENVIRONMENT=development selects the test keys and
the shared Stripe CLI webhook secret.

Settings are read here and nowhere else. Components receive plain values
(an API key, a webhook secret) through their constructors.
"""

from __future__ import annotations

import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment, which decides live vs test credentials."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


def load_config_from_file(path: str | Path) -> dict[str, Any]:
    """Load configuration from a YAML or TOML file.

    Args:
        path: Path to the configuration file (.yaml, .yml, or .toml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has encoding errors, invalid syntax, or unsupported format
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Config file encoding error in {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(content) or {}
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def flatten_config(config: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in config.items():
        full_key = f"{prefix}_{key}" if prefix else key
        if isinstance(value, dict):
            result.update(flatten_config(value, full_key))
        else:
            result[full_key] = value
    return result


def _reveal(value: SecretStr | None) -> str | None:
    if value is None:
        return None
    return value.get_secret_value() or None


class FacilitySettings(BaseSettings):
    """Stripe credentials, webhook secrets and server options.

    In development the test API keys are used and every webhook endpoint
    shares the secret printed by ``stripe listen``. In production each
    endpoint type has its own signing secret.

    Example:
        settings = FacilitySettings(environment="development")
        settings.api_key            # test secret key
        settings.webhook_secret_for("invoice")  # CLI secret
    """

    model_config = SettingsConfigDict(
        env_prefix="STRIPE_FACILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.PRODUCTION,
        description="'development' uses test keys and the CLI webhook secret.",
    )

    secret_key: SecretStr | None = Field(
        default=None,
        description="Live secret API key (sk_live_...).",
    )
    publishable_key: str | None = Field(
        default=None,
        description="Live publishable key (pk_live_...).",
    )
    test_secret_key: SecretStr | None = Field(
        default=None,
        description="Test secret API key (sk_test_...), used in development.",
    )
    test_publishable_key: str | None = Field(
        default=None,
        description="Test publishable key (pk_test_...), used in development.",
    )

    webhook_secret_cli: SecretStr | None = Field(
        default=None,
        description="Signing secret printed by `stripe listen`, shared by all endpoints in development.",
    )
    webhook_secret_invoice: SecretStr | None = Field(
        default=None,
        description="Signing secret of the invoice webhook endpoint.",
    )
    webhook_secret_customer: SecretStr | None = Field(
        default=None,
        description="Signing secret of the customer webhook endpoint.",
    )
    webhook_tolerance_seconds: int = Field(
        default=300,
        ge=0,
        description="Maximum clock skew accepted on webhook timestamps (seconds); 0 accepts only the current second.",
    )

    api_version: str | None = Field(
        default=None,
        description="Pin a Stripe API version. None uses the account default.",
    )

    host: str = Field(
        default="127.0.0.1",
        description="Bind host for the webhook server.",
    )
    port: int = Field(
        default=8000,
        description="Bind port for the webhook server.",
    )

    @property
    def is_development(self) -> bool:
        return self.environment is Environment.DEVELOPMENT

    @property
    def api_key(self) -> str | None:
        """Secret API key for the active environment."""
        if self.is_development:
            return _reveal(self.test_secret_key)
        return _reveal(self.secret_key)

    @property
    def active_publishable_key(self) -> str | None:
        """Publishable key for the active environment."""
        if self.is_development:
            return self.test_publishable_key
        return self.publishable_key

    def webhook_secret_for(self, endpoint: str) -> str | None:
        """Signing secret bound to a webhook endpoint type.

        Args:
            endpoint: Endpoint type name ("invoice" or "customer").

        Returns:
            The secret, or None when it is not configured.
        """
        if self.is_development:
            return _reveal(self.webhook_secret_cli)
        field = getattr(self, f"webhook_secret_{endpoint}", None)
        return _reveal(field)

    def to_display_dict(self) -> dict[str, Any]:
        """Export the configuration for display, with secrets redacted."""

        def redacted(value: SecretStr | None) -> str:
            return "********" if _reveal(value) else "(not set)"

        return {
            "environment": self.environment.value,
            "credentials": {
                "secret_key": redacted(self.secret_key),
                "publishable_key": self.publishable_key or "(not set)",
                "test_secret_key": redacted(self.test_secret_key),
                "test_publishable_key": self.test_publishable_key or "(not set)",
            },
            "webhooks": {
                "webhook_secret_cli": redacted(self.webhook_secret_cli),
                "webhook_secret_invoice": redacted(self.webhook_secret_invoice),
                "webhook_secret_customer": redacted(self.webhook_secret_customer),
                "webhook_tolerance_seconds": self.webhook_tolerance_seconds,
            },
            "api": {
                "api_version": self.api_version or "(account default)",
            },
            "server": {
                "host": self.host,
                "port": self.port,
            },
        }


_settings: FacilitySettings | None = None


def get_settings() -> FacilitySettings:
    """Get the process-wide settings instance.

    Returns a cached FacilitySettings read from environment variables.
    Call clear_settings() first to force a reload (e.g., in tests).
    """
    global _settings
    if _settings is None:
        _settings = FacilitySettings()
    return _settings


def clear_settings() -> None:
    """Clear the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


def settings_from_file(path: str | Path) -> FacilitySettings:
    """Build settings from a YAML/TOML file; environment variables still apply to unset keys.

    Nested sections are flattened, so ``webhook: {secret_invoice: ...}``
    maps to ``webhook_secret_invoice``.
    """
    values = flatten_config(load_config_from_file(path))
    return FacilitySettings(**values)
