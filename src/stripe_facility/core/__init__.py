"""Core."""

from .config import (
    Environment,
    FacilitySettings,
    clear_settings,
    get_settings,
    load_config_from_file,
    settings_from_file,
)
from .exceptions import (
    ConfigurationError,
    FacilityError,
    MissingCredentialError,
    MissingSecretError,
    ProviderCallError,
    UnknownWebhookEndpointError,
    format_error_for_user,
)

__all__ = [
    # Config
    "Environment",
    "FacilitySettings",
    "get_settings",
    "clear_settings",
    "load_config_from_file",
    "settings_from_file",
    # Errors
    "FacilityError",
    "ConfigurationError",
    "MissingCredentialError",
    "MissingSecretError",
    "UnknownWebhookEndpointError",
    "ProviderCallError",
    "format_error_for_user",
]
