"""Custom exceptions for configuration management."""

from smart_organizer.errors import OrganizerError


class ConfigError(OrganizerError):
    """Raised when configuration data cannot be processed."""

    code = "config_error"
