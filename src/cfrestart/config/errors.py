"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, e.g. a malformed number or flag."""


class MissingConfigurationError(ConfigurationError):
    """One or more required settings are absent or blank."""
