"""Application configuration helpers."""

from __future__ import annotations

from .cloud_foundry import (
    CloudControllerConfig,
    RestartConfig,
    TargetDefaults,
    get_cloud_controller_config,
    get_restart_config,
    get_target_defaults,
)
from .env import env_flag, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "NO_RETRY",
    "CacheConfig",
    "CloudControllerConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RestartConfig",
    "RetryPolicy",
    "StorageConfig",
    "TargetDefaults",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_cloud_controller_config",
    "get_restart_config",
    "get_storage_config",
    "get_target_defaults",
    "optional_env_var",
    "require_env_vars",
]
