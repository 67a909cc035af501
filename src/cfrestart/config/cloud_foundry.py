"""Cloud Foundry controller and restart configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from cfrestart.domain.restart import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_STREAM_CLOSE_TIMEOUT_SECONDS,
)

from .env import env_flag, env_float, optional_env_var, require_env_vars
from .http_resilience import (
    NO_RETRY,
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)
from .storage import get_storage_config

CF_TIMEOUT_SECONDS = 30.0
CF_INFO_CACHE_TTL_SECONDS = 300.0
CF_LOOKUP_RATE_LIMIT = RateLimit(max_calls=10, per_seconds=1.0)


@dataclass(frozen=True)
class CloudControllerConfig:
    """Holds Cloud Controller endpoint and session values."""

    api_url: str
    access_token: str
    skip_ssl_validation: bool
    lookup: ResilienceConfig
    live: ResilienceConfig

    @property
    def authorization(self) -> str:
        return f"bearer {self.access_token}"


@dataclass(frozen=True)
class TargetDefaults:
    """Organization, space and application names taken from the environment."""

    organization: str | None = None
    space: str | None = None
    application: str | None = None


@dataclass(frozen=True)
class RestartConfig:
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    stream_close_timeout_seconds: float = DEFAULT_STREAM_CLOSE_TIMEOUT_SECONDS


def _authorization_headers(access_token: str) -> dict[str, str]:
    return {
        "Authorization": f"bearer {access_token}",
        "Accept": "application/json",
    }


def get_cloud_controller_config(
    *,
    skip_ssl_validation: bool | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> CloudControllerConfig:
    values = require_env_vars(("CF_API_URL", "CF_ACCESS_TOKEN"))
    api_url = values["CF_API_URL"].rstrip("/")
    access_token = values["CF_ACCESS_TOKEN"]
    if access_token.lower().startswith("bearer "):
        access_token = access_token[len("bearer ") :].strip()
    skip = (
        skip_ssl_validation
        if skip_ssl_validation is not None
        else env_flag("CF_SKIP_SSL_VALIDATION")
    )
    headers = _authorization_headers(access_token)
    cache_path = get_storage_config().http_cache_path()
    return CloudControllerConfig(
        api_url=api_url,
        access_token=access_token,
        skip_ssl_validation=skip,
        lookup=ResilienceConfig(
            name="cloud-controller-lookup",
            base_url=api_url,
            timeout_seconds=CF_TIMEOUT_SECONDS,
            verify=not skip,
            retry=RetryPolicy(),
            ratelimit=CF_LOOKUP_RATE_LIMIT,
            cache=CacheConfig(
                sqlite_path=str(cache_path),
                default_ttl_seconds=CF_INFO_CACHE_TTL_SECONDS,
                should_cache=cache_predicate,
            ),
            default_headers=headers,
        ),
        live=ResilienceConfig(
            name="cloud-controller-live",
            base_url=api_url,
            timeout_seconds=CF_TIMEOUT_SECONDS,
            verify=not skip,
            retry=NO_RETRY,
            cache=None,
            default_headers=headers,
        ),
    )


def get_target_defaults() -> TargetDefaults:
    return TargetDefaults(
        organization=optional_env_var("CF_ORGANIZATION"),
        space=optional_env_var("CF_SPACE"),
        application=optional_env_var("CF_APP_NAME"),
    )


def get_restart_config(*, poll_interval_seconds: float | None = None) -> RestartConfig:
    interval = (
        poll_interval_seconds
        if poll_interval_seconds is not None
        else env_float("CFRESTART_POLL_INTERVAL", default=DEFAULT_POLL_INTERVAL_SECONDS)
    )
    if interval < 0:
        raise ValueError("Poll interval must be non-negative")
    return RestartConfig(poll_interval_seconds=interval)
