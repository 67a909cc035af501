"""Async HTTP client with retries, rate limiting and an optional response cache."""

from __future__ import annotations

import json
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import RetryTransport

from cfrestart.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from cfrestart.config.http_resilience import CacheConfig, ResilienceConfig, ShouldCacheHook

log = getLogger(__name__)


class ResilientClient:
    """One httpx client per :class:`ResilienceConfig` profile.

    Retries happen in the transport, so callers only ever see the final
    response or the final transport error.
    """

    def __init__(self, config: ResilienceConfig, *, limiter: AsyncLimiter | None = None) -> None:
        self.config = config
        self._limiter = limiter if limiter is not None else build_limiter(config)
        self._client = _build_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        async with AsyncExitStack() as stack:
            if self._limiter is not None:
                await stack.enter_async_context(self._limiter)
            response = await self._client.request(method, url, params=params, json=json)
        log.debug(
            "[%s] %s %s -> %s", self.config.name, method, response.url, response.status_code
        )
        return response

    async def get(self, url: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def put(self, url: str, *, json: object = None) -> httpx.Response:
        return await self.request("PUT", url, json=json)


def build_limiter(config: ResilienceConfig) -> AsyncLimiter | None:
    """Create the limiter for a profile; share it between clients of that profile."""

    if config.ratelimit is None:
        return None
    return AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)


def _build_client(config: ResilienceConfig) -> httpx.AsyncClient:
    transport: httpx.AsyncBaseTransport = httpx.AsyncHTTPTransport(verify=config.verify)
    if config.retry.enabled:
        transport = RetryTransport(transport=transport, retry=config.retry.build())

    options: dict[str, object] = {"timeout": config.timeout_seconds, "transport": transport}
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)

    if config.cache is None or not config.cache.enabled:
        return httpx.AsyncClient(**options)  # type: ignore[arg-type]
    storage, policy = _build_cache(config.cache)
    return AsyncCacheClient(**options, storage=storage, policy=policy)  # type: ignore[arg-type]


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Only store responses whose decoded JSON body satisfies ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache(config: CacheConfig) -> tuple[AsyncSqliteStorage, FilterPolicy | None]:
    database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
    )
    policy = (
        FilterPolicy(response_filters=[_ShouldCacheResponseFilter(config.should_cache)])
        if config.should_cache is not None
        else None
    )
    return storage, policy
