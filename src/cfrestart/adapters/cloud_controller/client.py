"""HTTP client for the Cloud Controller v2 API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from cfrestart.adapters.http_resilience import ResilientClient, build_limiter
from cfrestart.domain.errors import ControllerAPIError, NotFoundError, TransientError

from .schema import AppSummaryResponse, ErrorResponse, InfoResponse, PagedResources
from .translator import parse_application, parse_controller_info, parse_runtime_summary

if TYPE_CHECKING:
    from aiolimiter import AsyncLimiter

    from cfrestart.config.cloud_foundry import CloudControllerConfig
    from cfrestart.config.http_resilience import ResilienceConfig
    from cfrestart.domain.model import Application, AppState, ControllerInfo, RuntimeSummary

log = getLogger(__name__)

_TRANSIENT_STATUS_CODES = frozenset({408, 429})


class ClientFactory(Protocol):
    def __call__(
        self, config: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient: ...


class CloudControllerClient:
    """Synchronous facade over the Cloud Controller v2 REST API.

    Lookups (info, organizations, spaces, apps) go through the ``lookup``
    resilience profile with retries; status reads and state changes use the
    ``live`` profile so every poll is a fresh round trip.
    """

    def __init__(
        self,
        *,
        config: CloudControllerConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory: ClientFactory = client_factory or ResilientClient
        # One limiter per profile, shared by the short-lived clients of every call.
        self._limiters = {
            profile.name: build_limiter(profile) for profile in (config.lookup, config.live)
        }

    def get_info(self) -> ControllerInfo:
        payload = self._run(self._config.lookup, "GET", "/v2/info")
        return parse_controller_info(self._validate(InfoResponse, payload))

    def find_space_guid(self, organization: str, space: str) -> str | None:
        orgs = self._validate(
            PagedResources,
            self._run(
                self._config.lookup,
                "GET",
                "/v2/organizations",
                params={"q": f"name:{organization}"},
            ),
        )
        org = orgs.first()
        if org is None:
            log.error("Organization %s not found", organization)
            return None

        spaces = self._validate(
            PagedResources,
            self._run(
                self._config.lookup,
                "GET",
                f"/v2/organizations/{org.metadata.guid}/spaces",
                params={"q": f"name:{space}"},
            ),
        )
        found = spaces.first()
        if found is None:
            log.error("Space %s not found in organization %s", space, organization)
            return None
        return found.metadata.guid

    def find_application(self, name: str, space_guid: str) -> Application | None:
        apps = self._validate(
            PagedResources,
            self._run(
                self._config.lookup,
                "GET",
                f"/v2/spaces/{space_guid}/apps",
                params={"q": f"name:{name}"},
            ),
        )
        resource = apps.first()
        return parse_application(resource) if resource is not None else None

    def get_app_summary(self, app_guid: str) -> RuntimeSummary:
        payload = self._run(self._config.live, "GET", f"/v2/apps/{app_guid}/summary")
        return parse_runtime_summary(self._validate(AppSummaryResponse, payload))

    def update_app_state(self, app_guid: str, state: AppState) -> None:
        log.debug("Updating application %s to %s", app_guid, state)
        self._run(self._config.live, "PUT", f"/v2/apps/{app_guid}", json={"state": str(state)})

    def _run(
        self,
        resilience: ResilienceConfig,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> object:
        return asyncio.run(
            self._request_async(resilience, method, path, params=params, json=json)
        )

    async def _request_async(
        self,
        resilience: ResilienceConfig,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None,
        json: object,
    ) -> object:
        limiter = self._limiters.get(resilience.name)
        async with self._client_factory(resilience, limiter=limiter) as client:
            return await self._perform_request(
                client=client,
                method=method,
                path=path,
                params=params,
                json=json,
            )

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        method: str,
        path: str,
        params: dict[str, str] | None,
        json: object,
    ) -> object:
        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.TransportError as exc:
            raise TransientError(f"Cloud Controller request {method} {path} failed: {exc}") from exc

        if response.is_error:
            raise _error_from_response(response)

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _validate[M: BaseModel](
        model: type[M],
        payload: object,
    ) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ControllerAPIError(f"Unexpected Cloud Controller response: {exc}") from exc


def _error_from_response(response: httpx.Response) -> Exception:
    status = response.status_code
    description = response.reason_phrase or f"HTTP {status}"
    error_code: str | None = None
    error: ErrorResponse | None
    try:
        error = ErrorResponse.model_validate(response.json())
    except ValueError:
        error = None
    if error is not None:
        description = error.description
        error_code = error.error_code

    message = f"Cloud Controller error {status}: {description}"
    if status >= 500 or status in _TRANSIENT_STATUS_CODES:
        return TransientError(message)
    if status == 404:
        return NotFoundError(message)
    log.error(message)
    return ControllerAPIError(description, status_code=status, error_code=error_code)
