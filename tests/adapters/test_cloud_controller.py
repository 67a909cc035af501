from __future__ import annotations

import dataclasses
import json
import time
from collections.abc import Callable

import httpx
import pytest
from aiolimiter import AsyncLimiter

from cfrestart.adapters.cloud_controller import (
    CloudControllerClient,
    InfoResponse,
    is_info_payload,
)
from cfrestart.adapters.cloud_controller.client import ClientFactory
from cfrestart.adapters.http_resilience import ResilientClient
from cfrestart.config import NO_RETRY, CloudControllerConfig, RateLimit, ResilienceConfig
from cfrestart.domain.errors import ControllerAPIError, NotFoundError, TransientError
from cfrestart.domain.model import Application, AppState, PackageState

Handler = Callable[[httpx.Request], httpx.Response]

INFO_PAYLOAD = {
    "name": "vcap",
    "api_version": "2.150.0",
    "doppler_logging_endpoint": "wss://doppler.example.com:443",
    "logging_endpoint": "",
}


def _make_client_factory(
    handler: Handler,
    limiters: list[AsyncLimiter | None] | None = None,
) -> ClientFactory:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(
        resilience: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient:
        if limiters is not None:
            limiters.append(limiter)
        client = ResilientClient(resilience, limiter=limiter)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.default_headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


@pytest.fixture
def controller_config() -> CloudControllerConfig:
    headers = {"Authorization": "bearer token-123", "Accept": "application/json"}
    return CloudControllerConfig(
        api_url="https://api.example.com",
        access_token="token-123",
        skip_ssl_validation=False,
        lookup=ResilienceConfig(
            name="lookup",
            base_url="https://api.example.com",
            default_headers=headers,
        ),
        live=ResilienceConfig(
            name="live",
            base_url="https://api.example.com",
            retry=NO_RETRY,
            default_headers=headers,
        ),
    )


def _resources(guid: str, name: str) -> dict[str, object]:
    return {
        "total_results": 1,
        "total_pages": 1,
        "resources": [
            {"metadata": {"guid": guid, "url": f"/v2/x/{guid}"}, "entity": {"name": name}},
        ],
    }


def _client(config: CloudControllerConfig, handler: Handler) -> CloudControllerClient:
    return CloudControllerClient(config=config, client_factory=_make_client_factory(handler))


def test_get_info_parses_endpoints(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/info"
        assert request.headers["Authorization"] == "bearer token-123"
        return httpx.Response(200, json=INFO_PAYLOAD)

    info = _client(controller_config, handler).get_info()

    assert info.doppler_logging_endpoint == "wss://doppler.example.com:443"
    assert info.logging_endpoint is None


def test_find_space_guid_resolves_org_then_space(controller_config: CloudControllerConfig) -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, request.url.params["q"]))
        if request.url.path == "/v2/organizations":
            return httpx.Response(200, json=_resources("org-guid", "demo-org"))
        return httpx.Response(200, json=_resources("space-guid", "dev"))

    guid = _client(controller_config, handler).find_space_guid("demo-org", "dev")

    assert guid == "space-guid"
    assert seen == [
        ("/v2/organizations", "name:demo-org"),
        ("/v2/organizations/org-guid/spaces", "name:dev"),
    ]


def test_find_space_guid_returns_none_for_unknown_org(
    controller_config: CloudControllerConfig,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"total_results": 0, "resources": []})

    assert _client(controller_config, handler).find_space_guid("missing", "dev") is None


def test_find_application(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/spaces/space-guid/apps"
        assert request.url.params["q"] == "name:demo"
        return httpx.Response(200, json=_resources("app-guid", "demo"))

    app = _client(controller_config, handler).find_application("demo", "space-guid")

    assert app == Application(name="demo", guid="app-guid")


def test_find_application_returns_none_when_absent(
    controller_config: CloudControllerConfig,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"total_results": 0, "resources": []})

    assert _client(controller_config, handler).find_application("demo", "space-guid") is None


def test_get_app_summary(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/apps/app-guid/summary"
        return httpx.Response(
            200,
            json={
                "guid": "app-guid",
                "name": "demo",
                "state": "STARTED",
                "running_instances": None,
                "instances": 2,
                "package_state": "PENDING",
            },
        )

    summary = _client(controller_config, handler).get_app_summary("app-guid")

    assert summary.state is AppState.STARTED
    assert summary.running_instances == 0
    assert summary.package_state is PackageState.PENDING


def test_update_app_state_sends_state(controller_config: CloudControllerConfig) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"metadata": {"guid": "app-guid"}, "entity": {}})

    _client(controller_config, handler).update_app_state("app-guid", AppState.STOPPED)

    [request] = requests
    assert request.method == "PUT"
    assert request.url.path == "/v2/apps/app-guid"
    assert json.loads(request.content) == {"state": "STOPPED"}


@pytest.mark.parametrize("status", [500, 502, 503, 429])
def test_server_errors_are_transient(controller_config: CloudControllerConfig, status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"code": 10001, "description": "Try again"})

    with pytest.raises(TransientError, match="Try again"):
        _client(controller_config, handler).get_app_summary("app-guid")


def test_network_errors_are_transient(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientError, match="connection refused"):
        _client(controller_config, handler).get_app_summary("app-guid")


def test_not_found_maps_to_not_found_error(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={
                "code": 100004,
                "description": "The app could not be found: app-guid",
                "error_code": "CF-AppNotFound",
            },
        )

    with pytest.raises(NotFoundError, match="could not be found"):
        _client(controller_config, handler).get_app_summary("app-guid")


def test_other_errors_surface_verbatim(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "code": 150003,
                "description": "Staging requires a package",
                "error_code": "CF-AppPackageInvalid",
            },
        )

    with pytest.raises(ControllerAPIError) as excinfo:
        _client(controller_config, handler).update_app_state("app-guid", AppState.STARTED)

    assert str(excinfo.value) == "Staging requires a package"
    assert excinfo.value.status_code == 400
    assert excinfo.value.error_code == "CF-AppPackageInvalid"


def test_unexpected_payload_is_reported(controller_config: CloudControllerConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(ControllerAPIError, match="Unexpected Cloud Controller response"):
        _client(controller_config, handler).get_app_summary("app-guid")


def test_info_payload_cache_predicate() -> None:
    assert is_info_payload(INFO_PAYLOAD)
    assert not is_info_payload(_resources("app-guid", "demo"))
    assert not is_info_payload(["not", "a", "mapping"])
    assert InfoResponse.model_validate(INFO_PAYLOAD).logging_endpoint is None


def _info_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=INFO_PAYLOAD)


def _with_lookup_rate(
    config: CloudControllerConfig, ratelimit: RateLimit
) -> CloudControllerConfig:
    return dataclasses.replace(
        config, lookup=dataclasses.replace(config.lookup, ratelimit=ratelimit)
    )


def test_lookup_limiter_is_shared_across_calls(controller_config: CloudControllerConfig) -> None:
    config = _with_lookup_rate(controller_config, RateLimit(max_calls=10, per_seconds=1.0))
    limiters: list[AsyncLimiter | None] = []
    client = CloudControllerClient(
        config=config, client_factory=_make_client_factory(_info_handler, limiters)
    )

    for _ in range(3):
        client.get_info()

    assert len(limiters) == 3
    assert limiters[0] is not None
    assert all(limiter is limiters[0] for limiter in limiters)


def test_live_profile_has_no_limiter(controller_config: CloudControllerConfig) -> None:
    limiters: list[AsyncLimiter | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"guid": "app-guid", "name": "demo", "state": "STARTED", "running_instances": 1},
        )

    client = CloudControllerClient(
        config=controller_config, client_factory=_make_client_factory(handler, limiters)
    )
    client.get_app_summary("app-guid")

    assert limiters == [None]


def test_lookups_beyond_the_rate_are_delayed(controller_config: CloudControllerConfig) -> None:
    config = _with_lookup_rate(controller_config, RateLimit(max_calls=1, per_seconds=0.2))
    client = CloudControllerClient(
        config=config, client_factory=_make_client_factory(_info_handler)
    )

    started = time.monotonic()
    for _ in range(3):
        client.get_info()
    elapsed = time.monotonic() - started

    # The first call drains the bucket; each later call waits for one drip.
    assert elapsed >= 0.3
