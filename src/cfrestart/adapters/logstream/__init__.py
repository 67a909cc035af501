"""Live log stream adapters for Doppler and Loggregator endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfrestart.domain.model import LogBackend

from .doppler import DopplerLogStreamClient
from .loggregator import LoggregatorLogStreamClient
from .websocket import WebSocketLogStreamClient, WebSocketSubscription

if TYPE_CHECKING:
    from cfrestart.domain.model import LogEndpoint

_CLIENTS: dict[LogBackend, type[WebSocketLogStreamClient]] = {
    LogBackend.DOPPLER: DopplerLogStreamClient,
    LogBackend.LOGGREGATOR: LoggregatorLogStreamClient,
}


def build_log_stream_client(
    endpoint: LogEndpoint,
    *,
    authorization: str,
    skip_ssl_validation: bool = False,
) -> WebSocketLogStreamClient:
    client_type = _CLIENTS[endpoint.backend]
    return client_type(
        endpoint.url,
        authorization=authorization,
        skip_ssl_validation=skip_ssl_validation,
    )


__all__ = [
    "DopplerLogStreamClient",
    "LoggregatorLogStreamClient",
    "WebSocketLogStreamClient",
    "WebSocketSubscription",
    "build_log_stream_client",
]
