"""Loggregator-style log stream client."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from cfrestart.domain.model import LogBackend
from cfrestart.domain.normalization import normalize_loggregator

from .envelopes import decode_loggregator_frame
from .websocket import WebSocketLogStreamClient

if TYPE_CHECKING:
    from cfrestart.domain.model import LogRecord


class LoggregatorLogStreamClient(WebSocketLogStreamClient):
    backend = LogBackend.LOGGREGATOR

    def tail_url(self, app_guid: str) -> str:
        return f"{self.endpoint}/tail/?app={quote(app_guid)}"

    def decode(self, frame: bytes) -> LogRecord | None:
        return normalize_loggregator(decode_loggregator_frame(frame))
