"""Doppler-style log stream client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfrestart.domain.model import LogBackend
from cfrestart.domain.normalization import normalize_doppler

from .envelopes import decode_doppler_frame
from .websocket import WebSocketLogStreamClient

if TYPE_CHECKING:
    from cfrestart.domain.model import LogRecord


class DopplerLogStreamClient(WebSocketLogStreamClient):
    backend = LogBackend.DOPPLER

    def tail_url(self, app_guid: str) -> str:
        return f"{self.endpoint}/apps/{app_guid}/stream"

    def decode(self, frame: bytes) -> LogRecord | None:
        envelope = decode_doppler_frame(frame)
        return normalize_doppler(envelope) if envelope is not None else None
