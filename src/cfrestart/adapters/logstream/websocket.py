"""Threaded websocket tail shared by both log streaming backends."""

from __future__ import annotations

import queue
import ssl
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any, ClassVar

from google.protobuf.message import DecodeError
from websockets.exceptions import (
    ConnectionClosedError,
    InvalidHandshake,
    InvalidStatus,
    InvalidURI,
)
from websockets.sync.client import connect

from cfrestart.domain.errors import LogStreamConnectionError, StreamError
from cfrestart.domain.model import (
    LogRecordReceived,
    StreamClosed,
    StreamErrored,
    StreamOpened,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cfrestart.domain.model import LogBackend, LogRecord, StreamEvent
    from cfrestart.domain.ports.logstream import LogSubscription

log = getLogger(__name__)

Connector = Callable[..., Any]

DEFAULT_OPEN_TIMEOUT_SECONDS = 10.0
DEFAULT_CLOSE_TIMEOUT_SECONDS = 5.0


class WebSocketSubscription:
    """One open tail; a reader thread turns frames into stream events."""

    def __init__(
        self,
        connection: Any,
        decode: Callable[[bytes], LogRecord | None],
        *,
        name: str,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT_SECONDS,
    ) -> None:
        self._connection = connection
        self._decode = decode
        self._close_timeout = close_timeout
        self._events: queue.Queue[StreamEvent | None] = queue.Queue()
        self._stopping = threading.Event()
        self._thread = threading.Thread(target=self._read, name=name, daemon=True)

    @property
    def events(self) -> queue.Queue[StreamEvent | None]:
        return self._events

    @property
    def stopped(self) -> bool:
        return self._stopping.is_set()

    def start(self) -> None:
        self._events.put(StreamOpened())
        self._thread.start()

    def stop(self) -> None:
        if self._stopping.is_set():
            return
        self._stopping.set()
        self._connection.close()
        self._thread.join(timeout=self._close_timeout)
        if self._thread.is_alive():
            log.warning("Log stream reader did not exit within %ss", self._close_timeout)

    def _read(self) -> None:
        try:
            self._consume(self._connection)
        except ConnectionClosedError as exc:
            if not self._stopping.is_set():
                self._emit_error(StreamError(f"Log stream closed unexpectedly: {exc}"))
        except Exception as exc:  # noqa: BLE001
            self._emit_error(exc)
        finally:
            self._events.put(StreamClosed())
            self._events.put(None)

    def _consume(self, frames: Iterable[str | bytes]) -> None:
        for frame in frames:
            if isinstance(frame, str):
                self._emit_error(StreamError("Unexpected text frame on log stream"))
                continue
            try:
                record = self._decode(frame)
            except DecodeError as exc:
                self._emit_error(exc)
                continue
            if record is not None:
                self._events.put(LogRecordReceived(record))

    def _emit_error(self, cause: BaseException) -> None:
        self._events.put(StreamErrored(cause))


class WebSocketLogStreamClient(ABC):
    """Base for log stream clients that tail an application over a websocket."""

    backend: ClassVar[LogBackend]

    def __init__(
        self,
        endpoint: str,
        *,
        authorization: str,
        skip_ssl_validation: bool = False,
        connector: Connector = connect,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT_SECONDS,
        close_timeout: float = DEFAULT_CLOSE_TIMEOUT_SECONDS,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._authorization = authorization
        self._skip_ssl_validation = skip_ssl_validation
        self._connector = connector
        self._open_timeout = open_timeout
        self._close_timeout = close_timeout

    @abstractmethod
    def tail_url(self, app_guid: str) -> str: ...

    @abstractmethod
    def decode(self, frame: bytes) -> LogRecord | None: ...

    def open(self, app_guid: str) -> WebSocketSubscription:
        url = self.tail_url(app_guid)
        log.debug("Opening %s log stream at %s", self.backend, url)
        options: dict[str, object] = {
            "additional_headers": {"Authorization": self._authorization},
            "open_timeout": self._open_timeout,
            "close_timeout": self._close_timeout,
        }
        if url.startswith("wss://"):
            options["ssl"] = self._ssl_context()

        try:
            connection = self._connector(url, **options)
        except InvalidStatus as exc:
            status = exc.response.status_code
            raise LogStreamConnectionError(
                f"{self.backend} endpoint rejected the log stream with HTTP {status}"
            ) from exc
        except (InvalidHandshake, InvalidURI, OSError, TimeoutError) as exc:
            raise LogStreamConnectionError(
                f"Could not connect to {self.backend} endpoint {self.endpoint}: {exc}"
            ) from exc

        subscription = WebSocketSubscription(
            connection,
            self.decode,
            name=f"cfrestart-{self.backend}-{app_guid}",
            close_timeout=self._close_timeout,
        )
        subscription.start()
        return subscription

    def stop(self, subscription: LogSubscription) -> None:
        subscription.stop()

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if self._skip_ssl_validation:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context
