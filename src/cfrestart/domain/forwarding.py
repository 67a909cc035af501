"""Forward log stream events from a subscription queue to an observer."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING

from .model import LogRecordReceived, StreamClosed, StreamErrored, StreamOpened

if TYPE_CHECKING:
    import logging
    import queue

    from .model import StreamEvent
    from .ports.logstream import LogObserver

log = getLogger(__name__)


class LoggingObserver:
    """Write stream events to a logger, one line per record."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or getLogger("cfrestart.applog")

    def __call__(self, event: StreamEvent) -> None:
        if isinstance(event, LogRecordReceived):
            record = event.record
            self._log.info(
                "[%s] - %s: %s",
                record.source_type,
                record.timestamp.strftime("%m/%d/%Y %H:%M:%S"),
                record.message,
            )
        elif isinstance(event, StreamOpened):
            self._log.info("Log stream opened.")
        elif isinstance(event, StreamClosed):
            self._log.info("Log stream closed.")
        elif isinstance(event, StreamErrored):
            self._log.error("Log stream error: %s", event.cause, exc_info=event.cause)


class StreamForwarder:
    """Consumer thread draining a subscription's event queue.

    The thread exits when it reads the ``None`` end-of-stream marker.
    """

    def __init__(
        self,
        events: queue.Queue[StreamEvent | None],
        observer: LogObserver,
        *,
        name: str = "cfrestart-log-forwarder",
    ) -> None:
        self._events = events
        self._observer = observer
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self.forwarded = 0

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the forwarder to drain; return ``False`` if it is still running."""

        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        while True:
            event = self._events.get()
            if event is None:
                return
            try:
                self._observer(event)
            except Exception:
                log.exception("Log observer failed for %s", type(event).__name__)
            self.forwarded += 1
