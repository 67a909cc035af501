"""Ports for live log stream subscriptions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import queue

    from cfrestart.domain.model import LogEndpoint, StreamEvent

LogObserver = Callable[["StreamEvent"], None]


@runtime_checkable
class LogSubscription(Protocol):
    """A live tail of one application's logs.

    ``events`` yields stream events in delivery order, terminated by ``None``
    once the subscription has finished.
    """

    @property
    def events(self) -> queue.Queue[StreamEvent | None]: ...

    def stop(self) -> None: ...


@runtime_checkable
class LogStreamClient(Protocol):
    def open(self, app_guid: str) -> LogSubscription: ...

    def stop(self, subscription: LogSubscription) -> None: ...


LogStreamFactory = Callable[["LogEndpoint"], LogStreamClient]


__all__ = ["LogObserver", "LogStreamClient", "LogStreamFactory", "LogSubscription"]
