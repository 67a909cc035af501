"""Restart orchestration: stop, start and watch an application come online."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .errors import (
    InvalidTargetError,
    NotFoundError,
    StagingFailedError,
    StreamError,
    TransientError,
)
from .forwarding import StreamForwarder
from .model import (
    Application,
    AppState,
    LogBackend,
    LogEndpoint,
    MonitorOutcome,
    PackageState,
    RestartPhase,
)

if TYPE_CHECKING:
    from .model import ControllerInfo, RestartTarget, RuntimeSummary
    from .ports.controller import ControllerApi
    from .ports.logstream import LogObserver, LogStreamClient, LogStreamFactory, LogSubscription

log = getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 3.0
DEFAULT_STREAM_CLOSE_TIMEOUT_SECONDS = 5.0


class Cancellation(Protocol):
    """Cooperative cancellation signal; ``threading.Event`` satisfies it."""

    def is_set(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool: ...


def select_log_endpoint(info: ControllerInfo) -> LogEndpoint | None:
    """Pick the streaming backend advertised by the controller, preferring Doppler."""

    for backend, url in (
        (LogBackend.DOPPLER, info.doppler_logging_endpoint),
        (LogBackend.LOGGREGATOR, info.logging_endpoint),
    ):
        if url is not None and url.strip():
            return LogEndpoint(backend=backend, url=url.strip())
    return None


@dataclass(slots=True)
class _OpenStream:
    client: LogStreamClient
    subscription: LogSubscription
    forwarder: StreamForwarder


@dataclass
class RestartOrchestrator:
    """Drive a single restart of one application.

    The log stream is opened before any stop or start command and stopped
    exactly once when polling ends, whatever the reason.
    """

    controller: ControllerApi
    stream_factory: LogStreamFactory
    observer: LogObserver
    cancellation: Cancellation = field(default_factory=threading.Event)
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    stream_close_timeout_seconds: float = DEFAULT_STREAM_CLOSE_TIMEOUT_SECONDS
    phase: RestartPhase = field(default=RestartPhase.RESOLVING, init=False)

    def run(self, target: RestartTarget) -> MonitorOutcome:
        self._enter(RestartPhase.RESOLVING)
        app = self.resolve(target)
        log.info("Restarting application %s", app.name)

        self._enter(RestartPhase.STREAM_OPENING)
        stream = self._open_stream(app)
        try:
            self._stop_if_running(app)
            self._start(app)
            return self._wait_until_running(app)
        finally:
            if stream is not None:
                self._close_stream(stream)
            self._enter(RestartPhase.TERMINATED)

    def resolve(self, target: RestartTarget) -> Application:
        missing = target.missing_fields()
        if missing:
            raise InvalidTargetError(f"Missing restart target: {', '.join(missing)}")

        space_guid = self.controller.find_space_guid(target.organization, target.space)
        if space_guid is None:
            raise NotFoundError(
                f"Space {target.space} not found in organization {target.organization}"
            )

        app = self.controller.find_application(target.application, space_guid)
        if app is None:
            raise NotFoundError(f"Application {target.application} not found")
        return app

    def _enter(self, phase: RestartPhase) -> None:
        log.debug("Restart phase %s -> %s", self.phase, phase)
        self.phase = phase

    def _open_stream(self, app: Application) -> _OpenStream | None:
        endpoint = select_log_endpoint(self.controller.get_info())
        if endpoint is None:
            log.warning("Could not retrieve application logs")
            return None

        client = self.stream_factory(endpoint)
        try:
            subscription = client.open(app.guid)
        except StreamError as exc:
            log.error(
                "Could not open %s log stream, continuing without logs: %s",
                endpoint.backend,
                exc,
            )
            return None

        forwarder = StreamForwarder(subscription.events, self.observer)
        try:
            forwarder.start()
        except BaseException:
            client.stop(subscription)
            raise
        log.debug("Tailing %s logs from %s", endpoint.backend, endpoint.url)
        return _OpenStream(client=client, subscription=subscription, forwarder=forwarder)

    def _close_stream(self, stream: _OpenStream) -> None:
        try:
            stream.client.stop(stream.subscription)
        except Exception:
            log.exception("Failed to stop log stream")
        if not stream.forwarder.join(timeout=self.stream_close_timeout_seconds):
            log.warning(
                "Log forwarder did not finish within %ss", self.stream_close_timeout_seconds
            )

    def _stop_if_running(self, app: Application) -> None:
        self._enter(RestartPhase.STOPPING)
        summary = self.controller.get_app_summary(app.guid)
        if summary.state is AppState.STOPPED:
            return
        log.info("Stopping application %s", app.name)
        self.controller.update_app_state(app.guid, AppState.STOPPED)

    def _start(self, app: Application) -> None:
        self._enter(RestartPhase.STARTING)
        log.info("Starting application %s", app.name)
        self.controller.update_app_state(app.guid, AppState.STARTED)

    def _wait_until_running(self, app: Application) -> MonitorOutcome:
        self._enter(RestartPhase.POLLING)
        while True:
            if self.cancellation.is_set():
                log.info("Stopped waiting for application %s: cancelled", app.name)
                return MonitorOutcome.CANCELLED

            summary = self._poll(app)
            if summary is not None:
                if summary.running_instances > 0:
                    log.info(
                        "Application %s is running (%d instance(s))",
                        app.name,
                        summary.running_instances,
                    )
                    return MonitorOutcome.RUNNING

                if summary.package_state is PackageState.FAILED:
                    raise StagingFailedError("App staging failed")
                if summary.package_state is PackageState.PENDING:
                    log.info("App is staging ...")
                elif summary.package_state is PackageState.STAGED:
                    log.info("App staged, waiting for it to come online ...")

            self.cancellation.wait(self.poll_interval_seconds)

    def _poll(self, app: Application) -> RuntimeSummary | None:
        try:
            return self.controller.get_app_summary(app.guid)
        except TransientError as exc:
            log.warning("Could not read status of %s, retrying: %s", app.name, exc)
            return None
