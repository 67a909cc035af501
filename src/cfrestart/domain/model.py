"""Domain types for restarting and observing a platform application."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


class AppState(StrEnum):
    STOPPED = "STOPPED"
    STARTED = "STARTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> AppState:
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.UNKNOWN


class PackageState(StrEnum):
    PENDING = "PENDING"
    STAGED = "STAGED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> PackageState:
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.UNKNOWN


class MonitorOutcome(StrEnum):
    RUNNING = "running"
    CANCELLED = "cancelled"
    STAGING_FAILED = "staging_failed"


class RestartPhase(StrEnum):
    RESOLVING = "resolving"
    STREAM_OPENING = "stream_opening"
    STOPPING = "stopping"
    STARTING = "starting"
    POLLING = "polling"
    TERMINATED = "terminated"


class LogBackend(StrEnum):
    DOPPLER = "doppler"
    LOGGREGATOR = "loggregator"


@dataclass(frozen=True, slots=True)
class Application:
    name: str
    guid: str


@dataclass(frozen=True, slots=True)
class RuntimeSummary:
    """Point-in-time view of an application's runtime and staging status."""

    state: AppState
    running_instances: int
    package_state: PackageState


@dataclass(frozen=True, slots=True)
class ControllerInfo:
    doppler_logging_endpoint: str | None = None
    logging_endpoint: str | None = None


@dataclass(frozen=True, slots=True)
class LogEndpoint:
    backend: LogBackend
    url: str


@dataclass(frozen=True, slots=True)
class RestartTarget:
    """Names identifying the application to restart."""

    organization: str
    space: str
    application: str

    @classmethod
    def from_names(
        cls,
        organization: str | None,
        space: str | None,
        application: str | None,
    ) -> RestartTarget:
        return cls(
            organization=(organization or "").strip(),
            space=(space or "").strip(),
            application=(application or "").strip(),
        )

    def missing_fields(self) -> tuple[str, ...]:
        return tuple(
            name
            for name, value in (
                ("organization", self.organization),
                ("space", self.space),
                ("application", self.application),
            )
            if not value
        )


@dataclass(frozen=True, slots=True)
class LogRecord:
    source_type: str
    timestamp: datetime
    message: str


@dataclass(frozen=True, slots=True)
class StreamOpened:
    pass


@dataclass(frozen=True, slots=True)
class StreamClosed:
    pass


@dataclass(frozen=True, slots=True)
class StreamErrored:
    cause: BaseException


@dataclass(frozen=True, slots=True)
class LogRecordReceived:
    record: LogRecord


StreamEvent = StreamOpened | StreamClosed | StreamErrored | LogRecordReceived


@dataclass(frozen=True, slots=True)
class RestartResult:
    """Outcome of a restart run as reported to callers."""

    outcome: MonitorOutcome | None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.outcome in {
            MonitorOutcome.RUNNING,
            MonitorOutcome.CANCELLED,
        }
