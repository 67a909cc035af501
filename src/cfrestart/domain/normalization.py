"""Normalise backend-specific log envelopes into canonical log records.

Both streaming backends report timestamps as nanoseconds since the Unix epoch.
Records are truncated to millisecond precision because downstream consumers
expect millisecond timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import IntEnum

from .model import LogRecord

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
NANOS_PER_MILLISECOND = 1_000_000


class DopplerSourceType(IntEnum):
    API = 1
    STG = 2
    RTR = 3
    LGR = 4
    APP = 5
    SSH = 6
    CELL = 7


@dataclass(frozen=True, slots=True)
class DopplerLogEnvelope:
    """Log payload as delivered by a Doppler-style endpoint."""

    timestamp_ns: int
    payload: bytes
    source_type: int


@dataclass(frozen=True, slots=True)
class LoggregatorLogMessage:
    """Log payload as delivered by a Loggregator-style endpoint."""

    timestamp_ns: int
    message: str
    source_name: str


def timestamp_from_nanos(nanos: int) -> datetime:
    return EPOCH + timedelta(milliseconds=nanos // NANOS_PER_MILLISECOND)


def source_type_name(code: int) -> str:
    try:
        return DopplerSourceType(code).name
    except ValueError:
        return str(code)


def normalize_doppler(envelope: DopplerLogEnvelope) -> LogRecord:
    return LogRecord(
        source_type=source_type_name(envelope.source_type),
        timestamp=timestamp_from_nanos(envelope.timestamp_ns),
        message=envelope.payload.decode("utf-8", errors="replace"),
    )


def normalize_loggregator(message: LoggregatorLogMessage) -> LogRecord:
    return LogRecord(
        source_type=str(message.source_name),
        timestamp=timestamp_from_nanos(message.timestamp_ns),
        message=message.message,
    )
