from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cfrestart.domain.normalization import (
    EPOCH,
    DopplerLogEnvelope,
    LoggregatorLogMessage,
    normalize_doppler,
    normalize_loggregator,
    source_type_name,
    timestamp_from_nanos,
)


@pytest.mark.parametrize(
    ("nanos", "expected"),
    [
        (0, EPOCH),
        (999_999, EPOCH),
        (1_000_000, datetime(1970, 1, 1, 0, 0, 0, 1000, tzinfo=UTC)),
        (1_999_999, datetime(1970, 1, 1, 0, 0, 0, 1000, tzinfo=UTC)),
        (
            1_704_110_400_123_456_789,
            datetime(2024, 1, 1, 12, 0, 0, 123000, tzinfo=UTC),
        ),
    ],
)
def test_timestamp_is_truncated_to_milliseconds(nanos: int, expected: datetime) -> None:
    assert timestamp_from_nanos(nanos) == expected


def test_doppler_envelope_is_normalized() -> None:
    record = normalize_doppler(
        DopplerLogEnvelope(
            timestamp_ns=1_704_110_400_123_999_999,
            payload="Server started on :8080 ✓".encode(),
            source_type=5,
        )
    )

    assert record.source_type == "APP"
    assert record.timestamp == datetime(2024, 1, 1, 12, 0, 0, 123000, tzinfo=UTC)
    assert record.message == "Server started on :8080 ✓"


def test_doppler_boundary_timestamps() -> None:
    zero = normalize_doppler(DopplerLogEnvelope(timestamp_ns=0, payload=b"a", source_type=1))
    below = normalize_doppler(
        DopplerLogEnvelope(timestamp_ns=999_999, payload=b"b", source_type=1)
    )

    assert zero.timestamp == EPOCH
    assert below.timestamp == EPOCH


def test_doppler_invalid_utf8_is_replaced() -> None:
    record = normalize_doppler(
        DopplerLogEnvelope(timestamp_ns=0, payload=b"bad \xff byte", source_type=2)
    )

    assert record.message == "bad � byte"
    assert record.source_type == "STG"


def test_unknown_doppler_source_code_is_stringified() -> None:
    assert source_type_name(42) == "42"
    assert source_type_name(0) == "0"


def test_loggregator_message_is_normalized() -> None:
    record = normalize_loggregator(
        LoggregatorLogMessage(
            timestamp_ns=999_999,
            message="Staging complete",
            source_name="STG",
        )
    )

    assert record.source_type == "STG"
    assert record.timestamp == EPOCH
    assert record.message == "Staging complete"


def test_both_backends_agree_on_timestamps() -> None:
    nanos = 1_700_000_000_987_654_321
    doppler = normalize_doppler(DopplerLogEnvelope(timestamp_ns=nanos, payload=b"x", source_type=5))
    loggregator = normalize_loggregator(
        LoggregatorLogMessage(timestamp_ns=nanos, message="x", source_name="App")
    )

    assert doppler.timestamp == loggregator.timestamp
    assert doppler.timestamp.microsecond == 987000
