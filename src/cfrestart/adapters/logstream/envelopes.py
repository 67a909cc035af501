"""Protobuf wire formats for the two log streaming backends.

Message classes are built at import time from descriptor definitions so the
package does not depend on generated ``_pb2`` modules.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.message_factory import GetMessageClass

from cfrestart.domain.normalization import (
    DopplerLogEnvelope,
    DopplerSourceType,
    LoggregatorLogMessage,
)

_Field = descriptor_pb2.FieldDescriptorProto

DOPPLER_PACKAGE = "cfrestart.doppler"
LOGGREGATOR_PACKAGE = "cfrestart.loggregator"

_EVENT_TYPES = (
    ("HttpStartStop", 4),
    ("LogMessage", 5),
    ("ValueMetric", 6),
    ("CounterEvent", 7),
    ("Error", 8),
    ("ContainerMetric", 9),
)


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    *,
    type_name: str | None = None,
    repeated: bool = False,
) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,  # type: ignore[arg-type]
        label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = type_name


def _add_enum(
    proto: descriptor_pb2.FileDescriptorProto,
    name: str,
    values: tuple[tuple[str, int], ...],
) -> None:
    enum = proto.enum_type.add(name=name)
    for value_name, number in values:
        enum.value.add(name=value_name, number=number)


def _doppler_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name="cfrestart/doppler/envelope.proto",
        package=DOPPLER_PACKAGE,
        syntax="proto2",
    )
    _add_enum(proto, "EventType", _EVENT_TYPES)
    _add_enum(proto, "MessageType", (("OUT", 1), ("ERR", 2)))
    _add_enum(
        proto,
        "SourceType",
        tuple((member.name, member.value) for member in DopplerSourceType),
    )

    log_message = proto.message_type.add(name="LogMessage")
    _add_field(log_message, "message", 1, _Field.TYPE_BYTES)
    _add_field(
        log_message,
        "message_type",
        2,
        _Field.TYPE_ENUM,
        type_name=f".{DOPPLER_PACKAGE}.MessageType",
    )
    _add_field(log_message, "timestamp", 3, _Field.TYPE_INT64)
    _add_field(log_message, "app_id", 4, _Field.TYPE_STRING)
    _add_field(
        log_message, "source_type", 5, _Field.TYPE_ENUM, type_name=f".{DOPPLER_PACKAGE}.SourceType"
    )
    _add_field(log_message, "source_instance", 6, _Field.TYPE_STRING)

    envelope = proto.message_type.add(name="Envelope")
    _add_field(envelope, "origin", 1, _Field.TYPE_STRING)
    _add_field(
        envelope, "event_type", 2, _Field.TYPE_ENUM, type_name=f".{DOPPLER_PACKAGE}.EventType"
    )
    _add_field(envelope, "timestamp", 6, _Field.TYPE_INT64)
    _add_field(
        envelope,
        "log_message",
        10,
        _Field.TYPE_MESSAGE,
        type_name=f".{DOPPLER_PACKAGE}.LogMessage",
    )
    return proto


def _loggregator_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name="cfrestart/loggregator/logmessage.proto",
        package=LOGGREGATOR_PACKAGE,
        syntax="proto2",
    )
    _add_enum(proto, "MessageType", (("OUT", 1), ("ERR", 2)))

    log_message = proto.message_type.add(name="LogMessage")
    _add_field(log_message, "message", 1, _Field.TYPE_STRING)
    _add_field(
        log_message,
        "message_type",
        2,
        _Field.TYPE_ENUM,
        type_name=f".{LOGGREGATOR_PACKAGE}.MessageType",
    )
    _add_field(log_message, "timestamp", 3, _Field.TYPE_SINT64)
    _add_field(log_message, "app_id", 4, _Field.TYPE_STRING)
    _add_field(log_message, "source_id", 6, _Field.TYPE_STRING)
    _add_field(log_message, "drain_urls", 7, _Field.TYPE_STRING, repeated=True)
    _add_field(log_message, "source_name", 8, _Field.TYPE_STRING)
    return proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_doppler_file().SerializeToString())
_pool.AddSerializedFile(_loggregator_file().SerializeToString())

DopplerEnvelope = GetMessageClass(_pool.FindMessageTypeByName(f"{DOPPLER_PACKAGE}.Envelope"))
DopplerLogMessage = GetMessageClass(_pool.FindMessageTypeByName(f"{DOPPLER_PACKAGE}.LogMessage"))
LoggregatorMessage = GetMessageClass(
    _pool.FindMessageTypeByName(f"{LOGGREGATOR_PACKAGE}.LogMessage")
)


def decode_doppler_frame(frame: bytes) -> DopplerLogEnvelope | None:
    """Decode a Doppler envelope; envelopes without a log message yield ``None``.

    Raises ``google.protobuf.message.DecodeError`` for malformed frames.
    """

    envelope = DopplerEnvelope.FromString(frame)
    if not envelope.HasField("log_message"):
        return None
    log_message = envelope.log_message
    return DopplerLogEnvelope(
        timestamp_ns=log_message.timestamp,
        payload=log_message.message,
        source_type=log_message.source_type if log_message.HasField("source_type") else 0,
    )


def decode_loggregator_frame(frame: bytes) -> LoggregatorLogMessage:
    message = LoggregatorMessage.FromString(frame)
    return LoggregatorLogMessage(
        timestamp_ns=message.timestamp,
        message=message.message,
        source_name=message.source_name,
    )
