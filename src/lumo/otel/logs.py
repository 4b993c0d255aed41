"""
OTLP log record normalization.

Each log record becomes one ``NewEvent``. The event name is taken from the
``event.name`` attribute or the record body and namespaced under
``claude_code.``; the remaining fields are parsed best-effort from a fixed
table of attribute keys.
"""

from __future__ import annotations

import uuid

from opentelemetry.proto.logs.v1.logs_pb2 import LogRecord

from lumo.otel.attributes import (
    AttributeMap,
    FieldParser,
    any_value_to_string,
    extract_attributes,
    nanos_to_millis,
    parse_attribute,
    parse_bool,
    parse_float,
    parse_int32,
    parse_int64,
    parse_str,
    session_id_from,
)
from lumo.otel.records import NewEvent

EVENT_NAMESPACE = "claude_code."
EVENT_NAME_KEY = "event.name"
UNKNOWN_EVENT_NAME = "unknown"

# (record field, attribute key, parser)
EVENT_FIELDS: tuple[tuple[str, str, FieldParser], ...] = (
    ("duration_ms", "duration_ms", parse_int64),
    ("success", "success", parse_bool),
    ("error", "error", parse_str),
    ("model", "model", parse_str),
    ("cost_usd", "cost_usd", parse_float),
    ("input_tokens", "input_tokens", parse_int64),
    ("output_tokens", "output_tokens", parse_int64),
    ("cache_read_tokens", "cache_read_tokens", parse_int64),
    ("cache_creation_tokens", "cache_creation_tokens", parse_int64),
    ("status_code", "status_code", parse_int32),
    ("attempt", "attempt", parse_int32),
    ("tool_name", "tool_name", parse_str),
    ("tool_decision", "decision", parse_str),
    ("decision_source", "source", parse_str),
    ("tool_parameters", "tool_parameters", parse_str),
    ("prompt_length", "prompt_length", parse_int64),
    ("prompt", "prompt", parse_str),
    ("account_uuid", "user.account_uuid", parse_str),
    ("organization_id", "organization.id", parse_str),
    ("terminal_type", "terminal.type", parse_str),
    ("app_version", "app.version", parse_str),
    ("user_id", "user.id", parse_str),
    ("user_email", "user.email", parse_str),
    ("event_sequence", "event.sequence", parse_int64),
    ("tool_result_size_bytes", "tool_result_size_bytes", parse_int64),
)


def namespace_event_name(name: str) -> str:
    """Prefix ``name`` with ``claude_code.`` unless it already has it."""
    if name.startswith(EVENT_NAMESPACE):
        return name
    return f"{EVENT_NAMESPACE}{name}"


def derive_event_name(record: LogRecord, attributes: AttributeMap) -> str:
    name = attributes.get(EVENT_NAME_KEY)
    if name is None and record.HasField("body"):
        name = any_value_to_string(record.body)
    if name is None:
        name = UNKNOWN_EVENT_NAME
    return namespace_event_name(name)


def normalize_log_record(record: LogRecord, resource: str | None) -> NewEvent:
    """
    Normalize one OTLP log record.

    Args:
        record: OTLP log record.
        resource: Serialized resource attributes of the enclosing group.

    Returns:
        The normalized event. Fields whose attribute is missing or does not
        parse are left as None.
    """
    attributes = extract_attributes(record.attributes)
    fields = {
        field: parse_attribute(attributes, key, parser)
        for field, key, parser in EVENT_FIELDS
    }
    return NewEvent(
        id=str(uuid.uuid4()),
        session_id=session_id_from(attributes),
        name=derive_event_name(record, attributes),
        timestamp=nanos_to_millis(record.time_unix_nano),
        resource=resource,
        **fields,
    )
