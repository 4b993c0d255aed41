"""
OTLP attribute extraction.

Flattens OTLP ``KeyValue`` lists into plain string maps and provides the
best-effort typed parsers used to populate normalized record fields.
"""

from __future__ import annotations

import json
import logging
import math
import re
from decimal import Decimal
from typing import Callable, Mapping, Sequence

from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue

logger = logging.getLogger(__name__)

AttributeMap = dict[str, str]
FieldParser = Callable[[str], object]

SESSION_ID_KEY = "session.id"
UNKNOWN_SESSION_ID = "unknown"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

_INT32_RANGE = (-(2**31), 2**31 - 1)
_INT64_RANGE = (-(2**63), 2**63 - 1)


def extract_attributes(attributes: Sequence[KeyValue]) -> AttributeMap:
    """Convert a KeyValue list into a string map.

    Only string, int, double and bool values are kept; arrays, key/value
    lists, bytes and unset values are skipped. A repeated key keeps the
    last value.

    Args:
        attributes: OTLP key/value pairs.

    Returns:
        Mapping of attribute key to stringified value.
    """
    result: AttributeMap = {}
    for kv in attributes:
        value = any_value_to_string(kv.value)
        if value is not None:
            result[kv.key] = value
    return result


def any_value_to_string(value: AnyValue | None) -> str | None:
    """Stringify a scalar AnyValue, or return None for other variants."""
    if value is None:
        return None
    kind = value.WhichOneof("value")
    if kind == "string_value":
        return value.string_value
    if kind == "int_value":
        return str(value.int_value)
    if kind == "double_value":
        return format_double(value.double_value)
    if kind == "bool_value":
        return "true" if value.bool_value else "false"
    return None


def format_double(value: float) -> str:
    """Render a double in plain decimal notation.

    Integral values drop the fractional part (``150.0`` -> ``"150"``) and
    exponents are expanded, so the result parses as an integer whenever
    the double holds one.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def serialize_resource(attributes: Mapping[str, str] | None) -> str | None:
    """Serialize resource attributes to a compact JSON string.

    Returns None when there is no resource or it has no attributes.
    """
    if not attributes:
        return None
    try:
        return json.dumps(dict(attributes), separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to serialize resource attributes: %s", exc)
        return None


def session_id_from(attributes: Mapping[str, str]) -> str:
    return attributes.get(SESSION_ID_KEY, UNKNOWN_SESSION_ID)


def nanos_to_millis(time_unix_nano: int) -> int:
    """Convert an OTLP nanosecond timestamp to milliseconds (truncating)."""
    return int(time_unix_nano) // 1_000_000


# Typed field parsers. Each returns None when the value does not parse.


def parse_str(raw: str) -> str:
    return raw


def parse_bool(raw: str) -> bool:
    # Exact, case-sensitive match; "True" and "1" are False.
    return raw == "true"


def _parse_int_in(raw: str, bounds: tuple[int, int]) -> int | None:
    if not _INT_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    low, high = bounds
    if value < low or value > high:
        return None
    return value


def parse_int64(raw: str) -> int | None:
    return _parse_int_in(raw, _INT64_RANGE)


def parse_int32(raw: str) -> int | None:
    return _parse_int_in(raw, _INT32_RANGE)


def parse_float(raw: str) -> float | None:
    if not raw.isascii() or raw != raw.strip() or "_" in raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def parse_attribute(
    attributes: Mapping[str, str], key: str, parser: FieldParser
) -> object | None:
    """Parse one attribute with ``parser``; missing keys yield None."""
    raw = attributes.get(key)
    if raw is None:
        return None
    return parser(raw)
