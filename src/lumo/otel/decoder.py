"""
OTLP request decoding and normalization.

Decodes OTLP/HTTP export requests (protobuf or JSON, optionally gzipped)
and walks their resource -> scope -> point/record hierarchy to produce the
flat metric and event rows stored by the daemon.
"""

from __future__ import annotations

import logging
import zlib
from typing import TypeVar

from google.protobuf.json_format import Parse, ParseError
from google.protobuf.message import DecodeError, Message
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import (
    ExportMetricsServiceRequest,
)

from lumo.exceptions import OtlpDecodeError, OtlpPayloadTooLargeError
from lumo.otel.attributes import extract_attributes, serialize_resource
from lumo.otel.logs import normalize_log_record
from lumo.otel.metrics import normalize_metrics
from lumo.otel.records import NewEvent, NewMetric

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
PROTOBUF_CONTENT_TYPE = "application/x-protobuf"

RequestT = TypeVar("RequestT", bound=Message)


def normalize_content_type(content_type: str | None) -> str:
    """Strip parameters (e.g. charset) and lowercase a content-type header."""
    return (content_type or "").split(";")[0].strip().lower()


def is_json_content(content_type: str | None) -> bool:
    return normalize_content_type(content_type) == JSON_CONTENT_TYPE


def _inflate(payload: bytes, wbits: int, label: str, max_size: int | None) -> bytes:
    decompressor = zlib.decompressobj(wbits=wbits)
    try:
        if max_size is None:
            data = decompressor.decompress(payload) + decompressor.flush()
        else:
            data = decompressor.decompress(payload, max_size + 1)
    except zlib.error as exc:
        raise OtlpDecodeError(f"Invalid {label} payload") from exc

    if max_size is not None and len(data) > max_size:
        raise OtlpPayloadTooLargeError(
            f"Decompressed OTLP payload exceeds {max_size} bytes"
        )
    if not decompressor.eof:
        raise OtlpDecodeError(f"Invalid {label} payload")
    return data


def _decompress(
    payload: bytes, content_encoding: str | None, max_size: int | None = None
) -> bytes:
    """Inflate a request body, never producing more than ``max_size`` bytes."""
    encoding = (content_encoding or "").strip().lower()
    if encoding in ("", "identity"):
        return payload
    if encoding == "gzip":
        return _inflate(payload, 16 + zlib.MAX_WBITS, "gzip", max_size)
    if encoding == "deflate":
        return _inflate(payload, zlib.MAX_WBITS, "deflate", max_size)
    raise OtlpDecodeError(f"Unsupported content encoding: {content_encoding}")


def _decode(
    request: RequestT,
    payload: bytes,
    content_type: str | None,
    content_encoding: str | None,
    max_size: int | None,
) -> RequestT:
    if not payload:
        raise OtlpDecodeError("Empty OTLP payload")

    payload = _decompress(payload, content_encoding, max_size)

    try:
        if is_json_content(content_type):
            Parse(payload.decode("utf-8"), request, ignore_unknown_fields=True)
        else:
            request.ParseFromString(payload)
    except (DecodeError, ParseError, UnicodeDecodeError) as exc:
        logger.warning("Failed to parse OTLP payload: %s", exc)
        raise OtlpDecodeError("Invalid OTLP payload", content_type) from exc

    return request


def decode_metrics_request(
    payload: bytes,
    *,
    content_type: str | None,
    content_encoding: str | None = None,
    max_size: int | None = None,
) -> ExportMetricsServiceRequest:
    """Decode an OTLP/HTTP metrics body.

    Args:
        payload: Raw request body bytes.
        content_type: HTTP content-type header (may include charset).
        content_encoding: HTTP content-encoding header (gzip, deflate).
        max_size: Upper bound on the decompressed body size, if any.

    Returns:
        Parsed ExportMetricsServiceRequest.

    Raises:
        OtlpDecodeError: If the payload is empty or cannot be parsed.
        OtlpPayloadTooLargeError: If the body inflates past ``max_size``.
    """
    return _decode(
        ExportMetricsServiceRequest(),
        payload,
        content_type,
        content_encoding,
        max_size,
    )


def decode_logs_request(
    payload: bytes,
    *,
    content_type: str | None,
    content_encoding: str | None = None,
    max_size: int | None = None,
) -> ExportLogsServiceRequest:
    """Decode an OTLP/HTTP logs body. See ``decode_metrics_request``."""
    return _decode(
        ExportLogsServiceRequest(),
        payload,
        content_type,
        content_encoding,
        max_size,
    )


def _resource_blob(group) -> str | None:
    # A group without a declared resource has no blob at all.
    if not group.HasField("resource"):
        return None
    return serialize_resource(extract_attributes(group.resource.attributes))


def parse_metrics(request: ExportMetricsServiceRequest) -> list[NewMetric]:
    """
    Normalize every metric data point in an export request.

    Args:
        request: Parsed ExportMetricsServiceRequest.

    Returns:
        Metric rows in resource -> scope -> metric -> point order.
    """
    metrics: list[NewMetric] = []

    for resource_metrics in request.resource_metrics:
        resource = _resource_blob(resource_metrics)
        for scope_metrics in resource_metrics.scope_metrics:
            metrics.extend(normalize_metrics(scope_metrics.metrics, resource))

    logger.debug(
        "Parsed %d metric points from %d resource groups",
        len(metrics),
        len(request.resource_metrics),
    )
    return metrics


def parse_logs(request: ExportLogsServiceRequest) -> list[NewEvent]:
    """
    Normalize every log record in an export request.

    Args:
        request: Parsed ExportLogsServiceRequest.

    Returns:
        Event rows in resource -> scope -> record order.
    """
    events: list[NewEvent] = []

    for resource_logs in request.resource_logs:
        resource = _resource_blob(resource_logs)
        for scope_logs in resource_logs.scope_logs:
            for record in scope_logs.log_records:
                events.append(normalize_log_record(record, resource))

    logger.debug(
        "Parsed %d log records from %d resource groups",
        len(events),
        len(request.resource_logs),
    )
    return events
