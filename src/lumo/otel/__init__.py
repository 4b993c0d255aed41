"""OTLP ingestion helpers."""

from lumo.otel.decoder import (
    decode_logs_request,
    decode_metrics_request,
    parse_logs,
    parse_metrics,
)
from lumo.otel.records import NewEvent, NewMetric

__all__ = [
    "NewEvent",
    "NewMetric",
    "decode_logs_request",
    "decode_metrics_request",
    "parse_logs",
    "parse_metrics",
]
