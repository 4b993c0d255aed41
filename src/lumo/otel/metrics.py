"""
OTLP metric normalization.

Turns each data point of a Sum, Gauge or Histogram metric into a
``NewMetric`` row. Other aggregation kinds are skipped.
"""

from __future__ import annotations

import uuid
from typing import Iterable

from opentelemetry.proto.metrics.v1.metrics_pb2 import (
    HistogramDataPoint,
    Metric,
    NumberDataPoint,
)

from lumo.otel.attributes import (
    AttributeMap,
    extract_attributes,
    nanos_to_millis,
    session_id_from,
)
from lumo.otel.records import NewMetric

# (record field, attribute key) pairs copied verbatim from point attributes.
METRIC_DIMENSIONS: tuple[tuple[str, str], ...] = (
    ("metric_type", "type"),
    ("model", "model"),
    ("tool", "tool"),
    ("decision", "decision"),
    ("language", "language"),
    ("account_uuid", "user.account_uuid"),
    ("organization_id", "organization.id"),
    ("terminal_type", "terminal.type"),
    ("app_version", "app.version"),
    ("user_id", "user.id"),
    ("user_email", "user.email"),
)

SUPPORTED_KINDS = ("sum", "gauge", "histogram")


def number_point_value(point: NumberDataPoint) -> float:
    """Read a Sum/Gauge point value; an unset value reads as 0.0."""
    kind = point.WhichOneof("value")
    if kind == "as_double":
        return point.as_double
    if kind == "as_int":
        return float(point.as_int)
    return 0.0


def histogram_point_value(point: HistogramDataPoint) -> float:
    """Histograms are reduced to their sum; buckets and counts are dropped."""
    if point.HasField("sum"):
        return point.sum
    return 0.0


def normalize_metric(metric: Metric, resource: str | None) -> list[NewMetric]:
    """
    Normalize every data point of one OTLP metric.

    Args:
        metric: OTLP metric definition with its data points.
        resource: Serialized resource attributes shared by the metric.

    Returns:
        One NewMetric per data point, in point order. Empty for
        unsupported aggregation kinds.
    """
    kind = metric.WhichOneof("data")
    if kind not in SUPPORTED_KINDS:
        return []

    unit = metric.unit or None
    description = metric.description or None

    if kind == "histogram":
        values = (
            (point, histogram_point_value(point))
            for point in metric.histogram.data_points
        )
    else:
        points = getattr(metric, kind).data_points
        values = ((point, number_point_value(point)) for point in points)

    return [
        build_metric(
            name=metric.name,
            timestamp=nanos_to_millis(point.time_unix_nano),
            value=value,
            attributes=extract_attributes(point.attributes),
            resource=resource,
            unit=unit,
            description=description,
        )
        for point, value in values
    ]


def normalize_metrics(
    metrics: Iterable[Metric], resource: str | None
) -> list[NewMetric]:
    records: list[NewMetric] = []
    for metric in metrics:
        records.extend(normalize_metric(metric, resource))
    return records


def build_metric(
    *,
    name: str,
    timestamp: int,
    value: float,
    attributes: AttributeMap,
    resource: str | None,
    unit: str | None,
    description: str | None,
) -> NewMetric:
    dimensions = {field: attributes.get(key) for field, key in METRIC_DIMENSIONS}
    return NewMetric(
        id=str(uuid.uuid4()),
        session_id=session_id_from(attributes),
        name=name,
        timestamp=timestamp,
        value=value,
        unit=unit,
        description=description,
        resource=resource,
        **dimensions,
    )
