"""Tests for OTLP metric normalization."""

import json
import uuid

from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue
from opentelemetry.proto.metrics.v1.metrics_pb2 import Metric

from lumo.otel.metrics import normalize_metric, normalize_metrics

T0 = 1_700_000_000_000_000_000


def _attrs(**values: str) -> list[KeyValue]:
    return [
        KeyValue(key=key.replace("__", "."), value=AnyValue(string_value=value))
        for key, value in values.items()
    ]


def _sum_metric(name: str = "claude_code.lines_of_code.count") -> Metric:
    metric = Metric(name=name)
    point = metric.sum.data_points.add()
    point.as_double = 42.0
    point.time_unix_nano = T0
    point.attributes.extend(_attrs(type="added", session__id="s1"))
    return metric


class TestSumAndGauge:
    """Tests for number data points."""

    def test_lines_of_code_scenario(self):
        records = normalize_metric(_sum_metric(), resource=None)

        assert len(records) == 1
        record = records[0]
        assert record.name == "claude_code.lines_of_code.count"
        assert record.session_id == "s1"
        assert record.metric_type == "added"
        assert record.value == 42.0
        assert record.timestamp == 1_700_000_000_000
        assert record.resource is None

    def test_int_value_is_converted_to_float(self):
        metric = Metric(name="claude_code.token.usage")
        point = metric.sum.data_points.add()
        point.as_int = 2**53
        point.time_unix_nano = T0

        record = normalize_metric(metric, resource=None)[0]

        assert record.value == float(2**53)
        assert isinstance(record.value, float)

    def test_gauge_value(self):
        metric = Metric(name="claude_code.session.count")
        point = metric.gauge.data_points.add()
        point.as_double = 3.5
        point.time_unix_nano = T0

        assert normalize_metric(metric, resource=None)[0].value == 3.5

    def test_unset_value_reads_as_zero(self):
        metric = Metric(name="claude_code.session.count")
        metric.gauge.data_points.add(time_unix_nano=T0)

        assert normalize_metric(metric, resource=None)[0].value == 0.0

    def test_one_record_per_data_point(self):
        metric = Metric(name="claude_code.cost.usage", unit="USD")
        for index, model in enumerate(["opus", "sonnet", "haiku"]):
            point = metric.sum.data_points.add()
            point.as_double = float(index)
            point.time_unix_nano = T0 + index * 1_000_000
            point.attributes.extend(_attrs(model=model))

        records = normalize_metric(metric, resource=None)

        assert [r.model for r in records] == ["opus", "sonnet", "haiku"]
        assert [r.value for r in records] == [0.0, 1.0, 2.0]
        assert [r.timestamp for r in records] == [
            1_700_000_000_000,
            1_700_000_000_001,
            1_700_000_000_002,
        ]
        assert len({r.id for r in records}) == 3


class TestHistogram:
    def test_histogram_uses_sum(self):
        metric = Metric(name="claude_code.api.latency")
        point = metric.histogram.data_points.add()
        point.sum = 12.5
        point.count = 4
        point.time_unix_nano = T0

        assert normalize_metric(metric, resource=None)[0].value == 12.5

    def test_histogram_without_sum_is_zero(self):
        metric = Metric(name="claude_code.api.latency")
        point = metric.histogram.data_points.add()
        point.count = 4
        point.time_unix_nano = T0

        assert normalize_metric(metric, resource=None)[0].value == 0.0


class TestUnsupportedKinds:
    def test_summary_is_skipped(self):
        metric = Metric(name="claude_code.summary")
        metric.summary.data_points.add(time_unix_nano=T0)

        assert normalize_metric(metric, resource=None) == []

    def test_exponential_histogram_is_skipped(self):
        metric = Metric(name="claude_code.exp")
        metric.exponential_histogram.data_points.add(time_unix_nano=T0)

        assert normalize_metric(metric, resource=None) == []

    def test_metric_without_data_is_skipped(self):
        assert normalize_metric(Metric(name="empty"), resource=None) == []

    def test_skipped_kind_does_not_affect_others(self):
        summary = Metric(name="claude_code.summary")
        summary.summary.data_points.add(time_unix_nano=T0)

        records = normalize_metrics([summary, _sum_metric()], resource=None)

        assert [r.name for r in records] == ["claude_code.lines_of_code.count"]


class TestDimensions:
    def test_dimension_fields_from_point_attributes(self):
        metric = Metric(name="claude_code.code_edit_tool.decision")
        point = metric.sum.data_points.add()
        point.as_int = 1
        point.time_unix_nano = T0
        point.attributes.extend(
            _attrs(
                tool="Edit",
                decision="accept",
                language="Python",
                user__account_uuid="acct-1",
                organization__id="org-1",
                terminal__type="iTerm.app",
                app__version="1.0.0",
                user__id="user-hash",
                user__email="dev@example.com",
                model="claude-opus",
            )
        )

        record = normalize_metric(metric, resource=None)[0]

        assert record.tool == "Edit"
        assert record.decision == "accept"
        assert record.language == "Python"
        assert record.account_uuid == "acct-1"
        assert record.organization_id == "org-1"
        assert record.terminal_type == "iTerm.app"
        assert record.app_version == "1.0.0"
        assert record.user_id == "user-hash"
        assert record.user_email == "dev@example.com"
        assert record.model == "claude-opus"
        assert record.metric_type is None

    def test_missing_session_is_unknown(self):
        metric = Metric(name="claude_code.session.count")
        metric.sum.data_points.add(as_int=1, time_unix_nano=T0)

        assert normalize_metric(metric, resource=None)[0].session_id == "unknown"

    def test_resource_is_not_merged_into_dimensions(self):
        resource = json.dumps({"session.id": "from-resource", "app.version": "9.9"})
        metric = Metric(name="claude_code.session.count")
        metric.sum.data_points.add(as_int=1, time_unix_nano=T0)

        record = normalize_metric(metric, resource=resource)[0]

        assert record.session_id == "unknown"
        assert record.app_version is None
        assert record.resource == resource

    def test_unit_and_description(self):
        metric = _sum_metric()
        metric.unit = "count"
        metric.description = "Lines of code modified"

        record = normalize_metric(metric, resource=None)[0]

        assert record.unit == "count"
        assert record.description == "Lines of code modified"

    def test_empty_unit_and_description_are_none(self):
        record = normalize_metric(_sum_metric(), resource=None)[0]

        assert record.unit is None
        assert record.description is None

    def test_id_is_uuid(self):
        record = normalize_metric(_sum_metric(), resource=None)[0]

        assert uuid.UUID(record.id).version == 4
