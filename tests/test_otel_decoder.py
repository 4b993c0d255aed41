"""Tests for OTLP request decoding and batch normalization."""

import gzip
import json
import zlib

import pytest
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceRequest,
)
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import (
    ExportMetricsServiceRequest,
)
from opentelemetry.proto.common.v1.common_pb2 import AnyValue, KeyValue

from lumo.exceptions import OtlpDecodeError, OtlpPayloadTooLargeError
from lumo.otel import (
    decode_logs_request,
    decode_metrics_request,
    parse_logs,
    parse_metrics,
)

T0 = 1_700_000_000_000_000_000

LOGS_JSON = {
    "resourceLogs": [
        {
            "resource": {
                "attributes": [
                    {"key": "service.name", "value": {"stringValue": "claude-code"}}
                ]
            },
            "scopeLogs": [
                {
                    "scope": {"name": "com.anthropic.claude_code.events"},
                    "logRecords": [
                        {
                            "timeUnixNano": "1700000000000000000",
                            "body": {"stringValue": "claude_code.api_request"},
                            "attributes": [
                                {"key": "session.id", "value": {"stringValue": "s1"}},
                                {"key": "input_tokens", "value": {"intValue": "12"}},
                            ],
                        }
                    ],
                }
            ],
        }
    ]
}


def _string_attr(key: str, value: str) -> KeyValue:
    return KeyValue(key=key, value=AnyValue(string_value=value))


def _metrics_request() -> ExportMetricsServiceRequest:
    """Two resource groups: the first with attributes, the second without."""
    request = ExportMetricsServiceRequest()

    first = request.resource_metrics.add()
    first.resource.attributes.extend([_string_attr("service.name", "claude-code")])
    scope = first.scope_metrics.add()
    for name in ("claude_code.session.count", "claude_code.cost.usage"):
        metric = scope.metrics.add(name=name)
        metric.sum.data_points.add(as_int=1, time_unix_nano=T0)
    second_scope = first.scope_metrics.add()
    metric = second_scope.metrics.add(name="claude_code.token.usage")
    metric.sum.data_points.add(as_int=10, time_unix_nano=T0)

    second = request.resource_metrics.add()
    metric = second.scope_metrics.add().metrics.add(name="claude_code.commit.count")
    metric.gauge.data_points.add(as_double=2.0, time_unix_nano=T0)

    return request


def _logs_request(*names: str) -> ExportLogsServiceRequest:
    request = ExportLogsServiceRequest()
    resource_logs = request.resource_logs.add()
    resource_logs.resource.attributes.extend([_string_attr("host.arch", "arm64")])
    scope_logs = resource_logs.scope_logs.add()
    for name in names:
        record = scope_logs.log_records.add(time_unix_nano=T0)
        record.attributes.extend([_string_attr("event.name", name)])
    return request


class TestDecode:
    """Tests for decoding request bodies."""

    def test_decode_protobuf_metrics(self):
        payload = _metrics_request().SerializeToString()

        request = decode_metrics_request(
            payload, content_type="application/x-protobuf"
        )

        assert len(request.resource_metrics) == 2

    def test_missing_content_type_defaults_to_protobuf(self):
        payload = _logs_request("user_prompt").SerializeToString()

        request = decode_logs_request(payload, content_type=None)

        assert len(request.resource_logs[0].scope_logs[0].log_records) == 1

    def test_decode_json_logs(self):
        payload = json.dumps(LOGS_JSON).encode()

        request = decode_logs_request(
            payload, content_type="application/json; charset=utf-8"
        )
        events = parse_logs(request)

        assert len(events) == 1
        assert events[0].name == "claude_code.api_request"
        assert events[0].session_id == "s1"
        assert events[0].input_tokens == 12
        assert events[0].timestamp == 1_700_000_000_000
        assert json.loads(events[0].resource) == {"service.name": "claude-code"}

    def test_decode_gzip_payload(self):
        payload = gzip.compress(_logs_request("user_prompt").SerializeToString())

        request = decode_logs_request(
            payload,
            content_type="application/x-protobuf",
            content_encoding="gzip",
        )

        assert parse_logs(request)[0].name == "claude_code.user_prompt"

    def test_decode_deflate_payload(self):
        payload = zlib.compress(_logs_request("api_request").SerializeToString())

        request = decode_logs_request(
            payload,
            content_type="application/x-protobuf",
            content_encoding="deflate",
        )

        assert parse_logs(request)[0].name == "claude_code.api_request"

    def test_bad_deflate_raises(self):
        with pytest.raises(OtlpDecodeError, match="deflate"):
            decode_logs_request(
                b"plainly not deflate",
                content_type="application/x-protobuf",
                content_encoding="deflate",
            )

    def test_truncated_gzip_raises(self):
        payload = gzip.compress(_logs_request("user_prompt").SerializeToString())

        with pytest.raises(OtlpDecodeError, match="gzip"):
            decode_logs_request(
                payload[:-12],
                content_type="application/x-protobuf",
                content_encoding="gzip",
            )

    def test_gzip_within_size_limit(self):
        body = _logs_request("user_prompt").SerializeToString()

        request = decode_logs_request(
            gzip.compress(body),
            content_type="application/x-protobuf",
            content_encoding="gzip",
            max_size=len(body),
        )

        assert len(parse_logs(request)) == 1

    @pytest.mark.parametrize(
        "encoding,compress",
        [("gzip", gzip.compress), ("deflate", zlib.compress)],
    )
    def test_inflating_past_size_limit_raises(self, encoding, compress):
        payload = compress(b"\x00" * (4 * 1024 * 1024))
        assert len(payload) < 64 * 1024

        with pytest.raises(OtlpPayloadTooLargeError, match="exceeds 65536 bytes"):
            decode_metrics_request(
                payload,
                content_type="application/x-protobuf",
                content_encoding=encoding,
                max_size=64 * 1024,
            )

    def test_size_limit_error_is_decode_error(self):
        assert issubclass(OtlpPayloadTooLargeError, OtlpDecodeError)

    def test_empty_payload_raises(self):
        with pytest.raises(OtlpDecodeError, match="Empty"):
            decode_metrics_request(b"", content_type="application/x-protobuf")

    def test_malformed_protobuf_raises(self):
        with pytest.raises(OtlpDecodeError, match="Invalid OTLP payload"):
            decode_metrics_request(b"\x0a\xff", content_type="application/x-protobuf")

    def test_malformed_json_raises(self):
        with pytest.raises(OtlpDecodeError):
            decode_logs_request(b"{not json", content_type="application/json")

    def test_bad_gzip_raises(self):
        with pytest.raises(OtlpDecodeError, match="gzip"):
            decode_logs_request(
                b"plainly not gzip",
                content_type="application/x-protobuf",
                content_encoding="gzip",
            )

    def test_unsupported_encoding_raises(self):
        with pytest.raises(OtlpDecodeError, match="Unsupported content encoding"):
            decode_logs_request(
                b"\x00", content_type="application/x-protobuf", content_encoding="br"
            )

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_logs_request(b"", content_type=None)


class TestParseMetrics:
    """Tests for walking metric export requests."""

    def test_traversal_order(self):
        records = parse_metrics(_metrics_request())

        assert [r.name for r in records] == [
            "claude_code.session.count",
            "claude_code.cost.usage",
            "claude_code.token.usage",
            "claude_code.commit.count",
        ]

    def test_resource_blob_per_group(self):
        records = parse_metrics(_metrics_request())

        first_group = records[:3]
        assert all(
            json.loads(r.resource) == {"service.name": "claude-code"}
            for r in first_group
        )
        assert records[3].resource is None

    def test_resource_without_attributes_is_none(self):
        request = ExportMetricsServiceRequest()
        group = request.resource_metrics.add()
        group.resource.SetInParent()
        metric = group.scope_metrics.add().metrics.add(name="claude_code.x")
        metric.sum.data_points.add(as_int=1, time_unix_nano=T0)

        records = parse_metrics(request)

        assert records[0].resource is None

    def test_empty_request(self):
        assert parse_metrics(ExportMetricsServiceRequest()) == []

    def test_groups_without_points(self):
        request = ExportMetricsServiceRequest()
        request.resource_metrics.add().scope_metrics.add()

        assert parse_metrics(request) == []


class TestParseLogs:
    """Tests for walking log export requests."""

    def test_one_event_per_record_in_order(self):
        events = parse_logs(_logs_request("user_prompt", "api_request", "tool_result"))

        assert [e.name for e in events] == [
            "claude_code.user_prompt",
            "claude_code.api_request",
            "claude_code.tool_result",
        ]
        assert all(json.loads(e.resource) == {"host.arch": "arm64"} for e in events)

    def test_group_without_resource(self):
        request = ExportLogsServiceRequest()
        request.resource_logs.add().scope_logs.add().log_records.add(
            time_unix_nano=T0
        )

        events = parse_logs(request)

        assert len(events) == 1
        assert events[0].resource is None

    def test_empty_request(self):
        assert parse_logs(ExportLogsServiceRequest()) == []
