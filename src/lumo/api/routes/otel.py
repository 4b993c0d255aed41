"""
OpenTelemetry OTLP ingestion endpoints.

Accepts OTLP/HTTP metric and log exports from Claude Code and stores the
normalized metric and event rows.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from google.protobuf.json_format import MessageToJson
from google.protobuf.message import Message
from opentelemetry.proto.collector.logs.v1.logs_service_pb2 import (
    ExportLogsServiceResponse,
)
from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import (
    ExportMetricsServiceResponse,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumo.config import settings
from lumo.db.connection import get_db
from lumo.db.repositories import EventRepository, MetricRepository
from lumo.exceptions import OtlpDecodeError, OtlpPayloadTooLargeError
from lumo.otel import (
    decode_logs_request,
    decode_metrics_request,
    parse_logs,
    parse_metrics,
)
from lumo.otel.decoder import JSON_CONTENT_TYPE, PROTOBUF_CONTENT_TYPE, is_json_content

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otel"])


async def _read_payload(request: Request) -> bytes:
    payload = await request.body()
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty OTLP payload",
        )
    if len(payload) > settings.otel_ingest_max_payload_bytes:
        raise HTTPException(
            status_code=413,
            detail="OTLP payload exceeds max size",
        )
    return payload


def _export_response(message: Message, content_type: str | None) -> Response:
    """Answer in the encoding the exporter used."""
    if is_json_content(content_type):
        return Response(
            content=MessageToJson(message),
            media_type=JSON_CONTENT_TYPE,
        )
    return Response(
        content=message.SerializeToString(),
        media_type=PROTOBUF_CONTENT_TYPE,
    )


def _decode_failure(exc: OtlpDecodeError) -> HTTPException:
    if isinstance(exc, OtlpPayloadTooLargeError):
        return HTTPException(status_code=413, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(exc),
    )


def _storage_failure(kind: str, exc: SQLAlchemyError) -> HTTPException:
    logger.error("Failed to store OTLP %s: %s", kind, exc, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to store {kind}",
    )


@router.post("/v1/metrics")
async def export_metrics(
    request: Request,
    session: Session = Depends(get_db),
    content_type: str | None = Header(default=None, alias="Content-Type"),
    content_encoding: str | None = Header(default=None, alias="Content-Encoding"),
) -> Response:
    """Ingest an OTLP metrics export."""
    payload = await _read_payload(request)

    try:
        export_request = decode_metrics_request(
            payload,
            content_type=content_type,
            content_encoding=content_encoding,
            max_size=settings.otel_ingest_max_payload_bytes,
        )
    except OtlpDecodeError as exc:
        raise _decode_failure(exc) from exc

    metrics = parse_metrics(export_request)
    if metrics:
        try:
            MetricRepository(session).bulk_create(metrics)
        except SQLAlchemyError as exc:
            raise _storage_failure("metrics", exc) from exc
        logger.info("Stored %d metric points", len(metrics))

    return _export_response(ExportMetricsServiceResponse(), content_type)


@router.post("/v1/logs")
async def export_logs(
    request: Request,
    session: Session = Depends(get_db),
    content_type: str | None = Header(default=None, alias="Content-Type"),
    content_encoding: str | None = Header(default=None, alias="Content-Encoding"),
) -> Response:
    """Ingest an OTLP logs export as Claude Code events."""
    payload = await _read_payload(request)

    try:
        export_request = decode_logs_request(
            payload,
            content_type=content_type,
            content_encoding=content_encoding,
            max_size=settings.otel_ingest_max_payload_bytes,
        )
    except OtlpDecodeError as exc:
        raise _decode_failure(exc) from exc

    events = parse_logs(export_request)
    if events:
        try:
            EventRepository(session).bulk_create(events)
        except SQLAlchemyError as exc:
            raise _storage_failure("events", exc) from exc
        logger.info("Stored %d events", len(events))

    return _export_response(ExportLogsServiceResponse(), content_type)
