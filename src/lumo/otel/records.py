"""
Normalized telemetry records.

Flat, storage-ready shapes produced by the OTLP parser. Storage-level
defaults (such as the received-at timestamp) are assigned by the database.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class NewMetric:
    """One OTLP metric data point flattened for storage."""

    id: str
    session_id: str
    name: str
    timestamp: int
    value: float
    metric_type: str | None = None
    model: str | None = None
    tool: str | None = None
    decision: str | None = None
    language: str | None = None
    account_uuid: str | None = None
    organization_id: str | None = None
    terminal_type: str | None = None
    app_version: str | None = None
    user_id: str | None = None
    user_email: str | None = None
    unit: str | None = None
    description: str | None = None
    resource: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NewEvent:
    """One OTLP log record flattened for storage."""

    id: str
    session_id: str
    name: str
    timestamp: int
    duration_ms: int | None = None
    success: bool | None = None
    error: str | None = None
    model: str | None = None
    cost_usd: float | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    cache_read_tokens: int | None = None
    cache_creation_tokens: int | None = None
    status_code: int | None = None
    attempt: int | None = None
    tool_name: str | None = None
    tool_decision: str | None = None
    decision_source: str | None = None
    tool_parameters: str | None = None
    prompt_length: int | None = None
    prompt: str | None = None
    account_uuid: str | None = None
    organization_id: str | None = None
    terminal_type: str | None = None
    app_version: str | None = None
    user_id: str | None = None
    user_email: str | None = None
    event_sequence: int | None = None
    tool_result_size_bytes: int | None = None
    resource: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
