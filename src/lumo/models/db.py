"""
SQLAlchemy database models for Lumo.

These models represent the SQLite schema for storing normalized OTLP
telemetry and hook notifications.
"""

import time
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def _now_millis() -> int:
    return int(time.time() * 1000)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Metric(Base):
    """One OTLP metric data point."""

    __tablename__ = "metrics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    timestamp: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True
    )  # epoch milliseconds
    value: Mapped[float] = mapped_column(Float, nullable=False)

    metric_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tool: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    decision: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    account_uuid: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    terminal_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    app_version: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resource: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )  # JSON-encoded resource attributes

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_metrics_session_name", "session_id", "name"),)

    def __repr__(self) -> str:
        return (
            f"<Metric(id={self.id!r}, "
            f"name={self.name!r}, "
            f"value={self.value})>"
        )


class Event(Base):
    """One OTLP log record (Claude Code event)."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    timestamp: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True
    )  # epoch milliseconds

    duration_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    success: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cost_usd: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    input_tokens: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    output_tokens: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    cache_read_tokens: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    cache_creation_tokens: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True
    )
    status_code: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    attempt: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tool_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tool_decision: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    decision_source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tool_parameters: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prompt_length: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    account_uuid: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    terminal_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    app_version: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    event_sequence: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    tool_result_size_bytes: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True
    )
    resource: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_events_session_timestamp", "session_id", "timestamp"),)

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id!r}, "
            f"name={self.name!r}, "
            f"session_id={self.session_id!r})>"
        )


class Notification(Base):
    """Notification received from a Claude Code hook."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    hook_event: Mapped[str] = mapped_column(String(100), nullable=False)
    notification_type: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    cwd: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transcript_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # OS notification delivered / seen in the UI
    notified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=_now_millis, index=True
    )  # epoch milliseconds

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, "
            f"hook_event={self.hook_event!r}, "
            f"read={self.read})>"
        )
