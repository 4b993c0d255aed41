"""
API schemas for Lumo.

Pydantic models for request/response validation.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class NotifyRequest(BaseModel):
    """Payload posted by Claude Code hooks (hook stdin, snake_case JSON)."""

    session_id: str
    hook_event: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("hook_event", "hook_event_name"),
    )
    title: Optional[str] = None
    message: Optional[str] = None
    notification_type: Optional[str] = None
    cwd: Optional[str] = None
    transcript_path: Optional[str] = None


class NotifyResponse(BaseModel):
    """Response for a stored notification."""

    status: str
    id: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
