"""
Hook notification endpoint.

Receives notifications from Claude Code hooks and stores them for the
desktop app to display.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumo.api.schemas import NotifyRequest, NotifyResponse
from lumo.db.connection import get_db
from lumo.db.repositories import NotificationRepository
from lumo.notifications import UNKNOWN_HOOK_EVENT, default_message, default_title

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notify"])


@router.post("/notify", response_model=NotifyResponse)
def notify(
    payload: NotifyRequest,
    session: Session = Depends(get_db),
):
    """Store a notification posted by a Claude Code hook."""
    hook_event = (
        payload.hook_event if payload.hook_event is not None else UNKNOWN_HOOK_EVENT
    )
    title = payload.title if payload.title is not None else default_title(hook_event)
    message = (
        payload.message if payload.message is not None else default_message(hook_event)
    )

    repo = NotificationRepository(session)
    try:
        notification_id = repo.insert(
            session_id=payload.session_id,
            hook_event=hook_event,
            notification_type=payload.notification_type,
            title=title,
            message=message,
            cwd=payload.cwd,
            transcript_path=payload.transcript_path,
        )
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to store notification: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": f"Failed to store notification: {exc}",
            },
        )

    logger.info("Notification stored (id=%s, hook_event=%s)", notification_id, hook_event)
    return NotifyResponse(status="success", id=notification_id)
