"""Notification repository."""

from typing import List, Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session

from lumo.db.repositories.base import BaseRepository
from lumo.models.db import Notification


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification model."""

    def __init__(self, session: Session):
        super().__init__(Notification, session)

    def insert(self, **kwargs) -> int:
        """Store a notification and return its id."""
        return self.create(**kwargs).id

    def find_unnotified(self) -> List[Notification]:
        """Notifications not yet delivered as OS notifications, oldest first."""
        return (
            self.session.query(Notification)
            .filter(Notification.notified == False)  # noqa: E712
            .order_by(Notification.created_at.asc(), Notification.id.asc())
            .all()
        )

    def mark_notified(self, ids: Sequence[int]) -> None:
        if not ids:
            return
        self.session.execute(
            update(Notification)
            .where(Notification.id.in_(list(ids)))
            .values(notified=True)
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()

    def mark_read(self, id: int) -> bool:
        """
        Mark a single notification as read.

        Returns:
            True if the notification exists
        """
        return self.update(id, read=True) is not None

    def mark_all_read(self) -> int:
        """
        Mark every unread notification as read.

        Returns:
            Number of notifications updated
        """
        result = self.session.execute(
            update(Notification)
            .where(Notification.read == False)  # noqa: E712
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()
        return result.rowcount

    def find_recent(self, limit: int = 50, offset: int = 0) -> List[Notification]:
        return (
            self.session.query(Notification)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def unread_count(self) -> int:
        return (
            self.session.query(Notification)
            .filter(Notification.read == False)  # noqa: E712
            .count()
        )
