"""Event repository."""

from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from lumo.db.repositories.base import BaseRepository
from lumo.models.db import Event
from lumo.otel.records import NewEvent


class EventRepository(BaseRepository[Event]):
    """Repository for Event model."""

    def __init__(self, session: Session):
        super().__init__(Event, session)

    def bulk_create(self, events: Sequence[NewEvent]) -> List[Event]:
        """Bulk insert normalized events."""
        instances = [Event(**event.to_dict()) for event in events]
        self.session.bulk_save_objects(instances)
        self.session.flush()
        return instances

    def get_by_session(
        self, session_id: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[Event]:
        """
        Get events for a session in timestamp order.

        Args:
            session_id: Claude Code session id
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of events
        """
        query = (
            self.session.query(Event)
            .filter(Event.session_id == session_id)
            .order_by(Event.timestamp.asc())
            .offset(offset)
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def last_event_time(self) -> Optional[int]:
        """Get the most recent event timestamp (epoch ms)."""
        return self.session.query(func.max(Event.timestamp)).scalar()
