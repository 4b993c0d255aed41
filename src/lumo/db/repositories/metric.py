"""Metric repository."""

from typing import List, Sequence

from sqlalchemy.orm import Session

from lumo.db.repositories.base import BaseRepository
from lumo.models.db import Metric
from lumo.otel.records import NewMetric


class MetricRepository(BaseRepository[Metric]):
    """Repository for Metric model."""

    def __init__(self, session: Session):
        super().__init__(Metric, session)

    def bulk_create(self, metrics: Sequence[NewMetric]) -> List[Metric]:
        """Bulk insert normalized metric points."""
        instances = [Metric(**metric.to_dict()) for metric in metrics]
        self.session.bulk_save_objects(instances)
        self.session.flush()
        return instances

    def get_by_session(self, session_id: str) -> List[Metric]:
        """
        Get all metric points for a session.

        Args:
            session_id: Claude Code session id

        Returns:
            Metric points ordered by timestamp
        """
        return (
            self.session.query(Metric)
            .filter(Metric.session_id == session_id)
            .order_by(Metric.timestamp.asc())
            .all()
        )
