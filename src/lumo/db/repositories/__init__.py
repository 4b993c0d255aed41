"""
Repository layer for database operations.

Provides a clean API for CRUD operations on database models.
"""

from lumo.db.repositories.base import BaseRepository
from lumo.db.repositories.event import EventRepository
from lumo.db.repositories.metric import MetricRepository
from lumo.db.repositories.notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "MetricRepository",
    "NotificationRepository",
]
