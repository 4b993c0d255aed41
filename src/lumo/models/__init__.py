"""Database models for Lumo."""

from lumo.models.db import Base, Event, Metric, Notification

__all__ = ["Base", "Event", "Metric", "Notification"]
