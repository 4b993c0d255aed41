"""
Base repository with common CRUD operations.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from lumo.models.db import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository bound to one model class and one session."""

    def __init__(self, model: Type[ModelType], session: Session):
        self.model = model
        self.session = session

    def create(self, **kwargs: Any) -> ModelType:
        """
        Create and flush a new instance.

        Args:
            **kwargs: Column values

        Returns:
            The created instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, id: Any) -> Optional[ModelType]:
        """Get an instance by primary key, or None."""
        return self.session.get(self.model, id)

    def update(self, id: Any, **kwargs: Any) -> Optional[ModelType]:
        """
        Update an instance by primary key.

        Returns:
            The updated instance, or None if it does not exist
        """
        instance = self.get(id)
        if instance is None:
            return None
        for key, value in kwargs.items():
            setattr(instance, key, value)
        self.session.flush()
        return instance

    def count(self) -> int:
        return self.session.query(func.count()).select_from(self.model).scalar() or 0
