"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Generic, TypeVar, Optional, Type
from uuid import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from abc import ABC

from app.exceptions import ConflictError

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.

    Writes commit by default. Pass ``commit=False`` to only flush, so that a
    service can group several writes into one transaction. Flushing is what
    runs the aggregate recompute hooks, so summaries are current either way.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by primary key"""
        return self.db.get(self.model, entity_id)

    def _finish(self, commit: bool):
        try:
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(
                f"{self.model.__name__} write violates a data constraint",
                details={"reason": str(exc.orig)},
            ) from exc

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        self._finish(commit)
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Persist changes made to an attached entity"""
        self._finish(commit)
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID, commit: bool = True) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self._finish(commit)
            return True
        return False
