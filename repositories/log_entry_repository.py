"""
Log Entry Repositories - Data access for food and exercise entries.

Every write here goes through the session, so the flush hooks keep the daily
summaries in step.
"""

from datetime import date
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_

from repositories.base import BaseRepository
from domain.models import ExerciseEntry, FoodEntry


class FoodEntryRepository(BaseRepository[FoodEntry]):
    """Repository for food log entries"""

    def __init__(self, db: Session):
        super().__init__(db, FoodEntry)

    def get_for_day(
        self,
        user_id: UUID,
        entry_date: date,
        meal_type: Optional[str] = None,
        entry_ids: Optional[Sequence[UUID]] = None,
    ) -> List[FoodEntry]:
        """Entries of one user and day, optionally one meal or a subset of IDs"""
        query = self.db.query(FoodEntry).filter(
            and_(FoodEntry.user_id == user_id, FoodEntry.entry_date == entry_date)
        )
        if meal_type:
            query = query.filter(FoodEntry.meal_type == meal_type)
        if entry_ids is not None:
            query = query.filter(FoodEntry.entry_id.in_(list(entry_ids)))
        return query.order_by(FoodEntry.created_at, FoodEntry.entry_id).all()

    def add_all(self, entries: List[FoodEntry], commit: bool = True) -> List[FoodEntry]:
        self.db.add_all(entries)
        self._finish(commit)
        for entry in entries:
            self.db.refresh(entry)
        return entries


class ExerciseEntryRepository(BaseRepository[ExerciseEntry]):
    """Repository for exercise log entries"""

    def __init__(self, db: Session):
        super().__init__(db, ExerciseEntry)

    def get_for_day(
        self,
        user_id: UUID,
        entry_date: date,
        entry_ids: Optional[Sequence[UUID]] = None,
    ) -> List[ExerciseEntry]:
        query = self.db.query(ExerciseEntry).filter(
            and_(
                ExerciseEntry.user_id == user_id,
                ExerciseEntry.entry_date == entry_date,
            )
        )
        if entry_ids is not None:
            query = query.filter(ExerciseEntry.entry_id.in_(list(entry_ids)))
        return query.order_by(ExerciseEntry.created_at, ExerciseEntry.entry_id).all()

    def add_all(
        self, entries: List[ExerciseEntry], commit: bool = True
    ) -> List[ExerciseEntry]:
        self.db.add_all(entries)
        self._finish(commit)
        for entry in entries:
            self.db.refresh(entry)
        return entries
