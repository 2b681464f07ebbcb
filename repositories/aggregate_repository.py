"""
Aggregate Repository - read access to the daily summary tables.

Summary rows are written behind the ORM's back by the recompute engine, so
every read here refreshes whatever the session already holds.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from domain.enums import MEAL_TYPE_ORDER
from domain.models import DailySumConsumed, DailySumConsumedMeal, DailySumExercises


class AggregateRepository:
    """Read-only repository for daily summaries"""

    def __init__(self, db: Session):
        self.db = db

    def get_daily_consumed(self, user_id: UUID, entry_date: date) -> Optional[DailySumConsumed]:
        return (
            self.db.query(DailySumConsumed)
            .populate_existing()
            .filter(
                DailySumConsumed.user_id == user_id,
                DailySumConsumed.entry_date == entry_date,
            )
            .first()
        )

    def get_meal_consumed(
        self, user_id: UUID, entry_date: date, meal_type: str
    ) -> Optional[DailySumConsumedMeal]:
        return (
            self.db.query(DailySumConsumedMeal)
            .populate_existing()
            .filter(
                DailySumConsumedMeal.user_id == user_id,
                DailySumConsumedMeal.entry_date == entry_date,
                DailySumConsumedMeal.meal_type == meal_type,
            )
            .first()
        )

    def get_meals_for_day(self, user_id: UUID, entry_date: date) -> List[DailySumConsumedMeal]:
        """Meal rows of one day in meal order"""
        rows = (
            self.db.query(DailySumConsumedMeal)
            .populate_existing()
            .filter(
                DailySumConsumedMeal.user_id == user_id,
                DailySumConsumedMeal.entry_date == entry_date,
            )
            .all()
        )
        order = {meal.value: index for index, meal in enumerate(MEAL_TYPE_ORDER)}
        return sorted(rows, key=lambda row: order.get(row.meal_type, len(order)))

    def get_daily_exercises(self, user_id: UUID, entry_date: date) -> Optional[DailySumExercises]:
        return (
            self.db.query(DailySumExercises)
            .populate_existing()
            .filter(
                DailySumExercises.user_id == user_id,
                DailySumExercises.entry_date == entry_date,
            )
            .first()
        )
