"""
Aggregate store models.

One row per grouping key. Rows are written only by the recompute engine
(domain.aggregation) through Core statements; everything else reads them.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Integer,
    Numeric,
    Text,
    TIMESTAMP,
    Uuid,
)
from sqlalchemy.sql import func

from domain.models.database import Base


class _ConsumedTotalsMixin:
    calories = Column(Integer, nullable=False, default=0)
    protein_g = Column(Numeric(14, 2), nullable=False, default=0)
    carbs_g = Column(Numeric(14, 2), nullable=False, default=0)
    fat_g = Column(Numeric(14, 2), nullable=False, default=0)
    fibre_g = Column(Numeric(14, 2), nullable=False, default=0)
    saturated_fat_g = Column(Numeric(14, 2), nullable=False, default=0)
    trans_fat_g = Column(Numeric(14, 2), nullable=False, default=0)
    sugar_g = Column(Numeric(14, 2), nullable=False, default=0)
    sodium_mg = Column(Integer, nullable=False, default=0)
    entry_count = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    last_recomputed_at = Column(TIMESTAMP(timezone=True))


_CONSUMED_NON_NEGATIVE = (
    "calories >= 0 AND sodium_mg >= 0 AND protein_g >= 0 AND carbs_g >= 0"
    " AND fat_g >= 0 AND fibre_g >= 0 AND saturated_fat_g >= 0"
    " AND trans_fat_g >= 0 AND sugar_g >= 0 AND entry_count >= 0"
)


class DailySumConsumed(_ConsumedTotalsMixin, Base):
    """Food totals per (user, day)"""

    __tablename__ = "daily_sum_consumed"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    entry_date = Column(Date, primary_key=True)

    __table_args__ = (
        CheckConstraint(_CONSUMED_NON_NEGATIVE, name="ck_daily_sum_consumed_nonneg"),
    )


class DailySumConsumedMeal(_ConsumedTotalsMixin, Base):
    """Food totals per (user, day, meal type)"""

    __tablename__ = "daily_sum_consumed_meal"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    entry_date = Column(Date, primary_key=True)
    meal_type = Column(Text, primary_key=True)

    __table_args__ = (
        CheckConstraint(
            _CONSUMED_NON_NEGATIVE, name="ck_daily_sum_consumed_meal_nonneg"
        ),
    )


class DailySumExercises(Base):
    """Exercise totals per (user, day)"""

    __tablename__ = "daily_sum_exercises"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    entry_date = Column(Date, primary_key=True)

    activity_count = Column(Integer, nullable=False, default=0)
    total_minutes = Column(Integer, nullable=False, default=0)
    total_distance_km = Column(Numeric(12, 4), nullable=False, default=0)
    cardio_count = Column(Integer, nullable=False, default=0)
    cardio_minutes = Column(Integer, nullable=False, default=0)
    cardio_distance_km = Column(Numeric(12, 4), nullable=False, default=0)
    strength_count = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    last_recomputed_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        CheckConstraint(
            "activity_count >= 0 AND total_minutes >= 0 AND total_distance_km >= 0"
            " AND cardio_count >= 0 AND cardio_minutes >= 0"
            " AND cardio_distance_km >= 0 AND strength_count >= 0",
            name="ck_daily_sum_exercises_nonneg",
        ),
    )
