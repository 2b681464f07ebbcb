"""
Log store models: food entries and exercise entries.

Entries are frozen snapshots. A food entry keeps the nutrients computed when it
was logged, so later edits to the food never change history.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    TIMESTAMP,
    Uuid,
)
from sqlalchemy.orm import mapped_column
from sqlalchemy.sql import func
import uuid

from domain.enums import ExerciseCategory, MealType
from domain.models.database import Base


def _in_list(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class FoodEntry(Base):
    """A logged food quantity with its nutrient snapshot"""

    __tablename__ = "calorie_entry"

    entry_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Grouping key columns keep their previous value on change so that an
    # edit can recompute the summary it moved away from.
    user_id = mapped_column(Uuid(as_uuid=True), nullable=False, active_history=True)
    entry_date = mapped_column(Date, nullable=False, active_history=True)
    meal_type = mapped_column(Text, nullable=False, active_history=True)

    item_name = Column(Text, nullable=False)
    food_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("food_master.food_id", ondelete="SET NULL"),
    )
    serving_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("food_serving.serving_id", ondelete="SET NULL"),
    )
    quantity = Column(Numeric, nullable=False)
    unit = Column(Text, nullable=False)

    calories_kcal = Column(Numeric, nullable=False, default=0)
    protein_g = Column(Numeric)
    carbs_g = Column(Numeric)
    fat_g = Column(Numeric)
    fiber_g = Column(Numeric)
    saturated_fat_g = Column(Numeric)
    trans_fat_g = Column(Numeric)
    sugar_g = Column(Numeric)
    sodium_mg = Column(Numeric)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_calorie_entry_user_date", "user_id", "entry_date"),
        Index("ix_calorie_entry_user_date_meal", "user_id", "entry_date", "meal_type"),
        CheckConstraint("quantity > 0", name="ck_calorie_entry_quantity_pos"),
        CheckConstraint(_in_list("meal_type", MealType), name="ck_calorie_entry_meal_type"),
        CheckConstraint(
            "calories_kcal >= 0"
            " AND COALESCE(protein_g, 0) >= 0"
            " AND COALESCE(carbs_g, 0) >= 0"
            " AND COALESCE(fat_g, 0) >= 0"
            " AND COALESCE(fiber_g, 0) >= 0"
            " AND COALESCE(saturated_fat_g, 0) >= 0"
            " AND COALESCE(trans_fat_g, 0) >= 0"
            " AND COALESCE(sugar_g, 0) >= 0"
            " AND COALESCE(sodium_mg, 0) >= 0",
            name="ck_calorie_entry_nutrients_nonneg",
        ),
    )

    def __repr__(self):
        return (
            f"<FoodEntry {self.entry_id} {self.entry_date} {self.meal_type} "
            f"{self.item_name!r} {self.calories_kcal} kcal>"
        )


class ExerciseEntry(Base):
    """A logged activity"""

    __tablename__ = "exercise_log"

    entry_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = mapped_column(Uuid(as_uuid=True), nullable=False, active_history=True)
    entry_date = mapped_column(Date, nullable=False, active_history=True)

    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False, default=ExerciseCategory.OTHER.value)
    minutes = Column(Integer)
    distance_km = Column(Numeric)
    notes = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_exercise_log_user_date", "user_id", "entry_date"),
        CheckConstraint(_in_list("category", ExerciseCategory), name="ck_exercise_log_category"),
        CheckConstraint(
            "minutes IS NULL OR (minutes >= 0 AND minutes <= 999)",
            name="ck_exercise_log_minutes_range",
        ),
        CheckConstraint(
            "distance_km IS NULL OR (distance_km >= 0 AND distance_km <= 999)",
            name="ck_exercise_log_distance_range",
        ),
    )

    def __repr__(self):
        return f"<ExerciseEntry {self.entry_id} {self.entry_date} {self.name!r}>"
