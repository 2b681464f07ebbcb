from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal

from domain.enums import MealType


class DailyConsumedResponse(BaseModel):
    """Food totals for one (user, day)"""

    user_id: UUID
    entry_date: date
    calories: int
    protein_g: Decimal
    carbs_g: Decimal
    fat_g: Decimal
    fibre_g: Decimal
    saturated_fat_g: Decimal
    trans_fat_g: Decimal
    sugar_g: Decimal
    sodium_mg: int
    entry_count: int
    last_recomputed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MealConsumedResponse(DailyConsumedResponse):
    """Food totals for one (user, day, meal type)"""

    meal_type: MealType


class DailyExerciseResponse(BaseModel):
    """Exercise totals for one (user, day)"""

    user_id: UUID
    entry_date: date
    activity_count: int
    total_minutes: int
    total_distance_km: Decimal
    cardio_count: int
    cardio_minutes: int
    cardio_distance_km: Decimal
    strength_count: int
    last_recomputed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RecomputeRequest(BaseModel):
    """Repair the summaries of one key; without meal_type the whole day is repaired"""

    user_id: UUID
    entry_date: date
    meal_type: Optional[MealType] = None


class RecomputeRangeRequest(BaseModel):
    user_id: UUID
    start_date: date
    end_date: date


class RecomputeResponse(BaseModel):
    keys_recomputed: int = Field(..., description="Number of aggregate keys re-derived")
    rows_present: int = Field(..., description="Keys that still have an aggregate row")
