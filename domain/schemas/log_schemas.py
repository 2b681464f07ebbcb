"""Schemas for food and exercise log entries"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal

from domain.enums import CloneEntityType, ExerciseCategory, MealType


class FoodEntryCreate(BaseModel):
    """
    Schema for logging a food.

    With ``food_id`` the nutrients are computed from the food. Without it the
    entry is a manual one and carries its own ``item_name`` and nutrients.
    """

    user_id: UUID
    entry_date: date
    meal_type: MealType
    food_id: Optional[UUID] = None
    serving_id: Optional[UUID] = Field(
        None, description="Named serving of the food; quantity then counts servings"
    )
    quantity: Decimal = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    item_name: Optional[str] = None

    calories_kcal: Optional[Decimal] = Field(None, ge=0)
    protein_g: Optional[Decimal] = Field(None, ge=0)
    carbs_g: Optional[Decimal] = Field(None, ge=0)
    fat_g: Optional[Decimal] = Field(None, ge=0)
    fiber_g: Optional[Decimal] = Field(None, ge=0)
    saturated_fat_g: Optional[Decimal] = Field(None, ge=0)
    trans_fat_g: Optional[Decimal] = Field(None, ge=0)
    sugar_g: Optional[Decimal] = Field(None, ge=0)
    sodium_mg: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_manual_entry(self):
        if self.food_id is None:
            if not self.item_name:
                raise ValueError("item_name is required when food_id is not given")
            if self.calories_kcal is None:
                raise ValueError("calories_kcal is required when food_id is not given")
        return self


class FoodEntryUpdate(BaseModel):
    """Partial update of a food entry; omitted fields are left unchanged"""

    entry_date: Optional[date] = None
    meal_type: Optional[MealType] = None
    item_name: Optional[str] = Field(None, min_length=1)
    quantity: Optional[Decimal] = Field(None, gt=0)
    unit: Optional[str] = Field(None, min_length=1)
    serving_id: Optional[UUID] = None

    # Only honoured for manual entries (no food_id)
    calories_kcal: Optional[Decimal] = Field(None, ge=0)
    protein_g: Optional[Decimal] = Field(None, ge=0)
    carbs_g: Optional[Decimal] = Field(None, ge=0)
    fat_g: Optional[Decimal] = Field(None, ge=0)
    fiber_g: Optional[Decimal] = Field(None, ge=0)
    saturated_fat_g: Optional[Decimal] = Field(None, ge=0)
    trans_fat_g: Optional[Decimal] = Field(None, ge=0)
    sugar_g: Optional[Decimal] = Field(None, ge=0)
    sodium_mg: Optional[Decimal] = Field(None, ge=0)


class FoodEntryResponse(BaseModel):
    entry_id: UUID
    user_id: UUID
    entry_date: date
    meal_type: MealType
    item_name: str
    food_id: Optional[UUID] = None
    serving_id: Optional[UUID] = None
    quantity: Decimal
    unit: str
    calories_kcal: Decimal
    protein_g: Optional[Decimal] = None
    carbs_g: Optional[Decimal] = None
    fat_g: Optional[Decimal] = None
    fiber_g: Optional[Decimal] = None
    saturated_fat_g: Optional[Decimal] = None
    trans_fat_g: Optional[Decimal] = None
    sugar_g: Optional[Decimal] = None
    sodium_mg: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ExerciseEntryCreate(BaseModel):
    user_id: UUID
    entry_date: date
    name: str = Field(..., min_length=1, max_length=30)
    category: ExerciseCategory = ExerciseCategory.OTHER
    minutes: Optional[int] = Field(None, ge=0, le=999, description="Whole minutes")
    distance_km: Optional[Decimal] = Field(None, ge=0, le=999)
    notes: Optional[str] = Field(None, max_length=200)


class ExerciseEntryUpdate(BaseModel):
    entry_date: Optional[date] = None
    name: Optional[str] = Field(None, min_length=1, max_length=30)
    category: Optional[ExerciseCategory] = None
    minutes: Optional[int] = Field(None, ge=0, le=999, description="Whole minutes")
    distance_km: Optional[Decimal] = Field(None, ge=0, le=999)
    notes: Optional[str] = Field(None, max_length=200)


class ExerciseEntryResponse(BaseModel):
    entry_id: UUID
    user_id: UUID
    entry_date: date
    name: str
    category: ExerciseCategory
    minutes: Optional[int] = None
    distance_km: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CloneEntriesRequest(BaseModel):
    """Copy entries of one day to another day"""

    entity_type: CloneEntityType
    user_id: UUID
    source_date: date
    target_date: date
    entry_ids: Optional[List[UUID]] = Field(
        None, description="Clone only these entries (default: the whole day)"
    )
    meal_type: Optional[MealType] = Field(
        None, description="Food entries only: restrict to one meal"
    )


class CloneEntriesResponse(BaseModel):
    entity_type: CloneEntityType
    source_date: date
    target_date: date
    cloned: int
