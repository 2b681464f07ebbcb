from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal

from domain.enums import MealType
from domain.schemas.log_schemas import FoodEntryResponse


class BundleItemCreate(BaseModel):
    food_id: UUID
    serving_id: Optional[UUID] = None
    quantity: Decimal = Field(..., gt=0)
    unit: str = Field(..., min_length=1)


class BundleCreate(BaseModel):
    """Schema for saving a bundle; items are logged in the given order"""

    user_id: UUID
    name: str = Field(..., min_length=1, max_length=40)
    items: List[BundleItemCreate] = Field(..., min_length=1)


class BundleItemResponse(BaseModel):
    bundle_item_id: UUID
    food_id: Optional[UUID] = None
    serving_id: Optional[UUID] = None
    item_name: Optional[str] = None
    quantity: Decimal
    unit: str
    order_index: int

    model_config = {"from_attributes": True}


class BundleTotals(BaseModel):
    """Nutrients the bundle would add if logged now"""

    calories_kcal: Decimal = Decimal("0")
    protein_g: Decimal = Decimal("0")
    carbs_g: Decimal = Decimal("0")
    fat_g: Decimal = Decimal("0")
    fiber_g: Decimal = Decimal("0")


class BundleResponse(BaseModel):
    bundle_id: UUID
    user_id: UUID
    name: str
    items: List[BundleItemResponse] = Field(default_factory=list)
    totals: Optional[BundleTotals] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LogBundleRequest(BaseModel):
    entry_date: date
    meal_type: MealType


class LogBundleResponse(BaseModel):
    bundle_id: UUID
    entries: List[FoodEntryResponse]
