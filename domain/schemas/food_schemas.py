from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from domain.enums import ResolutionPath
from domain.schemas.nutrition_schemas import NutrientVector


class ServingCreate(BaseModel):
    """Schema for a named serving; exactly one of weight_g / volume_ml is given"""

    serving_name: str = Field(..., min_length=1, description="e.g. '1 slice', '1 cup'")
    weight_g: Optional[Decimal] = Field(None, gt=0)
    volume_ml: Optional[Decimal] = Field(None, gt=0)
    sort_order: int = Field(default=0, ge=0)
    is_default: bool = False

    @model_validator(mode="after")
    def check_single_measure(self):
        if (self.weight_g is None) == (self.volume_ml is None):
            raise ValueError("Provide exactly one of weight_g or volume_ml")
        return self


class ServingResponse(BaseModel):
    serving_id: UUID
    serving_name: str
    weight_g: Optional[Decimal] = None
    volume_ml: Optional[Decimal] = None
    sort_order: int
    is_default: bool

    model_config = {"from_attributes": True}


class FoodCreate(BaseModel):
    """Schema for adding a food; nutrients are per canonical serving"""

    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    serving_size: Decimal = Field(..., gt=0, description="Canonical serving size")
    serving_unit: str = Field(..., min_length=1, description="Canonical unit (g, ml, ...)")
    calories_kcal: Decimal = Field(..., ge=0)
    protein_g: Optional[Decimal] = Field(None, ge=0)
    carbs_g: Optional[Decimal] = Field(None, ge=0)
    fat_g: Optional[Decimal] = Field(None, ge=0)
    fiber_g: Optional[Decimal] = Field(None, ge=0)
    saturated_fat_g: Optional[Decimal] = Field(None, ge=0)
    trans_fat_g: Optional[Decimal] = Field(None, ge=0)
    sugar_g: Optional[Decimal] = Field(None, ge=0)
    sodium_mg: Optional[Decimal] = Field(None, ge=0)
    servings: List[ServingCreate] = Field(default_factory=list)


class FoodUpdate(BaseModel):
    """
    Partial update of a food. Only the fields sent are changed.

    ``servings``, when given, replaces the whole list of named servings.
    Entries already logged keep their nutrient snapshot.
    """

    name: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = None
    serving_size: Optional[Decimal] = Field(None, gt=0)
    serving_unit: Optional[str] = Field(None, min_length=1)
    calories_kcal: Optional[Decimal] = Field(None, ge=0)
    protein_g: Optional[Decimal] = Field(None, ge=0)
    carbs_g: Optional[Decimal] = Field(None, ge=0)
    fat_g: Optional[Decimal] = Field(None, ge=0)
    fiber_g: Optional[Decimal] = Field(None, ge=0)
    saturated_fat_g: Optional[Decimal] = Field(None, ge=0)
    trans_fat_g: Optional[Decimal] = Field(None, ge=0)
    sugar_g: Optional[Decimal] = Field(None, ge=0)
    sodium_mg: Optional[Decimal] = Field(None, ge=0)
    servings: Optional[List[ServingCreate]] = None

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        for field in ("name", "serving_size", "serving_unit", "calories_kcal", "servings"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class FoodResponse(BaseModel):
    food_id: UUID
    name: str
    brand: Optional[str] = None
    serving_size: Decimal
    serving_unit: str
    calories_kcal: Decimal
    protein_g: Optional[Decimal] = None
    carbs_g: Optional[Decimal] = None
    fat_g: Optional[Decimal] = None
    fiber_g: Optional[Decimal] = None
    saturated_fat_g: Optional[Decimal] = None
    trans_fat_g: Optional[Decimal] = None
    sugar_g: Optional[Decimal] = None
    sodium_mg: Optional[Decimal] = None
    servings: List[ServingResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NutrientPreviewResponse(BaseModel):
    """Nutrients a quantity of a food would be logged with"""

    food_id: UUID
    quantity: Decimal
    unit: Optional[str] = None
    serving_id: Optional[UUID] = None
    path: ResolutionPath
    base_amount: Decimal
    scale_factor: Decimal
    nutrients: NutrientVector
