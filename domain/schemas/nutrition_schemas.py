from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class NutrientVector(BaseModel):
    """Nutrients for one logged quantity.

    None means "unknown" (the food does not declare that nutrient) and is
    kept distinct from zero.
    """

    calories_kcal: Decimal
    protein_g: Optional[Decimal] = None
    carbs_g: Optional[Decimal] = None
    fat_g: Optional[Decimal] = None
    fiber_g: Optional[Decimal] = None
    saturated_fat_g: Optional[Decimal] = None
    trans_fat_g: Optional[Decimal] = None
    sugar_g: Optional[Decimal] = None
    sodium_mg: Optional[Decimal] = None

    model_config = {"from_attributes": True, "frozen": True}
