"""
Nutrient computation.

Pure functions: scale a food's per-serving nutrients by a resolved serving and
round the result the way entries are stored. ``nutrients_for`` is the one call
every write path, preview and bundle total goes through.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple
from uuid import UUID

from app.exceptions import ServiceValidationError
from domain.models.food import NUTRIENT_FIELDS
from domain.schemas.nutrition_schemas import NutrientVector
from services.serving_resolver import ResolvedServing, resolve

WHOLE_NUMBER_FIELDS = frozenset({"calories_kcal", "sodium_mg"})

_WHOLE = Decimal("1")
_HUNDREDTHS = Decimal("0.01")


def round_nutrient(field: str, value) -> Decimal:
    """Clamp to zero, then round half-up to the field's precision"""
    amount = Decimal(str(value))
    if amount < 0:
        amount = Decimal("0")
    step = _WHOLE if field in WHOLE_NUMBER_FIELDS else _HUNDREDTHS
    return amount.quantize(step, rounding=ROUND_HALF_UP)


def compute_nutrients(food, resolved: ResolvedServing) -> NutrientVector:
    """Nutrients of ``food`` scaled by ``resolved.scale_factor``.

    A nutrient the food does not declare stays None.
    """
    if food.calories_kcal is None:
        raise ServiceValidationError(
            f"Food {getattr(food, 'food_id', None)} has no calorie value",
            code="INVALID_FOOD_NUTRIENTS",
        )

    values = {}
    for field in NUTRIENT_FIELDS:
        per_serving = getattr(food, field, None)
        if per_serving is None:
            values[field] = None
            continue
        values[field] = round_nutrient(
            field, Decimal(str(per_serving)) * resolved.scale_factor
        )
    return NutrientVector(**values)


def nutrients_for(
    food, quantity, unit: Optional[str] = None, serving_id: Optional[UUID] = None
) -> Tuple[ResolvedServing, NutrientVector]:
    resolved = resolve(food, quantity, unit, serving_id)
    return resolved, compute_nutrients(food, resolved)


def sum_nutrients(vectors: Iterable[NutrientVector]) -> NutrientVector:
    """Field-wise total; a field stays None only if it is None everywhere"""
    totals = {field: None for field in NUTRIENT_FIELDS}
    totals["calories_kcal"] = Decimal("0")
    for vector in vectors:
        for field in NUTRIENT_FIELDS:
            value = getattr(vector, field)
            if value is None:
                continue
            totals[field] = (totals[field] or Decimal("0")) + value
    return NutrientVector(**totals)
