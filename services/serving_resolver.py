"""
Serving/unit resolution.

Turns a requested quantity, given either in a unit or as a count of a named
serving, into a scale factor against the food's canonical serving
(``serving_size`` x ``serving_unit``). Every caller that scales a food goes
through ``resolve``; nothing else does unit math.

Foods and servings are duck-typed: ORM rows and plain objects with the same
attributes both work.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple
from uuid import UUID

from app.exceptions import ServiceValidationError
from domain.enums import ResolutionPath, UnitClass

logger = logging.getLogger("nutrilog.servings")


# Factors into the base unit of each class (grams / millilitres)
WEIGHT_UNITS_IN_GRAMS = {
    "g": Decimal("1"),
    "kg": Decimal("1000"),
    "oz": Decimal("28.3495"),
    "lb": Decimal("453.592"),
}

VOLUME_UNITS_IN_ML = {
    "ml": Decimal("1"),
    "l": Decimal("1000"),
    "floz": Decimal("29.5735"),
    "cup": Decimal("240"),
    "tbsp": Decimal("15"),
    "tsp": Decimal("5"),
}

UNIT_ALIASES = {
    "gram": "g", "grams": "g", "gr": "g",
    "kilogram": "kg", "kilograms": "kg", "kgs": "kg",
    "ounce": "oz", "ounces": "oz",
    "pound": "lb", "pounds": "lb", "lbs": "lb",
    "milliliter": "ml", "millilitre": "ml", "milliliters": "ml", "millilitres": "ml",
    "liter": "l", "litre": "l", "liters": "l", "litres": "l",
    "fl oz": "floz", "fl_oz": "floz", "fl.oz": "floz",
    "cups": "cup",
    "tablespoon": "tbsp", "tablespoons": "tbsp", "tbs": "tbsp",
    "teaspoon": "tsp", "teaspoons": "tsp",
}


def normalize_unit(unit: Optional[str]) -> str:
    """Map common unit spellings to a canonical token."""
    token = (unit or "").strip().lower()
    return UNIT_ALIASES.get(token, token)


def unit_class(unit: Optional[str]) -> UnitClass:
    token = normalize_unit(unit)
    if token in WEIGHT_UNITS_IN_GRAMS:
        return UnitClass.WEIGHT
    if token in VOLUME_UNITS_IN_ML:
        return UnitClass.VOLUME
    return UnitClass.COUNT


def _factor(unit: str) -> Decimal:
    token = normalize_unit(unit)
    return WEIGHT_UNITS_IN_GRAMS.get(token) or VOLUME_UNITS_IN_ML.get(token) or Decimal("1")


def to_base_unit(amount: Decimal, unit: str) -> Decimal:
    """Express ``amount`` of ``unit`` in grams or millilitres (count units unchanged)"""
    return amount * _factor(unit)


def from_base_unit(amount: Decimal, unit: str) -> Decimal:
    """Inverse of ``to_base_unit``"""
    return amount / _factor(unit)


@dataclass(frozen=True)
class ResolvedServing:
    """Outcome of resolving a requested quantity against a food.

    ``base_amount`` is the requested amount in the food's canonical unit and
    ``scale_factor`` is ``base_amount / serving_size``.
    """

    base_amount: Decimal
    scale_factor: Decimal
    path: ResolutionPath
    serving_id: Optional[UUID] = None


def validate_quantity(quantity) -> Decimal:
    """Parse a requested quantity; it must be a finite number above zero."""
    try:
        value = Decimal(str(quantity))
    except (InvalidOperation, TypeError, ValueError):
        raise ServiceValidationError(
            f"Quantity must be a number, got {quantity!r}",
            details={"quantity": str(quantity)},
            code="INVALID_QUANTITY",
        )
    if not value.is_finite() or value <= 0:
        raise ServiceValidationError(
            f"Quantity must be greater than zero, got {quantity}",
            details={"quantity": str(quantity)},
            code="INVALID_QUANTITY",
        )
    return value


def _canonical_size(food) -> Decimal:
    try:
        size = Decimal(str(food.serving_size))
    except (InvalidOperation, TypeError, ValueError):
        size = Decimal("0")
    if not size.is_finite() or size <= 0:
        raise ServiceValidationError(
            f"Food {getattr(food, 'food_id', None)} has no usable serving size",
            code="INVALID_FOOD_SERVING",
        )
    return size


def find_serving(food, serving_id: Optional[UUID]):
    if serving_id is None:
        return None
    for serving in getattr(food, "servings", None) or ():
        if str(serving.serving_id) == str(serving_id):
            return serving
    return None


def _serving_amount(serving) -> Tuple[Optional[Decimal], Optional[str]]:
    """Amount of one serving in its own declared unit"""
    if serving.weight_g is not None:
        return Decimal(str(serving.weight_g)), "g"
    if serving.volume_ml is not None:
        return Decimal(str(serving.volume_ml)), "ml"
    return None, None


def resolve(food, quantity, unit: Optional[str] = None, serving_id: Optional[UUID] = None) -> ResolvedServing:
    """
    Resolve ``quantity`` (of ``unit``, or of the serving ``serving_id``) against ``food``.

    A matching named serving is self-describing: its own weight_g/volume_ml is
    the amount of one serving, whatever the food's canonical unit class.
    Without one, the raw quantity is converted into the food's canonical unit
    when both units share a class, and used as-is otherwise.

    Raises:
        ServiceValidationError: quantity is not a positive number, or the food
            has no usable canonical serving size
    """
    qty = validate_quantity(quantity)
    canonical_size = _canonical_size(food)
    food_unit = normalize_unit(food.serving_unit)

    serving = find_serving(food, serving_id)
    if serving is not None:
        amount, declared_unit = _serving_amount(serving)
        if amount is not None and amount > 0:
            amount_in_base = to_base_unit(qty * amount, declared_unit)
            base_amount = from_base_unit(amount_in_base, food_unit)
            return ResolvedServing(
                base_amount=base_amount,
                scale_factor=base_amount / canonical_size,
                path=ResolutionPath.SERVING,
                serving_id=serving.serving_id,
            )
        logger.warning("Serving %s has no weight or volume; using raw quantity", serving_id)
    elif serving_id is not None:
        logger.info(
            "Serving %s not found for food %s; using raw quantity",
            serving_id,
            getattr(food, "food_id", None),
        )

    requested_unit = normalize_unit(unit) or food_unit
    requested_class = unit_class(requested_unit)
    if requested_class != UnitClass.COUNT and requested_class == unit_class(food_unit):
        base_amount = from_base_unit(to_base_unit(qty, requested_unit), food_unit)
    else:
        base_amount = qty

    return ResolvedServing(
        base_amount=base_amount,
        scale_factor=base_amount / canonical_size,
        path=ResolutionPath.RAW,
    )


def default_serving(food) -> Tuple[Decimal, str, object]:
    """
    Quantity, unit label and serving record a food is offered with by default.

    The ``is_default`` serving with the lowest sort order wins (1 x that
    serving); without one, the canonical size and unit are used and the
    serving record is None.
    """
    defaults: Iterable = [s for s in (getattr(food, "servings", None) or ()) if s.is_default]
    ordered = sorted(defaults, key=lambda s: (s.sort_order or 0, str(s.serving_id)))
    if ordered:
        chosen = ordered[0]
        return Decimal("1"), chosen.serving_name, chosen
    return Decimal(str(food.serving_size)), food.serving_unit, None
