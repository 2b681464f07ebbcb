"""Food catalogue routes"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
import logging
from decimal import Decimal
from uuid import UUID
from typing import Optional

from domain.models import get_db_session
from domain.schemas.food_schemas import (
    FoodCreate,
    FoodResponse,
    FoodUpdate,
    NutrientPreviewResponse,
)
from services.food_service import FoodService

router = APIRouter(prefix="/foods", tags=["Foods"])
logger = logging.getLogger("nutrilog.api.foods")


@router.post("", response_model=FoodResponse, status_code=status.HTTP_201_CREATED)
def create_food(food: FoodCreate, db: Session = Depends(get_db_session)):
    """Add a food; nutrients are given per canonical serving"""
    created = FoodService.create_food(db, food)
    return FoodResponse.model_validate(created)


@router.get("/{food_id}", response_model=FoodResponse)
def get_food(food_id: UUID, db: Session = Depends(get_db_session)):
    return FoodResponse.model_validate(FoodService.get_food(db, food_id))


@router.patch("/{food_id}", response_model=FoodResponse)
def update_food(food_id: UUID, update: FoodUpdate, db: Session = Depends(get_db_session)):
    """
    Edit a food. Sending `servings` replaces its named servings.

    Entries already logged keep the nutrients they were logged with.
    """
    updated = FoodService.update_food(db, food_id, update)
    return FoodResponse.model_validate(updated)


@router.delete("/{food_id}")
def delete_food(food_id: UUID, db: Session = Depends(get_db_session)):
    """Delete a food. Entries already logged keep their nutrients."""
    FoodService.delete_food(db, food_id)
    return {"status": "ok", "removed": str(food_id)}


@router.get("/{food_id}/nutrients", response_model=NutrientPreviewResponse)
def preview_nutrients(
    food_id: UUID,
    quantity: Decimal = Query(..., description="Amount in `unit`, or number of servings"),
    unit: Optional[str] = Query(None, description="Unit of the quantity (g, ml, cup, ...)"),
    serving_id: Optional[UUID] = Query(None, description="Named serving of the food"),
    db: Session = Depends(get_db_session),
):
    """
    Nutrients a quantity of this food would be logged with.

    Examples:
    - 150 g of a food defined per 100 g: `?quantity=150&unit=g`
    - Two slices: `?quantity=2&serving_id=<slice serving>`
    """
    return FoodService.preview_nutrients(db, food_id, quantity, unit, serving_id)
