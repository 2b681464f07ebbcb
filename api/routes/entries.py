"""Food and exercise log routes"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
import logging
from datetime import date
from uuid import UUID
from typing import List, Optional

from domain.enums import MealType
from domain.models import get_db_session
from domain.schemas.log_schemas import (
    CloneEntriesRequest,
    CloneEntriesResponse,
    ExerciseEntryCreate,
    ExerciseEntryResponse,
    ExerciseEntryUpdate,
    FoodEntryCreate,
    FoodEntryResponse,
    FoodEntryUpdate,
)
from services.log_service import LogService

router = APIRouter(prefix="/entries", tags=["Log Entries"])
logger = logging.getLogger("nutrilog.api.entries")


# ===== Food entries =====


@router.post("/food", response_model=FoodEntryResponse, status_code=status.HTTP_201_CREATED)
def add_food_entry(entry: FoodEntryCreate, db: Session = Depends(get_db_session)):
    """
    Log a food for a day and meal.

    With `food_id` the nutrients are computed from the food; give either a
    `unit` (g, ml, cup, ...) or a `serving_id`. Without `food_id` supply
    `item_name` and the nutrients yourself.
    """
    created = LogService.add_food_entry(db, entry)
    return FoodEntryResponse.model_validate(created)


@router.get("/food", response_model=List[FoodEntryResponse])
def list_food_entries(
    user_id: UUID = Query(...),
    entry_date: date = Query(...),
    meal_type: Optional[MealType] = Query(None),
    db: Session = Depends(get_db_session),
):
    entries = LogService.list_food_entries(
        db, user_id, entry_date, meal_type.value if meal_type else None
    )
    return [FoodEntryResponse.model_validate(e) for e in entries]


@router.patch("/food/{entry_id}", response_model=FoodEntryResponse)
def update_food_entry(
    entry_id: UUID, update: FoodEntryUpdate, db: Session = Depends(get_db_session)
):
    """Change quantity, serving, day or meal of an entry; summaries follow."""
    updated = LogService.update_food_entry(db, entry_id, update)
    return FoodEntryResponse.model_validate(updated)


@router.delete("/food/{entry_id}")
def delete_food_entry(entry_id: UUID, db: Session = Depends(get_db_session)):
    LogService.delete_food_entry(db, entry_id)
    return {"status": "ok", "removed": str(entry_id)}


# ===== Exercise entries =====


@router.post(
    "/exercise", response_model=ExerciseEntryResponse, status_code=status.HTTP_201_CREATED
)
def add_exercise_entry(entry: ExerciseEntryCreate, db: Session = Depends(get_db_session)):
    created = LogService.add_exercise_entry(db, entry)
    return ExerciseEntryResponse.model_validate(created)


@router.get("/exercise", response_model=List[ExerciseEntryResponse])
def list_exercise_entries(
    user_id: UUID = Query(...),
    entry_date: date = Query(...),
    db: Session = Depends(get_db_session),
):
    entries = LogService.list_exercise_entries(db, user_id, entry_date)
    return [ExerciseEntryResponse.model_validate(e) for e in entries]


@router.patch("/exercise/{entry_id}", response_model=ExerciseEntryResponse)
def update_exercise_entry(
    entry_id: UUID, update: ExerciseEntryUpdate, db: Session = Depends(get_db_session)
):
    updated = LogService.update_exercise_entry(db, entry_id, update)
    return ExerciseEntryResponse.model_validate(updated)


@router.delete("/exercise/{entry_id}")
def delete_exercise_entry(entry_id: UUID, db: Session = Depends(get_db_session)):
    LogService.delete_exercise_entry(db, entry_id)
    return {"status": "ok", "removed": str(entry_id)}


# ===== Cloning =====


@router.post("/clone", response_model=CloneEntriesResponse)
def clone_entries(request: CloneEntriesRequest, db: Session = Depends(get_db_session)):
    """
    Copy a day's food or exercise entries to another day.

    Optionally restrict to `entry_ids`, or (food only) to one `meal_type`.
    """
    cloned = LogService.clone_entries(db, request)
    return CloneEntriesResponse(
        entity_type=request.entity_type,
        source_date=request.source_date,
        target_date=request.target_date,
        cloned=cloned,
    )
