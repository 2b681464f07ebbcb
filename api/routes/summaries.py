"""Daily summary routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging
from datetime import date
from uuid import UUID
from typing import List, Optional

from domain.enums import MealType
from domain.models import get_db_session
from domain.schemas.summary_schemas import (
    DailyConsumedResponse,
    DailyExerciseResponse,
    MealConsumedResponse,
    RecomputeRangeRequest,
    RecomputeRequest,
    RecomputeResponse,
)
from services.aggregate_service import AggregateService

router = APIRouter(prefix="/summaries", tags=["Summaries"])
logger = logging.getLogger("nutrilog.api.summaries")


@router.get("/consumed", response_model=DailyConsumedResponse)
def get_daily_consumed(
    user_id: UUID = Query(...),
    entry_date: date = Query(...),
    db: Session = Depends(get_db_session),
):
    """Food totals for a day. 404 when nothing is logged that day."""
    row = AggregateService.get_daily_consumed(db, user_id, entry_date)
    return DailyConsumedResponse.model_validate(row)


@router.get("/consumed/meals", response_model=List[MealConsumedResponse])
def get_meal_consumed(
    user_id: UUID = Query(...),
    entry_date: date = Query(...),
    meal_type: Optional[MealType] = Query(None),
    db: Session = Depends(get_db_session),
):
    """Per-meal food totals for a day, in meal order"""
    rows = AggregateService.get_meal_consumed(
        db, user_id, entry_date, meal_type.value if meal_type else None
    )
    return [MealConsumedResponse.model_validate(r) for r in rows]


@router.get("/exercise", response_model=DailyExerciseResponse)
def get_daily_exercise(
    user_id: UUID = Query(...),
    entry_date: date = Query(...),
    db: Session = Depends(get_db_session),
):
    row = AggregateService.get_daily_exercises(db, user_id, entry_date)
    return DailyExerciseResponse.model_validate(row)


@router.post("/recompute", response_model=RecomputeResponse)
def recompute(request: RecomputeRequest, db: Session = Depends(get_db_session)):
    """
    Re-derive summaries from the log rows.

    Use after writes that bypassed the API (bulk imports, manual SQL). Safe to
    repeat: the result depends only on the current entries.
    """
    keys, present = AggregateService.recompute(
        db,
        request.user_id,
        request.entry_date,
        request.meal_type.value if request.meal_type else None,
    )
    return RecomputeResponse(keys_recomputed=keys, rows_present=present)


@router.post("/recompute-range", response_model=RecomputeResponse)
def recompute_range(request: RecomputeRangeRequest, db: Session = Depends(get_db_session)):
    keys, present = AggregateService.recompute_range(
        db, request.user_id, request.start_date, request.end_date
    )
    return RecomputeResponse(keys_recomputed=keys, rows_present=present)
