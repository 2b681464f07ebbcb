"""
Aggregate service - reads of the daily summaries and explicit recompute.

The write path keeps summaries current on its own (domain.models.triggers).
The recompute operations here are for repair and backfill after writes that
bypassed the session, and run the very same per-key recompute.
"""

from typing import Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
import logging
import uuid
from datetime import date

from app.config import settings
from app.exceptions import NotFoundError, ServiceValidationError
from domain import aggregation
from domain.aggregation import GroupingKey, PendingKey
from domain.models import DailySumConsumed, DailySumConsumedMeal, DailySumExercises
from repositories.aggregate_repository import AggregateRepository

logger = logging.getLogger("nutrilog.aggregates")


class AggregateService:
    # ===== Reads =====

    @staticmethod
    def get_daily_consumed(db: Session, user_id: uuid.UUID, entry_date: date) -> DailySumConsumed:
        row = AggregateRepository(db).get_daily_consumed(user_id, entry_date)
        if not row:
            raise NotFoundError(
                "No data for this key",
                details={"user_id": str(user_id), "entry_date": entry_date.isoformat()},
            )
        return row

    @staticmethod
    def get_meal_consumed(
        db: Session, user_id: uuid.UUID, entry_date: date, meal_type: Optional[str] = None
    ) -> List[DailySumConsumedMeal]:
        """
        Meal rows of a day. With ``meal_type`` only that meal, and a missing
        row is a NotFoundError; without it, a day with no meals is an empty list.
        """
        repo = AggregateRepository(db)
        if meal_type is None:
            return repo.get_meals_for_day(user_id, entry_date)
        row = repo.get_meal_consumed(user_id, entry_date, meal_type)
        if not row:
            raise NotFoundError(
                "No data for this key",
                details={
                    "user_id": str(user_id),
                    "entry_date": entry_date.isoformat(),
                    "meal_type": meal_type,
                },
            )
        return [row]

    @staticmethod
    def get_daily_exercises(db: Session, user_id: uuid.UUID, entry_date: date) -> DailySumExercises:
        row = AggregateRepository(db).get_daily_exercises(user_id, entry_date)
        if not row:
            raise NotFoundError(
                "No data for this key",
                details={"user_id": str(user_id), "entry_date": entry_date.isoformat()},
            )
        return row

    # ===== Recompute =====

    @staticmethod
    def _run(db: Session, pending: Iterable[PendingKey]) -> Tuple[int, int]:
        """Recompute each key in lock order and commit; returns (keys, rows present)"""
        ordered = sorted(set(pending), key=lambda item: (item[0].name,) + item[1].sort_token())
        try:
            connection = db.connection()
            present = 0
            for target, key in ordered:
                if aggregation.recompute(connection, target, key) is not None:
                    present += 1
            db.commit()
            return len(ordered), present
        except Exception:
            db.rollback()
            logger.exception("Error recomputing %d aggregate key(s)", len(ordered))
            raise

    @staticmethod
    def recompute(
        db: Session, user_id: uuid.UUID, entry_date: date, meal_type: Optional[str] = None
    ) -> Tuple[int, int]:
        """
        Re-derive the summaries of one key from the log rows.

        With ``meal_type`` only that meal row is recomputed. Without it the
        day's consumed and exercise rows are recomputed together with every
        meal row that has entries or a stored row that day.
        """
        if meal_type is not None:
            pending = [
                (aggregation.MEAL_CONSUMED, GroupingKey(user_id, entry_date, meal_type))
            ]
        else:
            day_key = GroupingKey(user_id, entry_date)
            meal_keys = aggregation.discover_keys(
                db.connection(), aggregation.MEAL_CONSUMED, user_id, entry_date, entry_date
            )
            pending = [
                (aggregation.DAILY_CONSUMED, day_key),
                (aggregation.DAILY_EXERCISES, day_key),
            ] + [(aggregation.MEAL_CONSUMED, key) for key in meal_keys]

        keys, present = AggregateService._run(db, pending)
        logger.info(
            "Recomputed %d key(s) for user %s on %s (%d row(s) present)",
            keys,
            user_id,
            entry_date,
            present,
        )
        return keys, present

    @staticmethod
    def recompute_range(
        db: Session, user_id: uuid.UUID, start_date: date, end_date: date
    ) -> Tuple[int, int]:
        """Recompute every summary of a user between two dates (inclusive)"""
        if end_date < start_date:
            raise ServiceValidationError(
                "end_date must not be before start_date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )
        days = (end_date - start_date).days + 1
        if days > settings.recompute_range_max_days:
            raise ServiceValidationError(
                f"Range of {days} days exceeds the limit of {settings.recompute_range_max_days}",
                details={"days": days, "max_days": settings.recompute_range_max_days},
                code="RANGE_TOO_LARGE",
            )

        connection = db.connection()
        pending = [
            (target, key)
            for target in aggregation.TARGETS
            for key in aggregation.discover_keys(connection, target, user_id, start_date, end_date)
        ]
        keys, present = AggregateService._run(db, pending)
        logger.info(
            "Recomputed %d key(s) for user %s between %s and %s",
            keys,
            user_id,
            start_date,
            end_date,
        )
        return keys, present

    @staticmethod
    def backfill(db: Session, user_id: Optional[uuid.UUID] = None) -> Tuple[int, int]:
        """Recompute every summary key that has log rows or a stored row"""
        connection = db.connection()
        pending = [
            (target, key)
            for target in aggregation.TARGETS
            for key in aggregation.discover_keys(connection, target, user_id)
        ]
        keys, present = AggregateService._run(db, pending)
        logger.info("Backfill recomputed %d key(s), %d row(s) present", keys, present)
        return keys, present
