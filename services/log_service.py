from typing import Dict, List, Optional
from sqlalchemy.orm import Session
import logging
import uuid
from datetime import date

from domain.enums import CloneEntityType
from domain.models import ExerciseEntry, FoodDefinition, FoodEntry, NUTRIENT_FIELDS
from domain.schemas.log_schemas import (
    CloneEntriesRequest,
    ExerciseEntryCreate,
    ExerciseEntryUpdate,
    FoodEntryCreate,
    FoodEntryUpdate,
)
from repositories.food_repository import FoodRepository
from repositories.log_entry_repository import (
    ExerciseEntryRepository,
    FoodEntryRepository,
)
from services.nutrition_math import nutrients_for, round_nutrient
from services.serving_resolver import validate_quantity
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("nutrilog.log")

_SNAPSHOT_FIELDS = ("item_name", "food_id", "serving_id", "quantity", "unit") + NUTRIENT_FIELDS


def build_food_entry(
    food: FoodDefinition,
    user_id: uuid.UUID,
    entry_date: date,
    meal_type: str,
    quantity,
    unit: str,
    serving_id: Optional[uuid.UUID] = None,
    item_name: Optional[str] = None,
) -> FoodEntry:
    """
    Unsaved food entry with nutrients computed from ``food``.

    Raises ServiceValidationError for a bad quantity before anything is
    attached to a session.
    """
    resolved, nutrients = nutrients_for(food, quantity, unit, serving_id)
    return FoodEntry(
        user_id=user_id,
        entry_date=entry_date,
        meal_type=meal_type,
        item_name=item_name or food.name,
        food_id=food.food_id,
        serving_id=resolved.serving_id,
        quantity=validate_quantity(quantity),
        unit=unit,
        **nutrients.model_dump(),
    )


def _manual_nutrients(source) -> Dict[str, object]:
    values = {}
    for field in NUTRIENT_FIELDS:
        value = getattr(source, field, None)
        values[field] = round_nutrient(field, value) if value is not None else None
    return values


class LogService:
    # ===== Food entries =====

    @staticmethod
    def list_food_entries(
        db: Session, user_id: uuid.UUID, entry_date: date, meal_type: Optional[str] = None
    ) -> List[FoodEntry]:
        return FoodEntryRepository(db).get_for_day(user_id, entry_date, meal_type)

    @staticmethod
    def get_food_entry(db: Session, entry_id: uuid.UUID) -> FoodEntry:
        entry = FoodEntryRepository(db).get_by_id(entry_id)
        if not entry:
            raise NotFoundError(f"Food entry not found: {entry_id}")
        return entry

    @staticmethod
    def add_food_entry(db: Session, entry_in: FoodEntryCreate) -> FoodEntry:
        """
        Log a food.

        With a food_id the nutrient snapshot comes from the resolver; a named
        serving that does not belong to the food falls back to the raw
        quantity. Without a food_id the caller's nutrients are stored as given
        (rounded). The daily and per-meal summaries are updated in the same
        transaction.

        Raises:
            NotFoundError: food_id does not exist
            ServiceValidationError: quantity is not a positive number, or
                nutrients were given together with a food_id
        """
        if entry_in.food_id is not None:
            supplied = sorted(f for f in NUTRIENT_FIELDS if getattr(entry_in, f) is not None)
            if supplied:
                raise ServiceValidationError(
                    "Nutrients of a food-based entry are computed from the food",
                    details={"fields": supplied},
                )
            food = FoodRepository(db).get_by_id(entry_in.food_id)
            if not food:
                raise NotFoundError(f"Food not found: {entry_in.food_id}")
            entry = build_food_entry(
                food,
                user_id=entry_in.user_id,
                entry_date=entry_in.entry_date,
                meal_type=entry_in.meal_type.value,
                quantity=entry_in.quantity,
                unit=entry_in.unit,
                serving_id=entry_in.serving_id,
                item_name=entry_in.item_name,
            )
        else:
            entry = FoodEntry(
                user_id=entry_in.user_id,
                entry_date=entry_in.entry_date,
                meal_type=entry_in.meal_type.value,
                item_name=entry_in.item_name,
                quantity=validate_quantity(entry_in.quantity),
                unit=entry_in.unit,
                **_manual_nutrients(entry_in),
            )

        try:
            entry = FoodEntryRepository(db).create(entry)
            logger.info(
                "Logged %s kcal (%s) for user %s on %s/%s",
                entry.calories_kcal,
                entry.item_name,
                entry.user_id,
                entry.entry_date,
                entry.meal_type,
            )
            return entry
        except Exception:
            db.rollback()
            logger.exception("Error logging food entry for user %s", entry_in.user_id)
            raise

    @staticmethod
    def update_food_entry(
        db: Session, entry_id: uuid.UUID, update: FoodEntryUpdate
    ) -> FoodEntry:
        """
        Apply a partial update to a food entry.

        Changing quantity, unit or serving of a food-based entry recomputes its
        snapshot from the current food. Moving the entry to another day or
        meal refreshes both the old and the new summaries.

        Raises:
            NotFoundError: entry (or, when rescaling, its food) does not exist
            ServiceValidationError: nutrients given for a food-based entry, or
                an invalid quantity
        """
        entry = LogService.get_food_entry(db, entry_id)
        changes = update.model_dump(exclude_unset=True)

        nutrient_changes = {k: v for k, v in changes.items() if k in NUTRIENT_FIELDS}
        if nutrient_changes and entry.food_id is not None:
            raise ServiceValidationError(
                "Nutrients of a food-based entry are computed from the food",
                details={"fields": sorted(nutrient_changes)},
            )

        rescale = any(k in changes for k in ("quantity", "unit", "serving_id"))
        if rescale and entry.food_id is not None:
            food = FoodRepository(db).get_by_id(entry.food_id)
            if not food:
                raise NotFoundError(
                    f"Food {entry.food_id} no longer exists; entry cannot be rescaled"
                )
            quantity = changes.get("quantity", entry.quantity)
            unit = changes.get("unit", entry.unit)
            serving_id = changes.get("serving_id", entry.serving_id)
            resolved, nutrients = nutrients_for(food, quantity, unit, serving_id)
            entry.quantity = validate_quantity(quantity)
            entry.unit = unit
            entry.serving_id = resolved.serving_id
            for field, value in nutrients.model_dump().items():
                setattr(entry, field, value)
        elif rescale:
            if changes.get("serving_id") is not None:
                raise ServiceValidationError(
                    "A manual entry has no food, so it cannot use a named serving",
                    details={"serving_id": str(changes["serving_id"])},
                )
            if "quantity" in changes:
                entry.quantity = validate_quantity(changes["quantity"])
            if "unit" in changes:
                entry.unit = changes["unit"]

        for field, value in nutrient_changes.items():
            if field == "calories_kcal" and value is None:
                continue
            setattr(entry, field, round_nutrient(field, value) if value is not None else None)

        if changes.get("entry_date") is not None:
            entry.entry_date = changes["entry_date"]
        if changes.get("meal_type") is not None:
            entry.meal_type = changes["meal_type"].value
        if changes.get("item_name"):
            entry.item_name = changes["item_name"]

        try:
            return FoodEntryRepository(db).update(entry)
        except Exception:
            db.rollback()
            logger.exception("Error updating food entry %s", entry_id)
            raise

    @staticmethod
    def delete_food_entry(db: Session, entry_id: uuid.UUID) -> None:
        repo = FoodEntryRepository(db)
        try:
            if not repo.delete(entry_id):
                raise NotFoundError(f"Food entry not found: {entry_id}")
            logger.info("Deleted food entry %s", entry_id)
        except NotFoundError:
            raise
        except Exception:
            db.rollback()
            logger.exception("Error deleting food entry %s", entry_id)
            raise

    # ===== Exercise entries =====

    @staticmethod
    def list_exercise_entries(
        db: Session, user_id: uuid.UUID, entry_date: date
    ) -> List[ExerciseEntry]:
        return ExerciseEntryRepository(db).get_for_day(user_id, entry_date)

    @staticmethod
    def get_exercise_entry(db: Session, entry_id: uuid.UUID) -> ExerciseEntry:
        entry = ExerciseEntryRepository(db).get_by_id(entry_id)
        if not entry:
            raise NotFoundError(f"Exercise entry not found: {entry_id}")
        return entry

    @staticmethod
    def add_exercise_entry(db: Session, entry_in: ExerciseEntryCreate) -> ExerciseEntry:
        entry = ExerciseEntry(
            user_id=entry_in.user_id,
            entry_date=entry_in.entry_date,
            name=entry_in.name,
            category=entry_in.category.value,
            minutes=entry_in.minutes,
            distance_km=entry_in.distance_km,
            notes=entry_in.notes,
        )
        try:
            entry = ExerciseEntryRepository(db).create(entry)
            logger.info(
                "Logged exercise %r for user %s on %s",
                entry.name,
                entry.user_id,
                entry.entry_date,
            )
            return entry
        except Exception:
            db.rollback()
            logger.exception("Error logging exercise for user %s", entry_in.user_id)
            raise

    @staticmethod
    def update_exercise_entry(
        db: Session, entry_id: uuid.UUID, update: ExerciseEntryUpdate
    ) -> ExerciseEntry:
        entry = LogService.get_exercise_entry(db, entry_id)
        changes = update.model_dump(exclude_unset=True)

        for field in ("entry_date", "name"):
            if changes.get(field) is not None:
                setattr(entry, field, changes[field])
        if changes.get("category") is not None:
            entry.category = changes["category"].value
        # minutes, distance and notes may be cleared explicitly
        for field in ("minutes", "distance_km", "notes"):
            if field in changes:
                setattr(entry, field, changes[field])

        try:
            return ExerciseEntryRepository(db).update(entry)
        except Exception:
            db.rollback()
            logger.exception("Error updating exercise entry %s", entry_id)
            raise

    @staticmethod
    def delete_exercise_entry(db: Session, entry_id: uuid.UUID) -> None:
        repo = ExerciseEntryRepository(db)
        try:
            if not repo.delete(entry_id):
                raise NotFoundError(f"Exercise entry not found: {entry_id}")
            logger.info("Deleted exercise entry %s", entry_id)
        except NotFoundError:
            raise
        except Exception:
            db.rollback()
            logger.exception("Error deleting exercise entry %s", entry_id)
            raise

    # ===== Cloning =====

    @staticmethod
    def clone_entries(db: Session, request: CloneEntriesRequest) -> int:
        """
        Copy entries of one day onto another day.

        Copies are snapshots: nutrients are carried over as logged, not
        recomputed from the current food. All copies are written in one
        transaction.

        Returns:
            Number of entries cloned (0 when the source day has none)

        Raises:
            ServiceValidationError: source and target date are the same, or a
                meal filter is given for exercise entries
        """
        if request.source_date == request.target_date:
            raise ServiceValidationError(
                "Source and target date must differ",
                details={"date": request.source_date.isoformat()},
                code="SAME_DATE",
            )

        if request.entity_type == CloneEntityType.FOOD_LOG:
            repo = FoodEntryRepository(db)
            sources = repo.get_for_day(
                request.user_id,
                request.source_date,
                request.meal_type.value if request.meal_type else None,
                request.entry_ids,
            )
            copies = [
                FoodEntry(
                    user_id=src.user_id,
                    entry_date=request.target_date,
                    meal_type=src.meal_type,
                    **{field: getattr(src, field) for field in _SNAPSHOT_FIELDS},
                )
                for src in sources
            ]
        else:
            if request.meal_type is not None:
                raise ServiceValidationError(
                    "meal_type only applies to food entries",
                    details={"entity_type": request.entity_type.value},
                )
            repo = ExerciseEntryRepository(db)
            sources = repo.get_for_day(
                request.user_id, request.source_date, request.entry_ids
            )
            copies = [
                ExerciseEntry(
                    user_id=src.user_id,
                    entry_date=request.target_date,
                    name=src.name,
                    category=src.category,
                    minutes=src.minutes,
                    distance_km=src.distance_km,
                    notes=src.notes,
                )
                for src in sources
            ]

        if not copies:
            return 0

        try:
            repo.add_all(copies)
            logger.info(
                "Cloned %d %s entries for user %s: %s -> %s",
                len(copies),
                request.entity_type.value,
                request.user_id,
                request.source_date,
                request.target_date,
            )
            return len(copies)
        except Exception:
            db.rollback()
            logger.exception("Error cloning entries for user %s", request.user_id)
            raise
