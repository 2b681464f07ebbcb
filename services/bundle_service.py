from typing import List, Optional
from sqlalchemy.orm import Session
import logging
import uuid
from decimal import Decimal

from app.config import settings
from app.exceptions import NotFoundError, ServiceValidationError
from domain.enums import MealType
from domain.models import Bundle, BundleItem, FoodEntry
from domain.schemas.bundle_schemas import BundleCreate, BundleTotals
from repositories.bundle_repository import BundleRepository
from repositories.food_repository import FoodRepository
from repositories.log_entry_repository import FoodEntryRepository
from services.log_service import build_food_entry
from services.nutrition_math import nutrients_for, sum_nutrients

logger = logging.getLogger("nutrilog.bundles")


class BundleService:
    @staticmethod
    def create_bundle(db: Session, bundle_in: BundleCreate) -> Bundle:
        """
        Save a named bundle of foods.

        Every item is resolved once up front so a bundle can never hold a
        food that does not exist or a quantity that cannot be logged.

        Raises:
            ServiceValidationError: empty or too long name, no items, bad quantity
            NotFoundError: an item references a food that does not exist
        """
        name = bundle_in.name.strip()
        if not name or len(name) > settings.bundle_name_max_length:
            raise ServiceValidationError(
                f"Bundle name must be 1-{settings.bundle_name_max_length} characters",
                details={"name": bundle_in.name},
            )
        if not bundle_in.items:
            raise ServiceValidationError("A bundle needs at least one item")

        foods = FoodRepository(db).get_many(item.food_id for item in bundle_in.items)
        items = []
        for index, item in enumerate(bundle_in.items):
            food = foods.get(item.food_id)
            if not food:
                raise NotFoundError(f"Food not found: {item.food_id}")
            resolved, _ = nutrients_for(food, item.quantity, item.unit, item.serving_id)
            items.append(
                BundleItem(
                    food_id=food.food_id,
                    serving_id=resolved.serving_id,
                    item_name=food.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    order_index=index,
                )
            )

        bundle = Bundle(user_id=bundle_in.user_id, name=name, items=items)
        try:
            bundle = BundleRepository(db).create(bundle)
            logger.info("Created bundle %s (%s) with %d item(s)", bundle.bundle_id, name, len(items))
            return bundle
        except Exception:
            db.rollback()
            logger.exception("Error creating bundle for user %s", bundle_in.user_id)
            raise

    @staticmethod
    def get_bundle(db: Session, bundle_id: uuid.UUID) -> Bundle:
        bundle = BundleRepository(db).get_by_id(bundle_id)
        if not bundle:
            raise NotFoundError(f"Bundle not found: {bundle_id}")
        return bundle

    @staticmethod
    def bundle_totals(db: Session, bundle: Bundle) -> Optional[BundleTotals]:
        """Nutrients the bundle would log now; None if any item's food is gone"""
        foods = FoodRepository(db).get_many(item.food_id for item in bundle.items)
        vectors = []
        for item in bundle.items:
            food = foods.get(item.food_id)
            if food is None:
                return None
            _, nutrients = nutrients_for(food, item.quantity, item.unit, item.serving_id)
            vectors.append(nutrients)

        total = sum_nutrients(vectors)
        return BundleTotals(
            calories_kcal=total.calories_kcal,
            protein_g=total.protein_g or Decimal("0"),
            carbs_g=total.carbs_g or Decimal("0"),
            fat_g=total.fat_g or Decimal("0"),
            fiber_g=total.fiber_g or Decimal("0"),
        )

    @staticmethod
    def list_bundles(db: Session, user_id: uuid.UUID) -> List[Bundle]:
        return BundleRepository(db).get_by_user_id(user_id)

    @staticmethod
    def delete_bundle(db: Session, bundle_id: uuid.UUID) -> None:
        repo = BundleRepository(db)
        try:
            if not repo.delete(bundle_id):
                raise NotFoundError(f"Bundle not found: {bundle_id}")
            logger.info("Deleted bundle %s", bundle_id)
        except NotFoundError:
            raise
        except Exception:
            db.rollback()
            logger.exception("Error deleting bundle %s", bundle_id)
            raise

    @staticmethod
    def log_bundle(
        db: Session, bundle_id: uuid.UUID, entry_date, meal_type: MealType
    ) -> List[FoodEntry]:
        """
        Log every item of a bundle as a food entry on one day and meal.

        All items are resolved before anything is written: a missing food or
        an invalid quantity aborts the whole bundle with no entries added.
        The entries and their summary updates commit as one transaction.

        Raises:
            NotFoundError: bundle missing, or an item's food no longer exists
            ServiceValidationError: an item has an invalid quantity
        """
        bundle = BundleService.get_bundle(db, bundle_id)
        foods = FoodRepository(db).get_many(item.food_id for item in bundle.items)

        entries = []
        for item in bundle.items:
            food = foods.get(item.food_id)
            if food is None:
                raise NotFoundError(
                    f"Food for bundle item {item.item_name or item.bundle_item_id} no longer exists",
                    details={"bundle_id": str(bundle_id), "food_id": str(item.food_id)},
                )
            entries.append(
                build_food_entry(
                    food,
                    user_id=bundle.user_id,
                    entry_date=entry_date,
                    meal_type=meal_type.value,
                    quantity=item.quantity,
                    unit=item.unit,
                    serving_id=item.serving_id,
                )
            )

        try:
            entries = FoodEntryRepository(db).add_all(entries)
            logger.info(
                "Logged bundle %s: %d entries for user %s on %s/%s",
                bundle_id,
                len(entries),
                bundle.user_id,
                entry_date,
                meal_type.value,
            )
            return entries
        except Exception:
            db.rollback()
            logger.exception("Error logging bundle %s", bundle_id)
            raise
