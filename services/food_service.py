from typing import Optional
from sqlalchemy.orm import Session
import logging
import uuid

from domain.models import FoodDefinition, ServingDefinition
from domain.schemas.food_schemas import FoodCreate, FoodUpdate, NutrientPreviewResponse
from repositories.food_repository import FoodRepository
from services.nutrition_math import nutrients_for
from app.exceptions import NotFoundError

logger = logging.getLogger("nutrilog.foods")


class FoodService:
    @staticmethod
    def create_food(db: Session, food_in: FoodCreate) -> FoodDefinition:
        """Add a food with its named servings"""
        food_repo = FoodRepository(db)
        food = FoodDefinition(
            name=food_in.name,
            brand=food_in.brand,
            serving_size=food_in.serving_size,
            serving_unit=food_in.serving_unit,
            **food_in.model_dump(
                include={
                    "calories_kcal",
                    "protein_g",
                    "carbs_g",
                    "fat_g",
                    "fiber_g",
                    "saturated_fat_g",
                    "trans_fat_g",
                    "sugar_g",
                    "sodium_mg",
                }
            ),
        )
        food.servings = [
            ServingDefinition(
                serving_name=s.serving_name,
                weight_g=s.weight_g,
                volume_ml=s.volume_ml,
                sort_order=s.sort_order,
                is_default=s.is_default,
            )
            for s in food_in.servings
        ]
        try:
            food = food_repo.create(food)
            logger.info("Created food %s (%s)", food.food_id, food.name)
            return food
        except Exception:
            db.rollback()
            logger.exception("Error creating food %s", food_in.name)
            raise

    @staticmethod
    def get_food(db: Session, food_id: uuid.UUID) -> FoodDefinition:
        food = FoodRepository(db).get_by_id(food_id)
        if not food:
            raise NotFoundError(f"Food not found: {food_id}")
        return food

    @staticmethod
    def update_food(db: Session, food_id: uuid.UUID, update: FoodUpdate) -> FoodDefinition:
        """
        Edit a food and optionally replace its named servings.

        Only the catalogue changes. Entries already logged keep their nutrient
        snapshot and the summaries are not touched; entries that pointed at a
        replaced serving lose that serving reference.
        """
        food_repo = FoodRepository(db)
        food = FoodService.get_food(db, food_id)
        changes = update.model_dump(exclude_unset=True, exclude={"servings"})

        for field, value in changes.items():
            setattr(food, field, value)
        if update.servings is not None:
            food.servings = [
                ServingDefinition(
                    serving_name=s.serving_name,
                    weight_g=s.weight_g,
                    volume_ml=s.volume_ml,
                    sort_order=s.sort_order,
                    is_default=s.is_default,
                )
                for s in update.servings
            ]

        try:
            food = food_repo.update(food)
            logger.info("Updated food %s (%s)", food.food_id, ", ".join(sorted(update.model_fields_set)))
            return food
        except Exception:
            db.rollback()
            logger.exception("Error updating food %s", food_id)
            raise

    @staticmethod
    def delete_food(db: Session, food_id: uuid.UUID) -> None:
        """
        Delete a food and its servings.

        Logged entries keep their nutrient snapshot; their food reference is
        cleared. Summaries are unaffected.
        """
        food_repo = FoodRepository(db)
        try:
            if not food_repo.delete(food_id):
                raise NotFoundError(f"Food not found: {food_id}")
            logger.info("Deleted food %s", food_id)
        except NotFoundError:
            raise
        except Exception:
            db.rollback()
            logger.exception("Error deleting food %s", food_id)
            raise

    @staticmethod
    def preview_nutrients(
        db: Session,
        food_id: uuid.UUID,
        quantity,
        unit: Optional[str] = None,
        serving_id: Optional[uuid.UUID] = None,
    ) -> NutrientPreviewResponse:
        """Nutrients a quantity of the food would be logged with; nothing is written"""
        food = FoodService.get_food(db, food_id)
        resolved, nutrients = nutrients_for(food, quantity, unit, serving_id)
        return NutrientPreviewResponse(
            food_id=food.food_id,
            quantity=quantity,
            unit=unit,
            serving_id=resolved.serving_id,
            path=resolved.path,
            base_amount=resolved.base_amount,
            scale_factor=resolved.scale_factor,
            nutrients=nutrients,
        )
