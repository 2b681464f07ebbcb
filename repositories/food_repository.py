"""
Food Repository - Data access layer for the food catalogue
"""

from typing import Dict, Iterable, Optional
from uuid import UUID
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import FoodDefinition


class FoodRepository(BaseRepository[FoodDefinition]):
    """Repository for foods and their named servings"""

    def __init__(self, db: Session):
        super().__init__(db, FoodDefinition)

    def get_by_id(self, food_id: UUID) -> Optional[FoodDefinition]:
        """Get food by ID with its servings loaded"""
        return (
            self.db.query(FoodDefinition)
            .options(selectinload(FoodDefinition.servings))
            .filter(FoodDefinition.food_id == food_id)
            .first()
        )

    def get_many(self, food_ids: Iterable[UUID]) -> Dict[UUID, FoodDefinition]:
        """Foods keyed by ID; unknown IDs are simply missing from the result"""
        ids = list({fid for fid in food_ids if fid is not None})
        if not ids:
            return {}
        foods = (
            self.db.query(FoodDefinition)
            .options(selectinload(FoodDefinition.servings))
            .filter(FoodDefinition.food_id.in_(ids))
            .all()
        )
        return {food.food_id: food for food in foods}
