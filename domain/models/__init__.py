"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    init_database,
    get_db_session,
)
from domain.models.food import FoodDefinition, ServingDefinition, NUTRIENT_FIELDS
from domain.models.log_entry import FoodEntry, ExerciseEntry
from domain.models.aggregate import (
    DailySumConsumed,
    DailySumConsumedMeal,
    DailySumExercises,
)
from domain.models.bundle import Bundle, BundleItem

# Registers the flush hooks that maintain the aggregate tables
from domain.models import triggers  # noqa: E402,F401

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_database",
    "get_db_session",
    # Food catalogue
    "FoodDefinition",
    "ServingDefinition",
    "NUTRIENT_FIELDS",
    # Log store
    "FoodEntry",
    "ExerciseEntry",
    # Aggregate store
    "DailySumConsumed",
    "DailySumConsumedMeal",
    "DailySumExercises",
    # Bundles
    "Bundle",
    "BundleItem",
]
