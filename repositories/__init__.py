"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.food_repository import FoodRepository
from repositories.log_entry_repository import (
    FoodEntryRepository,
    ExerciseEntryRepository,
)
from repositories.aggregate_repository import AggregateRepository
from repositories.bundle_repository import BundleRepository

__all__ = [
    "BaseRepository",
    "FoodRepository",
    "FoodEntryRepository",
    "ExerciseEntryRepository",
    "AggregateRepository",
    "BundleRepository",
]
