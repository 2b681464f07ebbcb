"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.nutrition_schemas import NutrientVector
from domain.schemas.food_schemas import (
    ServingCreate,
    ServingResponse,
    FoodCreate,
    FoodUpdate,
    FoodResponse,
    NutrientPreviewResponse,
)
from domain.schemas.log_schemas import (
    FoodEntryCreate,
    FoodEntryUpdate,
    FoodEntryResponse,
    ExerciseEntryCreate,
    ExerciseEntryUpdate,
    ExerciseEntryResponse,
    CloneEntriesRequest,
    CloneEntriesResponse,
)
from domain.schemas.summary_schemas import (
    DailyConsumedResponse,
    MealConsumedResponse,
    DailyExerciseResponse,
    RecomputeRequest,
    RecomputeRangeRequest,
    RecomputeResponse,
)
from domain.schemas.bundle_schemas import (
    BundleItemCreate,
    BundleCreate,
    BundleItemResponse,
    BundleTotals,
    BundleResponse,
    LogBundleRequest,
    LogBundleResponse,
)

__all__ = [
    "NutrientVector",
    # Food catalogue
    "ServingCreate",
    "ServingResponse",
    "FoodCreate",
    "FoodUpdate",
    "FoodResponse",
    "NutrientPreviewResponse",
    # Log entries
    "FoodEntryCreate",
    "FoodEntryUpdate",
    "FoodEntryResponse",
    "ExerciseEntryCreate",
    "ExerciseEntryUpdate",
    "ExerciseEntryResponse",
    "CloneEntriesRequest",
    "CloneEntriesResponse",
    # Summaries
    "DailyConsumedResponse",
    "MealConsumedResponse",
    "DailyExerciseResponse",
    "RecomputeRequest",
    "RecomputeRangeRequest",
    "RecomputeResponse",
    # Bundles
    "BundleItemCreate",
    "BundleCreate",
    "BundleItemResponse",
    "BundleTotals",
    "BundleResponse",
    "LogBundleRequest",
    "LogBundleResponse",
]
