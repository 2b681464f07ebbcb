"""Services package - Business logic layer"""

from services.food_service import FoodService
from services.log_service import LogService
from services.aggregate_service import AggregateService
from services.bundle_service import BundleService

# Note: serving_resolver and nutrition_math contain pure functions, not classes

__all__ = [
    "FoodService",
    "LogService",
    "AggregateService",
    "BundleService",
]
