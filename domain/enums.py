"""
Domain enums for NutriLog.
Contains the enumeration types shared by models, schemas and services.
"""

import enum


class MealType(str, enum.Enum):
    """Meal slots a food entry can be logged under (sub-key of meal summaries)"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    AFTERNOON_SNACK = "afternoon_snack"
    DINNER = "dinner"
    LATE_NIGHT = "late_night"


# Display / iteration order
MEAL_TYPE_ORDER = [
    MealType.BREAKFAST,
    MealType.LUNCH,
    MealType.AFTERNOON_SNACK,
    MealType.DINNER,
    MealType.LATE_NIGHT,
]


class ExerciseCategory(str, enum.Enum):
    """Exercise categories that summaries break down by"""

    CARDIO_MIND_BODY = "cardio_mind_body"
    STRENGTH = "strength"
    OTHER = "other"


class UnitClass(str, enum.Enum):
    """Measurement class of a unit"""

    WEIGHT = "weight"
    VOLUME = "volume"
    COUNT = "count"


class ResolutionPath(str, enum.Enum):
    """How a logged quantity was scaled against a food"""

    SERVING = "serving"
    RAW = "raw"


class CloneEntityType(str, enum.Enum):
    """Log sources that can be cloned between days"""

    FOOD_LOG = "food_log"
    EXERCISE_LOG = "exercise_log"
