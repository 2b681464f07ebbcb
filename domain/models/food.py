"""
Food catalogue models: food definitions and their named servings.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    TIMESTAMP,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


# Nutrient columns shared by foods and food entries (order is display order)
NUTRIENT_FIELDS = (
    "calories_kcal",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fiber_g",
    "saturated_fat_g",
    "trans_fat_g",
    "sugar_g",
    "sodium_mg",
)


class FoodDefinition(Base):
    """A food whose nutrients are given per canonical serving (serving_size x serving_unit)"""

    __tablename__ = "food_master"

    food_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    brand = Column(Text)
    serving_size = Column(Numeric, nullable=False)
    serving_unit = Column(Text, nullable=False)

    calories_kcal = Column(Numeric, nullable=False)
    protein_g = Column(Numeric)
    carbs_g = Column(Numeric)
    fat_g = Column(Numeric)
    fiber_g = Column(Numeric)
    saturated_fat_g = Column(Numeric)
    trans_fat_g = Column(Numeric)
    sugar_g = Column(Numeric)
    sodium_mg = Column(Numeric)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    servings = relationship(
        "ServingDefinition",
        back_populates="food",
        cascade="all, delete-orphan",
        order_by="ServingDefinition.sort_order",
    )

    __table_args__ = (
        CheckConstraint("serving_size > 0", name="ck_food_serving_size_pos"),
        CheckConstraint(
            "calories_kcal >= 0"
            " AND COALESCE(protein_g, 0) >= 0"
            " AND COALESCE(carbs_g, 0) >= 0"
            " AND COALESCE(fat_g, 0) >= 0"
            " AND COALESCE(fiber_g, 0) >= 0"
            " AND COALESCE(saturated_fat_g, 0) >= 0"
            " AND COALESCE(trans_fat_g, 0) >= 0"
            " AND COALESCE(sugar_g, 0) >= 0"
            " AND COALESCE(sodium_mg, 0) >= 0",
            name="ck_food_nutrients_nonneg",
        ),
    )


class ServingDefinition(Base):
    """Named serving of a food, measured in exactly one of grams or millilitres"""

    __tablename__ = "food_serving"

    serving_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    food_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("food_master.food_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    serving_name = Column(Text, nullable=False)
    weight_g = Column(Numeric)
    volume_ml = Column(Numeric)
    sort_order = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)

    food = relationship("FoodDefinition", back_populates="servings")

    __table_args__ = (
        CheckConstraint(
            "(weight_g IS NULL) <> (volume_ml IS NULL)",
            name="ck_serving_weight_xor_volume",
        ),
        CheckConstraint(
            "COALESCE(weight_g, 1) > 0 AND COALESCE(volume_ml, 1) > 0",
            name="ck_serving_amount_pos",
        ),
    )
