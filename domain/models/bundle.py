"""
Bundle models: a user's named collection of foods that can be logged in one go.
"""

from sqlalchemy import (
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


class Bundle(Base):
    """Named collection of (food, quantity, unit) items"""

    __tablename__ = "bundle"

    bundle_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items = relationship(
        "BundleItem",
        back_populates="bundle",
        cascade="all, delete-orphan",
        order_by="BundleItem.order_index",
    )

    __table_args__ = (
        CheckConstraint("length(name) >= 1", name="ck_bundle_name_nonempty"),
    )


class BundleItem(Base):
    """One food reference inside a bundle"""

    __tablename__ = "bundle_item"

    bundle_item_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bundle_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bundle.bundle_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # SET NULL keeps the item around after its food is deleted; logging the
    # bundle then fails instead of silently dropping the item.
    food_id = Column(
        Uuid(as_uuid=True), ForeignKey("food_master.food_id", ondelete="SET NULL")
    )
    serving_id = Column(
        Uuid(as_uuid=True), ForeignKey("food_serving.serving_id", ondelete="SET NULL")
    )
    item_name = Column(Text)
    quantity = Column(Numeric, nullable=False)
    unit = Column(Text, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    bundle = relationship("Bundle", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bundle_item_quantity_pos"),
    )
