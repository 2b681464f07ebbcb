"""
Bundle Repository - Data access layer for bundles
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import Bundle


class BundleRepository(BaseRepository[Bundle]):
    def __init__(self, db: Session):
        super().__init__(db, Bundle)

    def get_by_id(self, bundle_id: UUID) -> Optional[Bundle]:
        return (
            self.db.query(Bundle)
            .options(selectinload(Bundle.items))
            .filter(Bundle.bundle_id == bundle_id)
            .first()
        )

    def get_by_user_id(self, user_id: UUID) -> List[Bundle]:
        """Bundles of a user, newest first"""
        return (
            self.db.query(Bundle)
            .options(selectinload(Bundle.items))
            .filter(Bundle.user_id == user_id)
            .order_by(Bundle.created_at.desc(), Bundle.name)
            .all()
        )
