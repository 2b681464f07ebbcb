"""Bundle routes"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
import logging
from uuid import UUID
from typing import List

from domain.models import get_db_session
from domain.schemas.bundle_schemas import (
    BundleCreate,
    BundleResponse,
    LogBundleRequest,
    LogBundleResponse,
)
from domain.schemas.log_schemas import FoodEntryResponse
from services.bundle_service import BundleService

router = APIRouter(prefix="/bundles", tags=["Bundles"])
logger = logging.getLogger("nutrilog.api.bundles")


def _with_totals(db: Session, bundle) -> BundleResponse:
    response = BundleResponse.model_validate(bundle)
    return response.model_copy(update={"totals": BundleService.bundle_totals(db, bundle)})


@router.post("", response_model=BundleResponse, status_code=status.HTTP_201_CREATED)
def create_bundle(bundle: BundleCreate, db: Session = Depends(get_db_session)):
    created = BundleService.create_bundle(db, bundle)
    return _with_totals(db, created)


@router.get("", response_model=List[BundleResponse])
def list_bundles(user_id: UUID = Query(...), db: Session = Depends(get_db_session)):
    """Bundles of a user with the totals they would log now"""
    return [_with_totals(db, b) for b in BundleService.list_bundles(db, user_id)]


@router.delete("/{bundle_id}")
def delete_bundle(bundle_id: UUID, db: Session = Depends(get_db_session)):
    BundleService.delete_bundle(db, bundle_id)
    return {"status": "ok", "removed": str(bundle_id)}


@router.post("/{bundle_id}/log", response_model=LogBundleResponse, status_code=status.HTTP_201_CREATED)
def log_bundle(
    bundle_id: UUID, request: LogBundleRequest, db: Session = Depends(get_db_session)
):
    """
    Log every item of the bundle into one meal.

    All or nothing: if any item's food is gone, no entries are added.
    """
    entries = BundleService.log_bundle(db, bundle_id, request.entry_date, request.meal_type)
    return LogBundleResponse(
        bundle_id=bundle_id,
        entries=[FoodEntryResponse.model_validate(e) for e in entries],
    )
