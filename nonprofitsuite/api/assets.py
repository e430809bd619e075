"""
Asset register and in-kind donation API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.asset_service import AssetService
from nonprofitsuite.services.in_kind_service import InKindService

router = APIRouter(tags=["assets"])


def _assets(db: Session, user_context) -> AssetService:
    _user, ctx = user_context
    return AssetService(db, ctx)


def _in_kind(db: Session, user_context) -> InKindService:
    _user, ctx = user_context
    return InKindService(db, ctx)


@router.get("/assets", response_model=schemas.Page)
def list_assets(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).get_assets(dict(request.query_params))


@router.post("/assets", response_model=schemas.AssetResponse, status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: schemas.AssetCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).create_asset(payload.model_dump(exclude_unset=True))


@router.get("/assets/register", response_model=list[schemas.AssetResponse])
def asset_register(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).get_asset_register()


@router.get("/assets/summary")
def asset_summary(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).get_asset_summary()


@router.get("/assets/depreciation-schedule")
def depreciation_schedule(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).get_depreciation_schedule()


@router.get("/assets/retired", response_model=list[schemas.AssetResponse])
def retired_assets(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).get_retired_assets(year)


@router.get("/assets/{asset_id}", response_model=schemas.AssetResponse)
def get_asset(asset_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).get_asset(asset_id)


@router.patch("/assets/{asset_id}", response_model=schemas.AssetResponse)
def update_asset(
    asset_id: int,
    payload: schemas.AssetUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).update_asset(asset_id, payload.model_dump(exclude_unset=True))


@router.post("/assets/{asset_id}/depreciate")
def depreciate_asset(asset_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"asset_id": asset_id, "depreciation": _assets(db, user_context).depreciate_asset(asset_id)}


@router.get("/assets/{asset_id}/current-value")
def current_value(asset_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"asset_id": asset_id, "current_value": _assets(db, user_context).calculate_current_value(asset_id)}


@router.post("/assets/{asset_id}/dispose", response_model=schemas.AssetResponse)
def dispose_asset(
    asset_id: int,
    payload: schemas.AssetDispose,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).dispose_asset(asset_id, payload.disposal_method, payload.disposal_value)


@router.post("/assets/{asset_id}/assign", response_model=schemas.AssetResponse)
def assign_asset(
    asset_id: int,
    person_id: int = Body(..., embed=True),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).assign_asset(asset_id, person_id)


@router.post("/assets/{asset_id}/transfer", response_model=schemas.AssetResponse)
def transfer_asset(
    asset_id: int,
    location: str = Body(..., embed=True),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _assets(db, user_context).transfer_asset(asset_id, location)


@router.get("/in-kind/categories")
def in_kind_categories():
    return InKindService.get_categories()


@router.get("/in-kind", response_model=schemas.Page)
def list_in_kind(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _in_kind(db, user_context).get_donations(dict(request.query_params))


@router.post("/in-kind", response_model=schemas.InKindResponse, status_code=status.HTTP_201_CREATED)
def record_in_kind(
    payload: schemas.InKindCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _in_kind(db, user_context).record_donation(payload.model_dump(exclude_unset=True))


@router.get("/in-kind/annual-value/{year}")
def annual_in_kind_value(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"year": year, "total_value": _in_kind(db, user_context).calculate_annual_in_kind_value(year)}


@router.get("/in-kind/{donation_id}", response_model=schemas.InKindResponse)
def get_in_kind(donation_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _in_kind(db, user_context).get_donation(donation_id)


@router.post("/in-kind/{donation_id}/convert-to-asset", response_model=schemas.AssetResponse,
             status_code=status.HTTP_201_CREATED)
def convert_to_asset(donation_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _assets(db, user_context).convert_donation_to_asset(donation_id)
