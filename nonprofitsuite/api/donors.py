"""
Donor and donation API endpoints.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.donor_service import DonorService

router = APIRouter(prefix="/donors", tags=["donors"])


def _service(db: Session, user_context) -> DonorService:
    _user, ctx = user_context
    return DonorService(db, ctx)


@router.get("", response_model=schemas.Page)
def list_donors(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_donors(dict(request.query_params))


@router.post("", response_model=schemas.DonorResponse, status_code=status.HTTP_201_CREATED)
def create_donor(
    payload: schemas.DonorCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_donor(payload.model_dump(exclude_unset=True))


@router.get("/levels")
def donor_levels():
    return DonorService.get_donor_levels()


@router.get("/{donor_id}", response_model=schemas.DonorResponse)
def get_donor(donor_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_donor(donor_id)


@router.patch("/{donor_id}", response_model=schemas.DonorResponse)
def update_donor(
    donor_id: int,
    payload: schemas.DonorUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).update_donor(donor_id, payload.model_dump(exclude_unset=True))


@router.post("/{donor_id}/donations", response_model=schemas.DonationResponse, status_code=status.HTTP_201_CREATED)
def record_donation(
    donor_id: int,
    payload: schemas.DonationCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).record_donation(donor_id, payload.model_dump(exclude_unset=True))


@router.get("/{donor_id}/donations", response_model=list[schemas.DonationResponse])
def donation_history(donor_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_donation_history(donor_id)
