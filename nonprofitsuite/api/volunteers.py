"""
Volunteer and volunteer-hours API endpoints.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.volunteer_service import VolunteerService

router = APIRouter(prefix="/volunteers", tags=["volunteers"])


def _service(db: Session, user_context) -> VolunteerService:
    _user, ctx = user_context
    return VolunteerService(db, ctx)


@router.get("", response_model=schemas.Page)
def list_volunteers(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_volunteers(dict(request.query_params))


@router.post("", response_model=schemas.VolunteerResponse, status_code=status.HTTP_201_CREATED)
def create_volunteer(
    payload: schemas.VolunteerCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_volunteer(payload.model_dump(exclude_unset=True))


@router.get("/statuses")
def volunteer_statuses():
    return VolunteerService.get_volunteer_statuses()


@router.put("/{volunteer_id}/status", response_model=schemas.VolunteerResponse)
def update_status(
    volunteer_id: int,
    payload: schemas.VolunteerStatusUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).update_volunteer_status(volunteer_id, payload.status)


@router.post("/{volunteer_id}/hours", response_model=schemas.HoursResponse, status_code=status.HTTP_201_CREATED)
def log_hours(
    volunteer_id: int,
    payload: schemas.HoursCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).log_hours(volunteer_id, payload.model_dump(exclude_unset=True))


@router.get("/{volunteer_id}/hours", response_model=list[schemas.HoursResponse])
def list_hours(
    volunteer_id: int,
    approved_only: bool = False,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).get_volunteer_hours(volunteer_id, approved_only=approved_only)


@router.post("/hours/{hours_id}/approve", response_model=schemas.HoursResponse)
def approve_hours(hours_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).approve_hours(hours_id)
