"""
People API endpoints.

People are the shared contact records that donors, volunteers and advocacy
actions point at.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.api.permissions import check_capability
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.db.repositories import people as people_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils.capabilities import CAP_EDIT_POSTS
from nonprofitsuite.utils.sanitize import sanitize_email, sanitize_text_field

router = APIRouter(prefix="/people", tags=["people"])


@router.post("", response_model=schemas.PersonResponse, status_code=status.HTTP_201_CREATED)
def create_person(
    payload: schemas.PersonCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    check_capability(ctx, CAP_EDIT_POSTS, "manage people")
    first_name = sanitize_text_field(payload.first_name)
    if not first_name:
        raise ServiceError("missing_required", "First name is required.")
    person = people_repo.create_person(
        db,
        first_name=first_name,
        last_name=sanitize_text_field(payload.last_name) or None,
        email=sanitize_email(payload.email) or None,
        phone=sanitize_text_field(payload.phone) or None,
    )
    db.commit()
    db.refresh(person)
    return person


@router.get("/{person_id}", response_model=schemas.PersonResponse)
def get_person(
    person_id: int,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    person = people_repo.get_person(db, person_id)
    if person is None:
        raise ServiceError("not_found", "Person not found.")
    return person
