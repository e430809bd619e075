"""
Repositories for volunteers and logged volunteer hours.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.utils.pagination import PaginationArgs


def create_volunteer(db: Session, values: Dict[str, Any]) -> models.Volunteer:
    volunteer = models.Volunteer(**values)
    db.add(volunteer)
    db.flush()
    return volunteer


def get_volunteer(db: Session, volunteer_id: int) -> Optional[models.Volunteer]:
    return db.get(models.Volunteer, volunteer_id)


def list_volunteers(db: Session, *, args: PaginationArgs) -> Tuple[List[models.Volunteer], int]:
    q = db.query(models.Volunteer)
    if args.filters.get("volunteer_status"):
        q = q.filter(models.Volunteer.volunteer_status == args.filters["volunteer_status"])
    total = q.count()
    return args.apply(q, models.Volunteer).all(), total


def insert_hours(db: Session, values: Dict[str, Any]) -> models.VolunteerHours:
    row = models.VolunteerHours(**values)
    db.add(row)
    db.flush()
    return row


def get_hours(db: Session, hours_id: int) -> Optional[models.VolunteerHours]:
    return db.get(models.VolunteerHours, hours_id)


def approve_hours(db: Session, row: models.VolunteerHours, *, approver_id: Optional[int]) -> models.VolunteerHours:
    row.approved = True
    row.approved_by = approver_id
    row.approved_at = datetime.now(timezone.utc)
    db.flush()
    return row


def recompute_total_hours(db: Session, volunteer_id: int) -> models.Volunteer:
    """Refresh total_hours from approved hour rows."""
    total = (
        db.query(func.coalesce(func.sum(models.VolunteerHours.hours), 0.0))
        .filter(
            models.VolunteerHours.volunteer_id == volunteer_id,
            models.VolunteerHours.approved.is_(True),
        )
        .scalar()
    )
    volunteer = db.get(models.Volunteer, volunteer_id)
    volunteer.total_hours = float(total or 0.0)
    db.flush()
    return volunteer


def list_hours(db: Session, *, volunteer_id: int, approved_only: bool = False) -> List[models.VolunteerHours]:
    q = db.query(models.VolunteerHours).filter(models.VolunteerHours.volunteer_id == volunteer_id)
    if approved_only:
        q = q.filter(models.VolunteerHours.approved.is_(True))
    return q.order_by(models.VolunteerHours.activity_date.desc(), models.VolunteerHours.id.desc()).all()


def count_volunteers_in_range(db: Session, *, start, end) -> int:
    return int(
        db.query(func.count(func.distinct(models.VolunteerHours.volunteer_id)))
        .filter(models.VolunteerHours.activity_date >= start, models.VolunteerHours.activity_date <= end)
        .scalar()
        or 0
    )
